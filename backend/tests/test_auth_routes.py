from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jacore.api.v1 import auth as auth_routes
from jacore.api.v1 import users as user_routes
from jacore.core.database import Base
from jacore.core.exceptions import AuthenticationError, RateLimitExceededError
from jacore.models.audit import AuditEvent
from jacore.schemas.auth import LoginDto, RegisterDto, TokenRefreshRequestDto
from jacore.services.rate_limiter import InMemoryRateLimiter
from jacore.services.user_service import user_service


def _make_session():
    engine = create_engine("sqlite:///:memory:")
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    user_service.ensure_roles(db)
    return db


def _request(host="127.0.0.1"):
    return SimpleNamespace(client=SimpleNamespace(host=host))


@pytest.fixture(autouse=True)
def fresh_rate_limiter(monkeypatch):
    limiter = InMemoryRateLimiter()
    monkeypatch.setattr(auth_routes, "rate_limiter", limiter)
    return limiter


def _register(db):
    return auth_routes.register(
        RegisterDto(email="alice@example.com", first_name="Alice", last_name="Smith", password="correct-horse-battery"),
        request=_request(),
        db=db,
    )


def test_login_route_returns_tokens_and_rejects_bad_password():
    db = _make_session()
    try:
        _register(db)
        ok = auth_routes.login(
            LoginDto(email="alice@example.com", password="correct-horse-battery"),
            request=_request(),
            db=db,
        )
        assert ok.succeeded is True
        assert ok.token and ok.refresh_token

        with pytest.raises(AuthenticationError) as exc_info:
            auth_routes.login(
                LoginDto(email="alice@example.com", password="wrong-password"),
                request=_request(),
                db=db,
            )
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid email or password."
    finally:
        db.close()


def test_refresh_route_rotates_and_rejects_replay():
    db = _make_session()
    try:
        registered = _register(db)
        body = TokenRefreshRequestDto(refresh_token=registered.refresh_token)

        rotated = auth_routes.refresh_token(body, request=_request(), user_id=registered.user_id, db=db)
        assert rotated.refresh_token != registered.refresh_token

        with pytest.raises(AuthenticationError):
            auth_routes.refresh_token(body, request=_request(), user_id=registered.user_id, db=db)
    finally:
        db.close()


def test_logout_route_always_returns_no_content():
    db = _make_session()
    try:
        registered = _register(db)
        user = user_service.get_user_by_id(db, registered.user_id)

        for raw in (registered.refresh_token, registered.refresh_token, "never-issued"):
            response = auth_routes.logout(
                TokenRefreshRequestDto(refresh_token=raw),
                request=_request(),
                current_user=user,
                db=db,
            )
            assert response.status_code == 204

        assert db.query(AuditEvent).filter(AuditEvent.action == "auth.logout").count() == 3
    finally:
        db.close()


def test_me_routes_describe_current_user():
    db = _make_session()
    try:
        registered = _register(db)
        user = user_service.get_user_by_id(db, registered.user_id)

        me = auth_routes.get_current_user_info(current_user=user)
        assert me.user_id == user.id
        assert me.roles == ["User"]

        profile = user_routes.get_my_profile(current_user=user)
        assert profile.email == "alice@example.com"
        assert profile.model_dump(by_alias=True)["firstName"] == "Alice"
    finally:
        db.close()


def test_login_rate_limit(monkeypatch):
    db = _make_session()
    try:
        monkeypatch.setattr(auth_routes.settings, "LOGIN_RATE_LIMIT_PER_MINUTE", 2)
        credentials = LoginDto(email="nobody@example.com", password="whatever")
        for _ in range(2):
            with pytest.raises(AuthenticationError):
                auth_routes.login(credentials, request=_request("10.1.1.1"), db=db)

        with pytest.raises(RateLimitExceededError):
            auth_routes.login(credentials, request=_request("10.1.1.1"), db=db)
    finally:
        db.close()


def test_successful_login_clears_login_attempts(monkeypatch):
    db = _make_session()
    try:
        monkeypatch.setattr(auth_routes.settings, "LOGIN_RATE_LIMIT_PER_MINUTE", 2)
        _register(db)
        wrong = LoginDto(email="alice@example.com", password="wrong-password")
        right = LoginDto(email="alice@example.com", password="correct-horse-battery")

        for _ in range(2):
            with pytest.raises(AuthenticationError):
                auth_routes.login(wrong, request=_request("10.2.2.2"), db=db)
            assert auth_routes.login(right, request=_request("10.2.2.2"), db=db).succeeded is True
    finally:
        db.close()
