import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jacore.core.database import Base
from jacore.core.exceptions import ResourceAlreadyExistsError
from jacore.core.security import decode_access_token
from jacore.models.audit import AuditEvent
from jacore.models.security import RefreshToken
from jacore.schemas.auth import LoginDto, RegisterDto
from jacore.services.auth_service import auth_service
from jacore.services.user_service import user_service


def _make_session():
    engine = create_engine("sqlite:///:memory:")
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    user_service.ensure_roles(db)
    return db


def _register(db, email="alice@example.com", password="correct-horse-battery"):
    return auth_service.register(
        db,
        RegisterDto(email=email, first_name="Alice", last_name="Smith", password=password),
    )


def test_register_returns_token_pair_with_default_role():
    db = _make_session()
    try:
        result = _register(db, email="  Alice@Example.com ")

        assert result.succeeded is True
        assert result.email == "alice@example.com"
        assert result.roles == ["User"]
        assert result.refresh_token
        claims = decode_access_token(result.token)
        assert claims["sub"] == result.user_id
        assert claims["given_name"] == "Alice"
        assert claims["family_name"] == "Smith"
        assert claims["roles"] == ["User"]
        assert claims["isActive"] is True
    finally:
        db.close()


def test_register_rejects_duplicate_email():
    db = _make_session()
    try:
        _register(db)
        with pytest.raises(ResourceAlreadyExistsError):
            _register(db)
    finally:
        db.close()


def test_login_failure_is_reported_not_raised():
    db = _make_session()
    try:
        _register(db)
        result = auth_service.login(db, LoginDto(email="alice@example.com", password="wrong-password"))
        assert result.succeeded is False
        assert result.token is None
        assert result.message == "Invalid email or password."

        unknown = auth_service.login(db, LoginDto(email="nobody@example.com", password="whatever"))
        assert unknown.succeeded is False
    finally:
        db.close()


def test_login_locks_account_after_repeated_failures():
    db = _make_session()
    try:
        _register(db)
        results = [
            auth_service.login(db, LoginDto(email="alice@example.com", password="wrong-password"))
            for _ in range(5)
        ]
        assert all(not r.succeeded for r in results)
        assert results[-1].message.startswith("Account is locked until")

        locked = auth_service.login(db, LoginDto(email="alice@example.com", password="correct-horse-battery"))
        assert locked.succeeded is False
        assert locked.message.startswith("Account is locked until")
    finally:
        db.close()


def test_login_refused_for_inactive_account():
    db = _make_session()
    try:
        _register(db)
        user = user_service.get_user_by_email(db, "alice@example.com")
        user.is_active = False
        db.commit()

        result = auth_service.login(db, LoginDto(email="alice@example.com", password="correct-horse-battery"))
        assert result.succeeded is False
        assert result.message == "Account is inactive."
    finally:
        db.close()


def test_refresh_then_replay_scenario():
    db = _make_session()
    try:
        login = _register(db)
        t1 = login.refresh_token

        second = auth_service.refresh(db, t1, login.user_id)
        assert second.succeeded is True
        t2 = second.refresh_token

        replay = auth_service.refresh(db, t1, login.user_id)
        assert replay.succeeded is False
        assert replay.message == "Invalid refresh token."

        third = auth_service.refresh(db, t2, login.user_id)
        assert third.succeeded is True
    finally:
        db.close()


def test_refresh_without_identity_or_known_token_fails():
    db = _make_session()
    try:
        login = _register(db)
        assert auth_service.refresh(db, login.refresh_token, None).succeeded is False

        unknown = auth_service.refresh(db, "never-issued", login.user_id)
        assert unknown.succeeded is False
        assert unknown.message == "Refresh token not found"
    finally:
        db.close()


def test_logout_revokes_and_is_audited():
    db = _make_session()
    try:
        login = _register(db)
        assert auth_service.logout(db, login.refresh_token, login.user_id, ip_address="10.0.0.1") is True
        assert auth_service.logout(db, login.refresh_token, login.user_id) is True

        assert db.query(RefreshToken).one().is_revoked is True
        assert auth_service.refresh(db, login.refresh_token, login.user_id).succeeded is False

        events = db.query(AuditEvent).filter(AuditEvent.action == "auth.logout").all()
        assert len(events) == 2
        assert events[0].user_id == login.user_id
    finally:
        db.close()
