import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jacore.core.database import Base
from jacore.core.exceptions import (
    AuthorizationError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)
from jacore.models.audit import AuditEvent
from jacore.models.user import Role, User
from jacore.schemas.user import UpdateUserDto
from jacore.services.token_service import token_service
from jacore.services.user_service import DEACTIVATED_LOCKOUT_END, user_service


def _make_session():
    engine = create_engine("sqlite:///:memory:")
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    user_service.ensure_roles(db)
    return db


def _make_user(db, email, *roles):
    user = User(
        email=email,
        first_name="Test",
        last_name="User",
        password_hash="hash",
        is_active=True,
        failed_login_attempts=0,
    )
    user.roles = db.query(Role).filter(Role.name.in_(roles or ("User",))).all()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _update(email, first_name="Alicia", **kwargs):
    return UpdateUserDto(first_name=first_name, last_name="Smith", email=email, **kwargs)


def test_ensure_roles_is_idempotent():
    db = _make_session()
    try:
        assert user_service.ensure_roles(db) == []
        assert sorted(r.name for r in db.query(Role).all()) == ["Admin", "Debug", "Management", "User"]
    finally:
        db.close()


def test_ensure_admin_seeds_once():
    db = _make_session()
    try:
        admin = user_service.ensure_admin(db)
        assert admin is not None
        assert admin.role_names == ["Admin"]
        assert user_service.ensure_admin(db) is None
    finally:
        db.close()


def test_create_user_rejects_unknown_role():
    db = _make_session()
    try:
        with pytest.raises(ValidationError):
            user_service.create_user(
                db,
                email="alice@example.com",
                first_name="Alice",
                last_name="Smith",
                password="correct-horse-battery",
                roles=["Wizard"],
            )
        assert db.query(User).count() == 0
    finally:
        db.close()


def test_user_can_update_self_but_not_admin_fields():
    db = _make_session()
    try:
        alice = _make_user(db, "alice@example.com")
        dto = user_service.update_user(
            db,
            alice.id,
            _update("alice.smith@example.com", is_active=False, roles=["Admin"]),
            alice,
        )
        assert dto.first_name == "Alicia"
        assert dto.email == "alice.smith@example.com"
        assert dto.is_active is True
        assert dto.roles == ["User"]
        assert db.query(AuditEvent).count() == 0
    finally:
        db.close()


def test_user_cannot_update_or_view_someone_else():
    db = _make_session()
    try:
        alice = _make_user(db, "alice@example.com")
        bob = _make_user(db, "bob@example.com")
        with pytest.raises(AuthorizationError):
            user_service.update_user(db, bob.id, _update("bob@example.com"), alice)
        with pytest.raises(AuthorizationError):
            user_service.get_user(db, bob.id, alice)
        assert user_service.get_user(db, alice.id, alice).email == "alice@example.com"
    finally:
        db.close()


def test_email_change_must_stay_unique():
    db = _make_session()
    try:
        alice = _make_user(db, "alice@example.com")
        _make_user(db, "bob@example.com")
        with pytest.raises(ResourceAlreadyExistsError):
            user_service.update_user(db, alice.id, _update("bob@example.com"), alice)
    finally:
        db.close()


def test_admin_update_applies_activation_and_roles():
    db = _make_session()
    try:
        admin = _make_user(db, "admin@example.com", "Admin")
        alice = _make_user(db, "alice@example.com")
        token_service.issue_token_pair(db, alice)

        dto = user_service.update_user(
            db,
            alice.id,
            _update("alice@example.com", is_active=False, roles=["Management", "User"]),
            admin,
        )
        assert dto.is_active is False
        assert dto.roles == ["Management", "User"]

        db.refresh(alice)
        assert alice.lockout_end.year == DEACTIVATED_LOCKOUT_END.year
        assert token_service.revoke_all_for_user(db, alice.id) == 0

        reactivated = user_service.update_user(db, alice.id, _update("alice@example.com", is_active=True), admin)
        assert reactivated.is_active is True
        db.refresh(alice)
        assert alice.lockout_end is None

        event = db.query(AuditEvent).filter(AuditEvent.action == "user.update").first()
        assert event.target_id == alice.id
    finally:
        db.close()


def test_update_roles_replaces_set_and_rejects_unknown():
    db = _make_session()
    try:
        admin = _make_user(db, "admin@example.com", "Admin")
        alice = _make_user(db, "alice@example.com")

        assert user_service.update_user_roles(db, alice.id, ["Debug"], admin).roles == ["Debug"]
        assert user_service.update_user_roles(db, alice.id, [], admin).roles == []

        with pytest.raises(ValidationError):
            user_service.update_user_roles(db, alice.id, ["Debug", "Wizard"], admin)
        with pytest.raises(ResourceNotFoundError):
            user_service.update_user_roles(db, "missing", ["User"], admin)
    finally:
        db.close()


def test_deactivate_is_soft_and_repeatable():
    db = _make_session()
    try:
        admin = _make_user(db, "admin@example.com", "Admin")
        alice = _make_user(db, "alice@example.com")

        assert user_service.deactivate_user(db, alice.id, admin) is True
        assert user_service.deactivate_user(db, alice.id, admin) is False
        assert user_service.get_user_by_id(db, alice.id).is_active is False

        with pytest.raises(ValidationError):
            user_service.deactivate_user(db, admin.id, admin)
        with pytest.raises(ResourceNotFoundError):
            user_service.deactivate_user(db, "missing", admin)
    finally:
        db.close()


def test_admin_cannot_deactivate_self_through_update():
    db = _make_session()
    try:
        admin = _make_user(db, "admin@example.com", "Admin")

        with pytest.raises(ValidationError):
            user_service.update_user(db, admin.id, _update("admin@example.com", is_active=False), admin)

        db.refresh(admin)
        assert admin.is_active is True
        assert admin.first_name == "Test"
        assert db.query(AuditEvent).count() == 0
    finally:
        db.close()


@pytest.mark.parametrize("email", ["a@b..c", "<x>@y.z", "a@-.-", "no-at-sign"])
def test_update_rejects_malformed_email(email):
    with pytest.raises(SchemaValidationError):
        _update(email)


def test_update_normalizes_email():
    assert _update("  Alice.Smith@Example.COM ").email == "alice.smith@example.com"
