from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jacore.core.database import Base
from jacore.core.exceptions import TokenInvalidError, TokenNotFoundError
from jacore.core.security import decode_access_token, hash_refresh_token
from jacore.core.timeutils import utcnow
from jacore.models.security import RefreshToken
from jacore.models.user import User
from jacore.repositories.refresh_tokens import RefreshTokenRepository
from jacore.services.token_service import token_service


def _make_session():
    engine = create_engine("sqlite:///:memory:")
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return SessionLocal()


def _make_user(db, email="alice@example.com"):
    user = User(email=email, first_name="Alice", last_name="Smith", password_hash="hash", is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def test_issue_stores_only_the_hash():
    db = _make_session()
    try:
        user = _make_user(db)
        access, expiration, raw = token_service.issue_token_pair(db, user)

        record = db.query(RefreshToken).one()
        assert record.token_hash == hash_refresh_token(raw)
        assert record.token_hash != raw
        assert record.is_used is False
        assert record.is_revoked is False
        assert record.expiry_date > utcnow() + timedelta(days=6)
        assert decode_access_token(access)["sub"] == user.id
        assert expiration > utcnow()
    finally:
        db.close()


def test_rotation_consumes_token_and_second_use_fails():
    db = _make_session()
    try:
        user = _make_user(db)
        _, _, t1 = token_service.issue_token_pair(db, user)

        rotated_user, access, _, t2 = token_service.rotate_refresh_token(db, t1, user.id)
        assert rotated_user.id == user.id
        assert decode_access_token(access)["email"] == "alice@example.com"
        assert t2 != t1

        with pytest.raises(TokenInvalidError):
            token_service.rotate_refresh_token(db, t1, user.id)

        # a replayed T1 leaves T2 usable
        _, _, _, t3 = token_service.rotate_refresh_token(db, t2, user.id)
        assert t3 not in (t1, t2)

        old = RefreshTokenRepository(db).get_by_hash(user.id, hash_refresh_token(t1))
        assert old.is_used is True
    finally:
        db.close()


def test_revoked_token_cannot_refresh_and_revoke_is_idempotent():
    db = _make_session()
    try:
        user = _make_user(db)
        _, _, raw = token_service.issue_token_pair(db, user)

        assert token_service.revoke_refresh_token(db, raw, user.id) is True
        assert token_service.revoke_refresh_token(db, raw, user.id) is True

        with pytest.raises(TokenInvalidError):
            token_service.rotate_refresh_token(db, raw, user.id)
    finally:
        db.close()


def test_revoke_unknown_token_reports_no_match():
    db = _make_session()
    try:
        user = _make_user(db)
        assert token_service.revoke_refresh_token(db, "never-issued", user.id) is False
    finally:
        db.close()


def test_unknown_or_foreign_token_is_not_found():
    db = _make_session()
    try:
        alice = _make_user(db)
        bob = _make_user(db, email="bob@example.com")
        _, _, raw = token_service.issue_token_pair(db, alice)

        with pytest.raises(TokenNotFoundError):
            token_service.rotate_refresh_token(db, "never-issued", alice.id)
        with pytest.raises(TokenNotFoundError):
            token_service.rotate_refresh_token(db, raw, bob.id)
    finally:
        db.close()


def test_expired_token_is_invalid():
    db = _make_session()
    try:
        user = _make_user(db)
        _, _, raw = token_service.issue_token_pair(db, user)
        record = db.query(RefreshToken).one()
        record.expiry_date = utcnow() - timedelta(seconds=1)
        db.commit()

        with pytest.raises(TokenInvalidError):
            token_service.rotate_refresh_token(db, raw, user.id)
    finally:
        db.close()


def test_inactive_user_token_is_revoked_on_refresh():
    db = _make_session()
    try:
        user = _make_user(db)
        _, _, raw = token_service.issue_token_pair(db, user)
        user.is_active = False
        db.commit()

        with pytest.raises(TokenInvalidError):
            token_service.rotate_refresh_token(db, raw, user.id)

        record = db.query(RefreshToken).one()
        assert record.is_revoked is True
        assert record.is_used is False
    finally:
        db.close()


def test_losing_the_mark_used_race_is_invalid(monkeypatch):
    db = _make_session()
    try:
        user = _make_user(db)
        _, _, raw = token_service.issue_token_pair(db, user)
        monkeypatch.setattr(RefreshTokenRepository, "mark_used", lambda self, token: False)

        with pytest.raises(TokenInvalidError):
            token_service.rotate_refresh_token(db, raw, user.id)
        assert db.query(RefreshToken).count() == 1
    finally:
        db.close()


def test_mark_used_succeeds_only_once():
    db = _make_session()
    try:
        user = _make_user(db)
        token_service.issue_token_pair(db, user)
        repository = RefreshTokenRepository(db)
        record = db.query(RefreshToken).one()

        assert repository.mark_used(record) is True
        assert repository.mark_used(record) is False
    finally:
        db.close()


def test_valid_tokens_exclude_used_revoked_and_expired():
    db = _make_session()
    try:
        user = _make_user(db)
        raws = [token_service.issue_token_pair(db, user)[2] for _ in range(4)]
        repository = RefreshTokenRepository(db)
        used, revoked, expired, active = [repository.get_by_hash(user.id, hash_refresh_token(r)) for r in raws]
        used.is_used = True
        revoked.is_revoked = True
        expired.expiry_date = utcnow() - timedelta(minutes=1)
        db.commit()

        valid = repository.get_valid_tokens_by_user_id(user.id)
        assert [t.id for t in valid] == [active.id]

        assert token_service.revoke_all_for_user(db, user.id) == 1
        assert repository.get_valid_tokens_by_user_id(user.id) == []
    finally:
        db.close()
