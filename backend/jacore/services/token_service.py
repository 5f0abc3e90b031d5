"""Refresh token issue, rotation and revocation service."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, Tuple
import logging

from prometheus_client import Counter
from sqlalchemy.orm import Session

from jacore.config import settings
from jacore.core.exceptions import TokenInvalidError, TokenNotFoundError
from jacore.core.security import create_access_token, generate_refresh_token, hash_refresh_token
from jacore.core.timeutils import naive_utc, utcnow
from jacore.models.security import RefreshToken
from jacore.models.user import User
from jacore.repositories.refresh_tokens import RefreshTokenRepository

logger = logging.getLogger(__name__)

REFRESH_OUTCOMES = Counter(
    "jacore_refresh_token_outcomes_total",
    "Refresh token rotation attempts by outcome",
    ["outcome"],
)


def build_access_claims(user: User) -> Dict[str, Any]:
    """Claims carried by every access token issued for a user."""
    return {
        "sub": user.id,
        "email": user.email,
        "given_name": user.first_name,
        "family_name": user.last_name,
        "roles": user.role_names,
        "isActive": user.is_active,
    }


class TokenService:
    """Manage the lifecycle of hashed, single-use refresh tokens.

    A token is Active until it is used by a rotation, revoked, or its expiry
    date passes. Only the SHA-256 digest is stored; the raw value leaves the
    service exactly once.
    """

    @staticmethod
    def is_usable(token: RefreshToken, now: datetime = None) -> bool:
        now = now or utcnow()
        return not token.is_revoked and not token.is_used and naive_utc(token.expiry_date) > now

    @staticmethod
    def issue_refresh_token(db: Session, user: User) -> str:
        """
        Create and store a new refresh token for a user (flushed, not committed)

        Returns:
            The raw token, which is never persisted
        """
        raw_token = generate_refresh_token()
        now = utcnow()
        RefreshTokenRepository(db).add(
            RefreshToken(
                user_id=user.id,
                token_hash=hash_refresh_token(raw_token),
                created_date=now,
                expiry_date=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
                is_revoked=False,
                is_used=False,
            )
        )
        return raw_token

    @staticmethod
    def issue_token_pair(db: Session, user: User) -> Tuple[str, datetime, str]:
        """
        Issue an access token and a refresh token for a user

        Returns:
            Tuple of (access token, access token expiration, raw refresh token)
        """
        access_token, expiration = create_access_token(build_access_claims(user))
        refresh_token = TokenService.issue_refresh_token(db, user)
        db.commit()
        logger.info(f"Issued token pair for user {user.id}")
        return access_token, expiration, refresh_token

    @staticmethod
    def rotate_refresh_token(
        db: Session,
        raw_token: str,
        user_id: str,
    ) -> Tuple[User, str, datetime, str]:
        """
        Exchange a refresh token for a new token pair

        The presented token is consumed; presenting it again fails.

        Raises:
            TokenNotFoundError: No token with this value belongs to the user
            TokenInvalidError: The token is used, revoked or expired, another
                request consumed it first, or the owner is missing or inactive
        """
        repository = RefreshTokenRepository(db)
        record = repository.get_by_hash(user_id, hash_refresh_token(raw_token))
        if not record:
            REFRESH_OUTCOMES.labels(outcome="not_found").inc()
            logger.warning(f"Refresh with unknown token for user {user_id}")
            raise TokenNotFoundError()

        if record.is_used:
            REFRESH_OUTCOMES.labels(outcome="reused").inc()
            logger.warning(f"Replay of used refresh token {record.id} for user {user_id}")
            raise TokenInvalidError()

        if not TokenService.is_usable(record):
            REFRESH_OUTCOMES.labels(outcome="invalid").inc()
            logger.info(f"Refresh with revoked or expired token {record.id} for user {user_id}")
            raise TokenInvalidError()

        user = record.user
        if not user or not user.is_active:
            record.is_revoked = True
            repository.update(record)
            db.commit()
            REFRESH_OUTCOMES.labels(outcome="user_inactive").inc()
            logger.warning(f"Refresh token {record.id} revoked: user {user_id} missing or inactive")
            raise TokenInvalidError("User not found or inactive.")

        if not repository.mark_used(record):
            db.rollback()
            REFRESH_OUTCOMES.labels(outcome="race_lost").inc()
            logger.warning(f"Refresh token {record.id} consumed by a concurrent request")
            raise TokenInvalidError()

        access_token, expiration = create_access_token(build_access_claims(user))
        new_refresh_token = TokenService.issue_refresh_token(db, user)
        db.commit()

        REFRESH_OUTCOMES.labels(outcome="rotated").inc()
        logger.info(f"Rotated refresh token {record.id} for user {user_id}")
        return user, access_token, expiration, new_refresh_token

    @staticmethod
    def revoke_refresh_token(db: Session, raw_token: str, user_id: str) -> bool:
        """
        Revoke a refresh token; revoking a used or revoked token is a no-op

        Returns:
            True if a token matched
        """
        repository = RefreshTokenRepository(db)
        record = repository.get_by_hash(user_id, hash_refresh_token(raw_token))
        if not record:
            logger.info(f"Revoke requested for unknown token of user {user_id}")
            return False
        if not record.is_revoked:
            record.is_revoked = True
            repository.update(record)
            db.commit()
            logger.info(f"Revoked refresh token {record.id} for user {user_id}")
        return True

    @staticmethod
    def revoke_all_for_user(db: Session, user_id: str) -> int:
        """Revoke every usable token of a user"""
        repository = RefreshTokenRepository(db)
        tokens = repository.get_valid_tokens_by_user_id(user_id)
        for token in tokens:
            token.is_revoked = True
            repository.update(token)
        db.commit()
        if tokens:
            logger.info(f"Revoked {len(tokens)} refresh tokens for user {user_id}")
        return len(tokens)


token_service = TokenService()
