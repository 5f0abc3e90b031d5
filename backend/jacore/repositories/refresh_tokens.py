"""Refresh token persistence"""

from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from jacore.core.timeutils import utcnow
from jacore.models.security import RefreshToken

logger = logging.getLogger(__name__)


class RefreshTokenRepository:
    """Data access for refresh tokens.

    Writes are flushed, not committed; the calling service owns the
    transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, token: RefreshToken) -> RefreshToken:
        self.db.add(token)
        self.db.flush()
        logger.debug(f"Added refresh token {token.id} for user {token.user_id}, pending commit")
        return token

    def update(self, token: RefreshToken) -> RefreshToken:
        self.db.add(token)
        self.db.flush()
        logger.debug(f"Updated refresh token {token.id} for user {token.user_id}, pending commit")
        return token

    def remove(self, token: RefreshToken) -> None:
        self.db.delete(token)
        self.db.flush()
        logger.debug(f"Removed refresh token {token.id} for user {token.user_id}, pending commit")

    def get_valid_tokens_by_user_id(self, user_id: str, now: Optional[datetime] = None) -> List[RefreshToken]:
        """Tokens of a user that are neither used, revoked nor expired"""
        now = now or utcnow()
        tokens = (
            self.db.query(RefreshToken)
            .filter(
                RefreshToken.user_id == user_id,
                RefreshToken.is_revoked == False,  # noqa: E712
                RefreshToken.is_used == False,  # noqa: E712
                RefreshToken.expiry_date > now,
            )
            .all()
        )
        logger.debug(f"Retrieved {len(tokens)} valid refresh tokens for user {user_id}")
        return tokens

    def get_by_hash(self, user_id: str, token_hash: str) -> Optional[RefreshToken]:
        """Token with the given digest owned by the user, in any state"""
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.token_hash == token_hash)
            .first()
        )

    def mark_used(self, token: RefreshToken) -> bool:
        """
        Atomically flip a token from active to used

        The UPDATE only matches while the row is still unused and unrevoked,
        so of two concurrent refreshes with the same token exactly one wins.

        Returns:
            True if this call consumed the token
        """
        result = self.db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.id == token.id,
                RefreshToken.is_used == False,  # noqa: E712
                RefreshToken.is_revoked == False,  # noqa: E712
            )
            .values(is_used=True)
        )
        return result.rowcount == 1
