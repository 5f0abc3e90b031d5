"""Security-related persistence models."""

import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from jacore.core.database import Base


class RefreshToken(Base):
    """Refresh token record for rotation/revocation.

    Only the SHA-256 digest of the token is stored. Rows are flagged, never
    deleted, so the rotation history stays available for audit.
    """

    __tablename__ = "refresh_tokens"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(64), unique=True, nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=False)
    created_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    is_revoked = Column(Boolean, default=False, nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        Index("idx_refresh_tokens_user_hash", "user_id", "token_hash"),
    )

    def __repr__(self):
        return (
            f"<RefreshToken(id={self.id}, user_id={self.user_id}, "
            f"used={self.is_used}, revoked={self.is_revoked})>"
        )
