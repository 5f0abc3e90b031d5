"""Persistence gateways wrapping the SQLAlchemy session"""

from jacore.repositories.refresh_tokens import RefreshTokenRepository
from jacore.repositories.productions import ProductionRepository

__all__ = ["RefreshTokenRepository", "ProductionRepository"]
