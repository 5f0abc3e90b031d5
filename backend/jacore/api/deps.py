"""API dependencies - authentication and authorization"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Callable, Optional

from jacore.core.database import get_db
from jacore.core.security import decode_access_token, decode_expired_access_token
from jacore.core.exceptions import AuthenticationError, AuthorizationError
from jacore.models.user import User
from jacore.services.user_service import user_service

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return credentials.credentials


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token

    Args:
        credentials: HTTP Bearer credentials
        db: Database session

    Returns:
        Current user

    Raises:
        AuthenticationError: If token is invalid or user not found
    """
    payload = decode_access_token(_bearer_token(credentials))
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user_id: Optional[str] = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    user = user_service.get_user_by_id(db, user_id)
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is disabled")

    return user


async def get_refresh_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """
    Owner of a refresh request, read from an access token that may have expired

    Returns:
        The subject claim, or None when no verifiable token was presented
    """
    if not credentials or not credentials.credentials:
        return None
    payload = decode_expired_access_token(credentials.credentials)
    if not payload:
        return None
    return payload.get("sub")


def require_roles(*roles: str) -> Callable:
    """
    Build a dependency admitting users holding any of the given roles

    Args:
        roles: Accepted role names

    Returns:
        Dependency resolving to the current user
    """
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not any(current_user.has_role(role) for role in roles):
            raise AuthorizationError(f"Requires one of the roles: {', '.join(roles)}")
        return current_user

    return dependency
