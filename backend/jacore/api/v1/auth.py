"""Authentication routes"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session
from typing import Optional

from jacore.core.database import get_db
from jacore.config import settings
from jacore.schemas.auth import (
    AuthResponseDto,
    CurrentUserDto,
    LoginDto,
    RegisterDto,
    TokenRefreshRequestDto,
)
from jacore.services.auth_service import auth_service
from jacore.services.rate_limiter import rate_limiter
from jacore.api.deps import get_current_user, get_refresh_user_id
from jacore.models.user import User
from jacore.core.exceptions import AuthenticationError

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _ensure_succeeded(result: AuthResponseDto) -> AuthResponseDto:
    if not result.succeeded:
        raise AuthenticationError(result.message or "Authentication failed")
    return result


@router.post("/register", response_model=AuthResponseDto, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterDto,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Create an account and return a token pair

    Args:
        data: Email, names and password
        db: Database session

    Returns:
        Authentication result with tokens
    """
    rate_limiter.hit(
        "register", _client_ip(request),
        settings.LOGIN_RATE_LIMIT_PER_MINUTE, settings.LOGIN_RATE_LIMIT_PER_HOUR
    )
    return _ensure_succeeded(auth_service.register(db, data))


@router.post("/login", response_model=AuthResponseDto)
def login(
    credentials: LoginDto,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Login endpoint - authenticate user and return a token pair

    Args:
        credentials: Email and password
        db: Database session

    Returns:
        Authentication result with tokens
    """
    rate_key = f"{_client_ip(request)}:{credentials.email}"
    rate_limiter.hit(
        "login", rate_key,
        settings.LOGIN_RATE_LIMIT_PER_MINUTE, settings.LOGIN_RATE_LIMIT_PER_HOUR
    )
    result = _ensure_succeeded(auth_service.login(db, credentials))
    rate_limiter.reset("login", rate_key)
    return result


@router.post("/refresh", response_model=AuthResponseDto)
def refresh_token(
    body: TokenRefreshRequestDto,
    request: Request,
    user_id: Optional[str] = Depends(get_refresh_user_id),
    db: Session = Depends(get_db),
):
    """
    Exchange a refresh token for a new token pair

    The caller's access token, expired or not, goes in the Authorization
    header; it identifies the owner of the refresh token.
    """
    rate_limiter.hit(
        "refresh", _client_ip(request),
        settings.RATE_LIMIT_PER_MINUTE, settings.RATE_LIMIT_PER_HOUR
    )
    return _ensure_succeeded(auth_service.refresh(db, body.refresh_token, user_id))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    body: TokenRefreshRequestDto,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Revoke a refresh token; succeeds even if it was already unusable"""
    auth_service.logout(db, body.refresh_token, current_user.id, ip_address=_client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=CurrentUserDto)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Identity of the presented access token"""
    return CurrentUserDto(
        user_id=current_user.id,
        email=current_user.email,
        first_name=current_user.first_name,
        last_name=current_user.last_name,
        roles=current_user.role_names,
    )
