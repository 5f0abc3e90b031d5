"""Authentication schemas"""

from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime

from jacore.schemas.common import CamelModel, Email


class LoginDto(CamelModel):
    """Login schema"""
    email: Email
    password: str = Field(..., min_length=1)


class RegisterDto(CamelModel):
    """Self-registration schema"""
    email: Email
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    password: str = Field(..., min_length=10, max_length=128)


class TokenRefreshRequestDto(CamelModel):
    """Refresh/logout request carrying the raw refresh token"""
    refresh_token: str = Field(..., min_length=1)

    @field_validator('refresh_token')
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError('Refresh token is required.')
        return v.strip()


class AuthResponseDto(CamelModel):
    """Result of register, login and refresh calls"""
    succeeded: bool
    token: Optional[str] = None
    expiration: Optional[datetime] = None
    refresh_token: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    roles: Optional[List[str]] = None
    message: Optional[str] = None


class CurrentUserDto(CamelModel):
    """Claims of the presented access token"""
    user_id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    roles: List[str] = []
