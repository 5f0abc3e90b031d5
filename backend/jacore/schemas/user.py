"""User schemas"""

from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from jacore.schemas.common import CamelModel, Email


class RoleName(str, Enum):
    """Standard role names used for authorization"""
    ADMIN = "Admin"
    MANAGEMENT = "Management"
    USER = "User"
    DEBUG = "Debug"


class UserDto(CamelModel):
    """User response schema"""
    id: str
    first_name: str
    last_name: str
    email: str
    is_active: bool
    created_at: Optional[datetime] = None
    roles: List[str] = []


class UpdateUserDto(CamelModel):
    """User update schema; is_active and roles are honoured for admins only"""
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    email: Email
    is_active: Optional[bool] = None
    roles: Optional[List[str]] = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name is required.')
        return v


class UpdateUserRolesDto(CamelModel):
    """Replace the role set of a user (may be empty, never null)"""
    roles: List[str]
