"""Pydantic schemas for API validation"""

from jacore.schemas.user import UserDto, UpdateUserDto, UpdateUserRolesDto, RoleName
from jacore.schemas.auth import (
    LoginDto,
    RegisterDto,
    TokenRefreshRequestDto,
    AuthResponseDto,
    CurrentUserDto,
)
from jacore.schemas.production import (
    StepDto,
    ProductionDto,
    ProductionParameterDto,
    CreateTemplateRequest,
    DeriveWorkRequest,
    UpdateParameterRequest,
    RecordElementValueRequest,
    ValidationResultDto,
)
from jacore.schemas.response import ErrorResponse
from jacore.schemas.audit import AuditEventResponse

__all__ = [
    "UserDto", "UpdateUserDto", "UpdateUserRolesDto", "RoleName",
    "LoginDto", "RegisterDto", "TokenRefreshRequestDto", "AuthResponseDto", "CurrentUserDto",
    "StepDto", "ProductionDto", "ProductionParameterDto", "CreateTemplateRequest",
    "DeriveWorkRequest", "UpdateParameterRequest", "RecordElementValueRequest",
    "ValidationResultDto",
    "AuditEventResponse",
    "ErrorResponse"
]
