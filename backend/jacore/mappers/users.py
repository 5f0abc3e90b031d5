"""Field-by-field mapping between user rows and DTOs"""

from jacore.models.user import User
from jacore.schemas.auth import AuthResponseDto
from jacore.schemas.user import UpdateUserDto, UserDto


def user_to_dto(user: User) -> UserDto:
    return UserDto(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        is_active=user.is_active,
        created_at=user.created_at,
        roles=user.role_names,
    )


def apply_profile_update(user: User, dto: UpdateUserDto) -> None:
    """Copy the self-editable profile fields onto a user.

    Email, activation, roles, credentials and lockout state are never touched
    here; the user service handles each of them explicitly.
    """
    user.first_name = dto.first_name
    user.last_name = dto.last_name


def auth_response_for(user: User, access_token: str, expiration, refresh_token: str) -> AuthResponseDto:
    return AuthResponseDto(
        succeeded=True,
        token=access_token,
        expiration=expiration,
        refresh_token=refresh_token,
        user_id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        roles=user.role_names,
    )
