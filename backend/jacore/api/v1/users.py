"""User management routes"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session
from typing import List

from jacore.core.database import get_db
from jacore.schemas.user import RoleName, UpdateUserDto, UpdateUserRolesDto, UserDto
from jacore.mappers.users import user_to_dto
from jacore.services.user_service import user_service
from jacore.api.deps import get_current_user, require_roles
from jacore.models.user import User

router = APIRouter()

require_admin = require_roles(RoleName.ADMIN.value)


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.get("/me", response_model=UserDto)
def get_my_profile(
    current_user: User = Depends(get_current_user)
):
    """
    Get current user profile

    Args:
        current_user: Current authenticated user

    Returns:
        User profile
    """
    return user_to_dto(current_user)


@router.get("", response_model=List[UserDto])
def get_all_users(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Get all users (admin only)

    Args:
        current_user: Current admin user
        db: Database session

    Returns:
        List of users
    """
    return user_service.get_all_users(db)


@router.get("/{user_id}", response_model=UserDto)
def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a user (admin, or the user themself)"""
    return user_service.get_user(db, user_id, current_user)


@router.put("/{user_id}", response_model=UserDto)
def update_user(
    user_id: str,
    update: UpdateUserDto,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update a user

    Names and email are self-editable; activation and roles are applied only
    for admin callers.
    """
    return user_service.update_user(db, user_id, update, current_user, ip_address=_client_ip(request))


@router.put("/{user_id}/roles", response_model=UserDto)
def update_user_roles(
    user_id: str,
    body: UpdateUserRolesDto,
    request: Request,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Replace the roles of a user (admin only)"""
    return user_service.update_user_roles(db, user_id, body.roles, current_user, ip_address=_client_ip(request))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    request: Request,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Deactivate user (admin only)

    Args:
        user_id: User ID to deactivate
        current_user: Current admin user
        db: Database session
    """
    user_service.deactivate_user(db, user_id, current_user, ip_address=_client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
