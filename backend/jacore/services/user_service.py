"""User service - handles user management and authentication"""

from sqlalchemy.orm import Session
from typing import Iterable, List, Optional
from datetime import datetime, timedelta
from jacore.config import settings
from jacore.models.user import Role, User
from jacore.schemas.user import RoleName, UpdateUserDto, UserDto
from jacore.mappers.users import apply_profile_update, user_to_dto
from jacore.core.security import get_password_hash, verify_password
from jacore.core.timeutils import naive_utc, utcnow
from jacore.core.exceptions import (
    AccountInactiveError,
    AccountLockedError,
    AuthorizationError,
    InvalidCredentialsError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)
from jacore.services.audit_service import audit_service
from jacore.services.token_service import token_service
import logging

logger = logging.getLogger(__name__)

# Lockout end written on deactivation; cleared again on reactivation.
DEACTIVATED_LOCKOUT_END = datetime(9999, 12, 31)


class UserService:
    """Service for user management"""

    @staticmethod
    def ensure_roles(db: Session) -> List[Role]:
        """Create any missing standard role"""
        existing = {role.name for role in db.query(Role).all()}
        created = []
        for name in RoleName:
            if name.value not in existing:
                role = Role(name=name.value)
                db.add(role)
                created.append(role)
        if created:
            db.commit()
            logger.info(f"Seeded roles: {', '.join(r.name for r in created)}")
        return created

    @staticmethod
    def _resolve_roles(db: Session, names: Iterable[str]) -> List[Role]:
        wanted = []
        for name in names:
            name = name.strip()
            if name and name not in wanted:
                wanted.append(name)
        if not wanted:
            return []

        roles = db.query(Role).filter(Role.name.in_(wanted)).all()
        found = {role.name for role in roles}
        missing = [name for name in wanted if name not in found]
        if missing:
            raise ValidationError(
                f"Unknown role(s): {', '.join(missing)}",
                details={"roles": missing}
            )
        return roles

    @staticmethod
    def create_user(
        db: Session,
        *,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        roles: Optional[List[str]] = None,
    ) -> User:
        """
        Create new user

        Args:
            db: Database session
            email: Normalized email, also the login name
            first_name: Given name
            last_name: Family name
            password: Plain text password
            roles: Role names; defaults to the standard user role

        Returns:
            Created user
        """
        if UserService.get_user_by_email(db, email):
            raise ResourceAlreadyExistsError("User with this email")

        user = User(
            email=email,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            password_hash=get_password_hash(password),
            is_active=True,
            failed_login_attempts=0,
        )
        user.roles = UserService._resolve_roles(db, roles or [RoleName.USER.value])

        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"Created user: {user.email} (roles: {', '.join(user.role_names)})")
        return user

    @staticmethod
    def ensure_admin(db: Session) -> Optional[User]:
        """Seed the configured admin account unless it already exists"""
        if UserService.get_user_by_email(db, settings.ADMIN_EMAIL.lower()):
            return None
        return UserService.create_user(
            db,
            email=settings.ADMIN_EMAIL.lower(),
            first_name=settings.ADMIN_FIRST_NAME,
            last_name=settings.ADMIN_LAST_NAME,
            password=settings.ADMIN_PASSWORD,
            roles=[RoleName.ADMIN.value],
        )

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> User:
        """
        Authenticate user with account lockout protection

        Args:
            db: Database session
            email: Login email
            password: Password

        Returns:
            Authenticated user
        """
        user = UserService.get_user_by_email(db, email)

        if not user:
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountInactiveError()

        now = utcnow()
        lockout_end = naive_utc(user.lockout_end)
        if lockout_end and lockout_end > now:
            raise AccountLockedError(lockout_end.isoformat())

        if not verify_password(password, user.password_hash):
            user.failed_login_attempts = (user.failed_login_attempts or 0) + 1

            if user.failed_login_attempts >= settings.MAX_FAILED_LOGIN_ATTEMPTS:
                user.lockout_end = now + timedelta(minutes=settings.LOCKOUT_DURATION_MINUTES)
                user.failed_login_attempts = 0
                db.commit()
                logger.warning(f"Account locked for user: {email}")
                raise AccountLockedError(user.lockout_end.isoformat())

            db.commit()
            logger.info(f"Failed login for user: {email} ({user.failed_login_attempts} attempts)")
            raise InvalidCredentialsError()

        user.failed_login_attempts = 0
        user.lockout_end = None
        user.last_login = now
        db.commit()

        logger.info(f"User authenticated: {email}")
        return user

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email.strip().lower()).first()

    @staticmethod
    def get_all_users(db: Session) -> List[UserDto]:
        users = db.query(User).order_by(User.email).all()
        return [user_to_dto(user) for user in users]

    @staticmethod
    def get_user(db: Session, user_id: str, current_user: User) -> UserDto:
        """Single user, visible to admins and to the user themself"""
        if current_user.id != user_id and not current_user.has_role(RoleName.ADMIN.value):
            raise AuthorizationError("You can only view your own account")
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")
        return user_to_dto(user)

    @staticmethod
    def _set_active(user: User, is_active: bool) -> None:
        user.is_active = is_active
        if is_active:
            user.lockout_end = None
            user.failed_login_attempts = 0
        else:
            user.lockout_end = DEACTIVATED_LOCKOUT_END

    @staticmethod
    def update_user(
        db: Session,
        user_id: str,
        update: UpdateUserDto,
        current_user: User,
        ip_address: Optional[str] = None,
    ) -> UserDto:
        """
        Update a user's profile

        Self-service callers may change names and email. Activation state and
        roles are applied only when the caller is an admin.

        Raises:
            AuthorizationError: If a non-admin edits someone else
            ResourceNotFoundError: If the user does not exist
            ValidationError: If an admin deactivates their own account
            ResourceAlreadyExistsError: If the new email is taken
        """
        is_admin = current_user.has_role(RoleName.ADMIN.value)
        if current_user.id != user_id and not is_admin:
            raise AuthorizationError("You can only update your own account")

        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")
        if is_admin and user.id == current_user.id and update.is_active is False:
            raise ValidationError("You cannot deactivate your own account")

        if update.email != user.email:
            if UserService.get_user_by_email(db, update.email):
                raise ResourceAlreadyExistsError("User with this email")
            user.email = update.email

        apply_profile_update(user, update)

        changes = {}
        if is_admin:
            if update.is_active is not None and update.is_active != user.is_active:
                UserService._set_active(user, update.is_active)
                changes["is_active"] = update.is_active
            if update.roles is not None:
                user.roles = UserService._resolve_roles(db, update.roles)
                changes["roles"] = user.role_names

        db.commit()
        db.refresh(user)
        logger.info(f"Updated user: {user.email} by {current_user.email}")
        if changes.get("is_active") is False:
            token_service.revoke_all_for_user(db, user.id)

        if changes:
            audit_service.log_event(
                db,
                user_id=current_user.id,
                action="user.update",
                target_type="user",
                target_id=user.id,
                ip_address=ip_address,
                metadata=changes,
            )
        return user_to_dto(user)

    @staticmethod
    def update_user_roles(
        db: Session,
        user_id: str,
        roles: List[str],
        current_user: User,
        ip_address: Optional[str] = None,
    ) -> UserDto:
        """Replace the role set of a user; unknown names are rejected"""
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")

        user.roles = UserService._resolve_roles(db, roles)
        db.commit()
        db.refresh(user)
        logger.info(f"Roles of {user.email} set to [{', '.join(user.role_names)}]")

        audit_service.log_event(
            db,
            user_id=current_user.id,
            action="user.roles",
            target_type="user",
            target_id=user.id,
            ip_address=ip_address,
            metadata={"roles": user.role_names},
        )
        return user_to_dto(user)

    @staticmethod
    def deactivate_user(
        db: Session,
        user_id: str,
        current_user: User,
        ip_address: Optional[str] = None,
    ) -> bool:
        """
        Soft-delete a user

        Returns:
            True if the user was active before the call
        """
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")
        if user.id == current_user.id:
            raise ValidationError("You cannot deactivate your own account")

        if not user.is_active:
            return False

        UserService._set_active(user, False)
        db.commit()
        token_service.revoke_all_for_user(db, user.id)
        logger.info(f"Deactivated user: {user.email}")

        audit_service.log_event(
            db,
            user_id=current_user.id,
            action="user.deactivate",
            target_type="user",
            target_id=user.id,
            ip_address=ip_address,
        )
        return True


# Singleton instance
user_service = UserService()
