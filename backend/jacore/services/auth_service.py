"""Authentication facade - register, login, refresh and logout"""

from typing import Optional
import logging

from sqlalchemy.orm import Session

from jacore.core.exceptions import AuthenticationError, ResourceNotFoundError
from jacore.mappers.users import auth_response_for
from jacore.schemas.auth import AuthResponseDto, LoginDto, RegisterDto
from jacore.services.audit_service import audit_service
from jacore.services.token_service import token_service
from jacore.services.user_service import user_service

logger = logging.getLogger(__name__)


class AuthService:
    """Turns credentials into token pairs.

    Credential and token failures are returned as an unsuccessful
    ``AuthResponseDto`` carrying a message rather than raised.
    """

    @staticmethod
    def _failure(message: str) -> AuthResponseDto:
        return AuthResponseDto(succeeded=False, message=message)

    @staticmethod
    def register(db: Session, data: RegisterDto) -> AuthResponseDto:
        """
        Create an account with the standard user role and sign it in

        Raises:
            ResourceAlreadyExistsError: If the email is already registered
        """
        user = user_service.create_user(
            db,
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            password=data.password,
        )
        access_token, expiration, refresh_token = token_service.issue_token_pair(db, user)
        logger.info(f"Registered user {user.email}")
        return auth_response_for(user, access_token, expiration, refresh_token)

    @staticmethod
    def login(db: Session, data: LoginDto) -> AuthResponseDto:
        try:
            user = user_service.authenticate_user(db, data.email, data.password)
        except AuthenticationError as exc:
            return AuthService._failure(exc.message)

        access_token, expiration, refresh_token = token_service.issue_token_pair(db, user)
        return auth_response_for(user, access_token, expiration, refresh_token)

    @staticmethod
    def refresh(db: Session, raw_token: str, user_id: Optional[str]) -> AuthResponseDto:
        """
        Rotate a refresh token

        Args:
            db: Database session
            raw_token: Refresh token presented by the client
            user_id: Owner taken from the (possibly expired) access token
        """
        if not user_id:
            return AuthService._failure("Invalid access token.")
        try:
            user, access_token, expiration, refresh_token = token_service.rotate_refresh_token(
                db, raw_token, user_id
            )
        except ResourceNotFoundError as exc:
            return AuthService._failure(exc.message)
        except AuthenticationError as exc:
            return AuthService._failure(exc.message)

        return auth_response_for(user, access_token, expiration, refresh_token)

    @staticmethod
    def logout(
        db: Session,
        raw_token: str,
        user_id: str,
        ip_address: Optional[str] = None,
    ) -> bool:
        revoked = token_service.revoke_refresh_token(db, raw_token, user_id)
        audit_service.log_event(
            db,
            user_id=user_id,
            action="auth.logout",
            target_type="refresh_token",
            ip_address=ip_address,
            metadata={"revoked": revoked},
        )
        return revoked


auth_service = AuthService()
