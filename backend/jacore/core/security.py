"""Security utilities - JWT, password hashing, refresh-token secrets"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any, Tuple
from jose import JWTError, jwt
import bcrypt
import hashlib
import secrets
from jacore.config import settings
from jacore.core.timeutils import utcnow


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password

    Returns:
        bool: True if password matches
    """
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt()
    ).decode('utf-8')


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> Tuple[str, datetime]:
    """
    Create JWT access token

    Args:
        data: Claims to encode in token
        expires_delta: Token expiration time

    Returns:
        Tuple of (encoded JWT token, expiration time in naive UTC)
    """
    to_encode = data.copy()
    now = utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({
        "exp": expire,
        "iat": now,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "typ": "access",
        "jti": secrets.token_urlsafe(16),
    })

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt, expire.replace(microsecond=0)


def _decode(token: str, verify_exp: bool) -> Optional[Dict[str, Any]]:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"verify_exp": verify_exp},
        )
    except JWTError:
        return None
    if payload.get("typ") != "access":
        return None
    return payload


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify JWT access token

    Args:
        token: JWT token string

    Returns:
        Optional[Dict]: Decoded token data or None if invalid or expired
    """
    return _decode(token, verify_exp=True)


def decode_expired_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode an access token whose lifetime may have elapsed.

    Signature, issuer and audience are still verified. Used by the refresh
    flow to identify the user owning the presented refresh token.
    """
    return _decode(token, verify_exp=False)


def generate_refresh_token() -> str:
    """
    Generate a raw refresh token

    Returns:
        str: URL-safe random token, handed to the client once
    """
    return secrets.token_urlsafe(settings.REFRESH_TOKEN_BYTES)


def hash_refresh_token(raw_token: str) -> str:
    """
    Digest a raw refresh token for storage and lookup

    Args:
        raw_token: Raw token as presented by the client

    Returns:
        str: SHA-256 hex digest
    """
    return hashlib.sha256(raw_token.encode('utf-8')).hexdigest()
