import asyncio
from datetime import timedelta

from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from jacore.api.deps import get_refresh_user_id
from jacore.config import settings
from jacore.core.security import (
    create_access_token,
    decode_access_token,
    decode_expired_access_token,
    generate_refresh_token,
    hash_refresh_token,
)


def test_access_token_round_trip():
    token, expiration = create_access_token({"sub": "user-7", "email": "alice@example.com", "roles": ["User"]})
    payload = decode_access_token(token)
    assert payload is not None
    assert payload["sub"] == "user-7"
    assert payload["typ"] == "access"
    assert payload["iss"] == settings.JWT_ISSUER
    assert payload["aud"] == settings.JWT_AUDIENCE
    assert expiration.microsecond == 0


def test_expired_access_token_still_identifies_user():
    token, _ = create_access_token({"sub": "user-9"}, expires_delta=timedelta(seconds=-30))
    assert decode_access_token(token) is None

    payload = decode_expired_access_token(token)
    assert payload is not None
    assert payload["sub"] == "user-9"


def test_token_with_other_audience_is_rejected():
    token = jwt.encode(
        {"sub": "user-1", "typ": "access", "iss": settings.JWT_ISSUER, "aud": "someone-else"},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    assert decode_access_token(token) is None
    assert decode_expired_access_token(token) is None


def test_token_with_wrong_signature_is_rejected():
    token, _ = create_access_token({"sub": "user-1"})
    forged = jwt.encode(jwt.get_unverified_claims(token), "not-the-secret", algorithm=settings.ALGORITHM)
    assert decode_expired_access_token(forged) is None


def test_refresh_tokens_are_random_and_hash_is_stable():
    first = generate_refresh_token()
    second = generate_refresh_token()
    assert first != second
    assert len(first) >= 64

    digest = hash_refresh_token(first)
    assert digest == hash_refresh_token(first)
    assert digest != hash_refresh_token(second)
    assert len(digest) == 64
    assert first not in digest


def test_refresh_owner_read_from_expired_bearer_token():
    token, _ = create_access_token({"sub": "user-3"}, expires_delta=timedelta(minutes=-5))
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
    assert asyncio.run(get_refresh_user_id(credentials)) == "user-3"
    assert asyncio.run(get_refresh_user_id(None)) is None

    garbage = HTTPAuthorizationCredentials(scheme="Bearer", credentials="not-a-jwt")
    assert asyncio.run(get_refresh_user_id(garbage)) is None
