# core/tokens.py

"""
Signed identity tokens.

Tokens carry only who the caller is (user id + email). Role and
permission state is never embedded; it is re-read from storage on
every privileged check, so a role change takes effect on the next
request instead of when the token expires.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from core.config import settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# ============================================================
# Errors
# ============================================================
class TokenConfigError(RuntimeError):
    """Signing secret is missing; the process is misconfigured."""


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidTokenError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


# ============================================================
# Claims
# ============================================================
class TokenClaims(BaseModel):
    user_id: str
    email: str


def _secret() -> str:
    if not settings.JWT_SECRET:
        raise TokenConfigError("JWT_SECRET is not configured")
    return settings.JWT_SECRET


def _encode(user_id: str, email: str, token_type: str, expires_in: int) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "id": str(user_id),
        "email": email,
        "type": token_type,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(to_encode, _secret(), algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, expected_type: str) -> TokenClaims:
    secret = _secret()

    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpiredError("Token expired") from e
    except JWTError as e:
        raise InvalidTokenError("Invalid token") from e

    if payload.get("type", ACCESS_TOKEN_TYPE) != expected_type:
        raise InvalidTokenError("Invalid token")

    user_id = payload.get("id")
    email = payload.get("email")
    if not user_id or not email:
        raise InvalidTokenError("Invalid token")

    return TokenClaims(user_id=str(user_id), email=email)


# ============================================================
# Public API
# ============================================================
def issue_token(user_id: str, email: str, expires_in: Optional[int] = None) -> str:
    """
    Issue an access token for ``user_id`` / ``email``.

    Raises:
        TokenConfigError: JWT_SECRET is not set
    """
    lifetime = settings.JWT_EXPIRES_IN if expires_in is None else expires_in
    return _encode(user_id, email, ACCESS_TOKEN_TYPE, lifetime)


def verify_token(token: str) -> TokenClaims:
    """
    Verify an access token and return its identity claims.

    Raises:
        TokenExpiredError: signature valid but ``exp`` has passed
        InvalidTokenError: bad signature, malformed token or wrong token type
    """
    return _decode(token, ACCESS_TOKEN_TYPE)


def issue_refresh_token(user_id: str, email: str, expires_in: Optional[int] = None) -> str:
    lifetime = settings.JWT_REFRESH_EXPIRES_IN if expires_in is None else expires_in
    return _encode(user_id, email, REFRESH_TOKEN_TYPE, lifetime)


def verify_refresh_token(token: str) -> TokenClaims:
    # Stateless: there is no server-side rotation or revocation table.
    return _decode(token, REFRESH_TOKEN_TYPE)
