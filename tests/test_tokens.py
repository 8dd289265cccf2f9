# tests/test_tokens.py

"""
Tests for access and refresh token issue/verify.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from jose import jwt

from core.config import settings
from core.tokens import (
    InvalidTokenError,
    TokenConfigError,
    TokenExpiredError,
    issue_refresh_token,
    issue_token,
    verify_refresh_token,
    verify_token,
)


def test_token_round_trip():
    token = issue_token("3f1c0d4e-0000-4000-8000-000000000001", "a@example.com")
    claims = verify_token(token)

    assert claims.user_id == "3f1c0d4e-0000-4000-8000-000000000001"
    assert claims.email == "a@example.com"


def test_token_carries_no_role():
    token = issue_token("user-1", "a@example.com")
    payload = jwt.get_unverified_claims(token)

    assert set(payload) == {"id", "email", "type", "iat", "exp"}


def test_expired_token_is_distinct_from_invalid():
    expired = issue_token("user-1", "a@example.com", expires_in=-10)

    with pytest.raises(TokenExpiredError):
        verify_token(expired)


def test_bad_signature_is_invalid():
    forged = jwt.encode(
        {"id": "user-1", "email": "a@example.com", "type": "access",
         "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "some-other-secret",
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(InvalidTokenError):
        verify_token(forged)


def test_garbage_token_is_invalid():
    with pytest.raises(InvalidTokenError):
        verify_token("not-a-jwt")


def test_refresh_token_not_accepted_as_access_token():
    refresh = issue_refresh_token("user-1", "a@example.com")

    with pytest.raises(InvalidTokenError):
        verify_token(refresh)
    assert verify_refresh_token(refresh).user_id == "user-1"


def test_access_token_not_accepted_as_refresh_token():
    with pytest.raises(InvalidTokenError):
        verify_refresh_token(issue_token("user-1", "a@example.com"))


def test_missing_secret_is_config_error():
    with patch.object(settings, "JWT_SECRET", None):
        with pytest.raises(TokenConfigError):
            issue_token("user-1", "a@example.com")
        with pytest.raises(TokenConfigError):
            verify_token("anything")
