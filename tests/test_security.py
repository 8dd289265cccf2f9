# tests/test_security.py

"""
Tests for password hashing.
"""

import pytest

from core.errors import ValidationError
from core.security import hash_password, verify_password


def test_hash_and_verify():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_hash_accepts_72_bytes():
    hashed = hash_password("é" * 36)
    assert verify_password("é" * 36, hashed) is True


def test_hash_rejects_more_than_72_bytes():
    with pytest.raises(ValidationError) as exc:
        hash_password("é" * 40)

    assert exc.value.status_code == 400
    assert exc.value.errors[0]["field"] == "password"


def test_verify_never_raises_on_long_input():
    hashed = hash_password("secret123")
    assert verify_password("é" * 40, hashed) is False
