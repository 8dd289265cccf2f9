# core/security.py

import bcrypt

from core.config import settings
from core.errors import ValidationError
from models.common import BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    """Hash ``password`` with bcrypt using the configured cost factor."""
    if not password:
        raise ValueError("Password must not be empty")

    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValidationError(
            "Password is too long",
            errors=[{"field": "password", "message": f"Must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded"}],
        )

    hashed = bcrypt.hashpw(
        encoded,
        bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS),
    )
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Return ``True`` if ``password`` matches ``hashed``."""
    if not password or not hashed:
        return False

    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash, or a password bcrypt refuses
        return False
