# core/errors.py

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from core.logging_config import logger


# ============================================================
# Domain error taxonomy
# ============================================================
class AppError(Exception):
    """
    Base class for errors that map to a known HTTP outcome.
    The global exception handler in main.py renders these as the
    standard response envelope.
    """

    status_code: int = 500

    def __init__(self, message: str = "Internal server error", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class UnauthenticatedError(AppError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ConflictError(AppError):
    status_code = 409

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message)


# ============================================================
# Storage error translation
# ============================================================
def extract_db_error(error: Exception) -> str:
    """
    Safely extract readable details from a SQLAlchemy / DBAPI error.
    Prefers the driver's original message over SQLAlchemy's wrapper text.
    """
    orig = getattr(error, "orig", None)
    if orig is not None:
        return str(orig)
    return str(error)


def handle_integrity_error(error: IntegrityError, conflict_message: str) -> AppError:
    """
    Translate a constraint violation into a domain error.
    Returns the error (doesn't raise) so the caller can re-raise it
    after rolling back its session.

    Args:
        error: IntegrityError raised by the flush/commit
        conflict_message: Message used when a uniqueness constraint fired
    """
    detail = extract_db_error(error)
    logger.info(f"Integrity violation: {detail}")

    detail_lower = detail.lower()
    if "unique" in detail_lower or "duplicate" in detail_lower:
        return ConflictError(conflict_message)
    if "foreign key" in detail_lower:
        return ValidationError("Invalid reference")
    return ConflictError(conflict_message)
