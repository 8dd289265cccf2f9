# core/config_validator.py

from typing import List
from core.config import settings
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """
    Validate that all required environment variables are set.
    Returns list of missing required variables.
    """
    missing = []

    # Token signing cannot fall back to a default secret
    if not settings.JWT_SECRET:
        missing.append("JWT_SECRET")

    return missing


def validate_optional_config() -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of warnings.
    """
    warnings = []

    if settings.DATABASE_URL.startswith("sqlite") and settings.is_production:
        warnings.append("DATABASE_URL (SQLite is not suitable for production)")

    if not settings.DEFAULT_ROLE_NAME:
        warnings.append("DEFAULT_ROLE_NAME (signed-up users will have no role)")

    if settings.SUPER_ADMIN_ROLE_NAME not in settings.SYSTEM_ROLE_NAMES:
        warnings.append("SUPER_ADMIN_ROLE_NAME is not listed in SYSTEM_ROLE_NAMES (it can be renamed or deleted)")

    return warnings


def validate_config_on_startup():
    """
    Validate configuration on application startup.
    Raises RuntimeError if critical config is missing.
    Logs warnings for optional config.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Configuration warning: {warning}")

    logger.info("Configuration validation passed")
