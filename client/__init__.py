from .api_client import AdminApiClient, ApiError, SessionExpired
from .permission_cache import DEFAULT_SESSION_PATH, PermissionCache

__all__ = [
    "AdminApiClient",
    "ApiError",
    "SessionExpired",
    "PermissionCache",
    "DEFAULT_SESSION_PATH",
]
