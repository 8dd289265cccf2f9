
# -------------------------
# Permission Models
# -------------------------
from .permission import (
    Permission,
    PermissionCreate,
    PermissionUpdate,
    PermissionRead,
)

# -------------------------
# Role Models
# -------------------------
from .role import (
    Role,
    RolePermission,
    RoleCreate,
    RoleUpdate,
    RolePermissionsUpdate,
    RoleRead,
    RoleListItem,
    RoleWithPermissions,
    RoleDetail,
)

# -------------------------
# User Models
# -------------------------
from .user import (
    User,
    UserCreate,
    UserUpdate,
    UserRead,
    UserListItem,
)

# -------------------------
# Auth Models
# -------------------------
from .auth import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    ChangePasswordRequest,
    RefreshTokenRequest,
    MeResponse,
)

# -------------------------
# Shared
# -------------------------
from .common import ListQuery, Pagination

__all__ = [
    # permissions
    "Permission",
    "PermissionCreate",
    "PermissionUpdate",
    "PermissionRead",

    # roles
    "Role",
    "RolePermission",
    "RoleCreate",
    "RoleUpdate",
    "RolePermissionsUpdate",
    "RoleRead",
    "RoleListItem",
    "RoleWithPermissions",
    "RoleDetail",

    # users
    "User",
    "UserCreate",
    "UserUpdate",
    "UserRead",
    "UserListItem",

    # auth
    "LoginRequest",
    "LoginResponse",
    "SignupRequest",
    "ChangePasswordRequest",
    "RefreshTokenRequest",
    "MeResponse",

    # shared
    "ListQuery",
    "Pagination",
]
