from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.common import NormalizedEmail, Password, StrippedStr
from models.role import RoleWithPermissions
from models.user import UserRead


# -----------------------------------------------------
# LOGIN
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: NormalizedEmail
    password: str = Field(min_length=1, max_length=72)


class LoginResponse(BaseModel):
    """
    ``role`` is null for users without a role; the client then has no
    matrix loaded and every permission check fails closed.
    """
    user: UserRead
    role: Optional[RoleWithPermissions] = None
    permissions: Dict[str, Dict[str, bool]] = {}
    token: str
    refresh_token: str


# -----------------------------------------------------
# SIGNUP (super admin provisions an account)
# -----------------------------------------------------
class SignupRequest(BaseModel):
    name: StrippedStr = Field(min_length=2, max_length=50)
    email: NormalizedEmail
    password: Password = Field(min_length=6, max_length=72)


# -----------------------------------------------------
# CHANGE PASSWORD
# -----------------------------------------------------
class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(min_length=1, max_length=72, alias="currentPassword")
    new_password: Password = Field(min_length=6, max_length=72, alias="newPassword")


# -----------------------------------------------------
# REFRESH
# -----------------------------------------------------
class RefreshTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(min_length=1, alias="refreshToken")


class MeResponse(BaseModel):
    user: UserRead
    role: Optional[RoleWithPermissions] = None
