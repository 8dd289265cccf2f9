# models/role.py

import uuid
from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlmodel import Field, SQLModel

from models.common import StrippedStr, utcnow
from models.permission import PermissionRead


# =====================================================
# TABLES
# =====================================================
class Role(SQLModel, table=True):
    __tablename__ = "roles"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class RolePermission(SQLModel, table=True):
    """Join row; the composite primary key makes a grant unique per role."""
    __tablename__ = "role_permissions"

    role_id: uuid.UUID = Field(foreign_key="roles.id", primary_key=True, ondelete="CASCADE")
    permission_id: uuid.UUID = Field(foreign_key="permissions.id", primary_key=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# =====================================================
# PAYLOADS
# =====================================================
class RoleCreate(BaseModel):
    name: StrippedStr = PydanticField(min_length=2, max_length=50)


class RoleUpdate(BaseModel):
    name: StrippedStr = PydanticField(min_length=2, max_length=50)


class RolePermissionsUpdate(BaseModel):
    """Body of POST/DELETE /roles/{id}/permissions."""
    model_config = ConfigDict(populate_by_name=True)

    permission_ids: List[uuid.UUID] = PydanticField(alias="permissionIds", min_length=1)


# =====================================================
# RESPONSES
# =====================================================
class RoleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime


class RoleListItem(RoleRead):
    permission_count: int = 0
    user_count: int = 0


class RoleWithPermissions(RoleRead):
    """Role as returned at login and GET /auth/me: the dense matrix nested under the role."""
    permissions: Dict[str, Dict[str, bool]] = {}


class RoleDetail(RoleWithPermissions):
    permission_list: List[PermissionRead] = []
