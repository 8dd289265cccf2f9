# models/user.py

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlmodel import Field, SQLModel

from models.common import NormalizedEmail, Password, StrippedStr, utcnow


# ===============================================================
# TABLE
# ===============================================================
class User(SQLModel, table=True):
    """
    Credential store row.
    A user holds no role (all-false matrix) or exactly one role.
    """
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)
    role_id: Optional[uuid.UUID] = Field(default=None, foreign_key="roles.id", index=True)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# ===============================================================
# PAYLOADS
# ===============================================================
class UserCreate(BaseModel):
    """
    Used by super admins via POST /users.
    Unlike self-service signup, the caller picks the role and active flag.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: StrippedStr = PydanticField(min_length=2, max_length=50)
    email: NormalizedEmail
    password: Password = PydanticField(min_length=6, max_length=72)
    role_id: Optional[uuid.UUID] = PydanticField(None, alias="roleId")
    is_active: bool = PydanticField(True, alias="isActive")


class UserUpdate(BaseModel):
    """
    Partial update. Fields left out are untouched; ``role_id: null``
    explicitly removes the user's role.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[StrippedStr] = PydanticField(None, min_length=2, max_length=50)
    email: Optional[NormalizedEmail] = None
    password: Optional[Password] = PydanticField(None, min_length=6, max_length=72)
    role_id: Optional[uuid.UUID] = PydanticField(None, alias="roleId")
    is_active: Optional[bool] = PydanticField(None, alias="isActive")


# ===============================================================
# RESPONSES
# ===============================================================
class UserRead(BaseModel):
    """User minus credential."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role_id: Optional[uuid.UUID] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserListItem(UserRead):
    role_name: Optional[str] = None
