# models/permission.py

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField, model_validator
from sqlmodel import Field, SQLModel

from models.common import StrippedStr, utcnow


# =====================================================
# TABLE
# =====================================================
class Permission(SQLModel, table=True):
    """
    Atomic (resource, action) grant unit.
    ``name`` follows the ``resource.action`` convention.
    """
    __tablename__ = "permissions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, nullable=False)
    resource: str = Field(index=True, nullable=False)
    action: str = Field(nullable=False)
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# =====================================================
# PAYLOADS
# =====================================================
class PermissionCreate(BaseModel):
    """``name`` defaults to ``resource.action`` when omitted."""
    name: Optional[StrippedStr] = PydanticField(None, min_length=2, max_length=50)
    resource: StrippedStr = PydanticField(min_length=2, max_length=50)
    action: StrippedStr = PydanticField(min_length=2, max_length=50)
    description: Optional[StrippedStr] = PydanticField(None, max_length=255)

    @model_validator(mode="after")
    def _default_name(self):
        if not self.name:
            self.name = f"{self.resource}.{self.action}"
        return self


class PermissionUpdate(BaseModel):
    name: Optional[StrippedStr] = PydanticField(None, min_length=2, max_length=50)
    resource: Optional[StrippedStr] = PydanticField(None, min_length=2, max_length=50)
    action: Optional[StrippedStr] = PydanticField(None, min_length=2, max_length=50)
    description: Optional[StrippedStr] = PydanticField(None, max_length=255)


# =====================================================
# RESPONSE
# =====================================================
class PermissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    resource: str
    action: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
