# models/common.py

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, EmailStr, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(value: Any) -> Any:
    """Emails are stored lower-cased and stripped."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def strip_text(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


BCRYPT_MAX_BYTES = 72


def check_password_bytes(value: str) -> str:
    """bcrypt accepts at most 72 bytes; multibyte characters count more than once."""
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
    return value


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages)


class ListQuery(BaseModel):
    """Query parameters shared by every list endpoint."""
    page: int = 1
    limit: int = 10
    search: Optional[str] = None

    @field_validator("search", mode="before")
    @classmethod
    def _blank_search(cls, v):
        v = strip_text(v)
        return v or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


StrippedStr = Annotated[str, BeforeValidator(strip_text)]
NormalizedEmail = Annotated[EmailStr, BeforeValidator(normalize_email)]
Password = Annotated[str, AfterValidator(check_password_bytes)]
