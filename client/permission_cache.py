# client/permission_cache.py

"""
Local mirror of the signed-in session for admin tooling.

Holds the token pair, the user profile and the dense permission matrix
returned at login so the UI side can hide actions the caller cannot
perform. It is a convenience only: the server re-checks every request.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from core.logging_config import logger

DEFAULT_SESSION_PATH = Path.home() / ".rbac_admin" / "session.json"

PermissionPair = Tuple[str, str]


class CachedSession(BaseModel):
    """Persisted shape; anything that does not validate is discarded."""
    token: str = Field(min_length=1)
    refresh_token: Optional[str] = None
    user: Dict[str, Any] = {}
    permissions: Optional[Dict[str, Dict[str, Any]]] = None


class PermissionCache:
    def __init__(self, path: Optional[os.PathLike] = None):
        self.path = Path(path) if path is not None else DEFAULT_SESSION_PATH
        self.session: Optional[CachedSession] = None

    # -----------------------------------------------------
    # State
    # -----------------------------------------------------
    @property
    def token(self) -> Optional[str]:
        return self.session.token if self.session else None

    @property
    def refresh_token(self) -> Optional[str]:
        return self.session.refresh_token if self.session else None

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self.session.user if self.session else None

    @property
    def permissions(self) -> Optional[Dict[str, Dict[str, Any]]]:
        return self.session.permissions if self.session else None

    def store_login(self, data: Dict[str, Any]) -> None:
        """
        Store the ``data`` block of a successful login response.

        The matrix is read from ``data["role"]["permissions"]``. A user
        without a role gets no matrix, so every check fails closed.
        """
        role = data.get("role")
        matrix = role.get("permissions") if isinstance(role, dict) else None

        self.session = CachedSession(
            token=data["token"],
            refresh_token=data.get("refresh_token"),
            user=data.get("user") or {},
            permissions=matrix if isinstance(matrix, dict) else None,
        )
        self._save()

    def update_token(self, token: str) -> None:
        if self.session is None:
            return
        self.session.token = token
        self._save()

    def clear(self) -> None:
        self.session = None
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    # -----------------------------------------------------
    # Checks (fail closed)
    # -----------------------------------------------------
    def has_permission(self, resource: str, action: str) -> bool:
        matrix = self.permissions
        if not isinstance(matrix, dict):
            return False
        actions = matrix.get(resource)
        if not isinstance(actions, dict):
            return False
        return actions.get(action) is True

    def has_any_permission(self, pairs: Iterable[PermissionPair]) -> bool:
        return any(self.has_permission(resource, action) for resource, action in pairs)

    def has_all_permissions(self, pairs: Iterable[PermissionPair]) -> bool:
        return all(self.has_permission(resource, action) for resource, action in pairs)

    # -----------------------------------------------------
    # Persistence
    # -----------------------------------------------------
    def load(self) -> bool:
        """
        Load the persisted session. Returns ``True`` when a usable session
        was restored; a corrupted or malformed file is deleted.
        """
        self.session = None

        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return False

        try:
            self.session = CachedSession.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"Discarding unreadable session file {self.path}: {type(e).__name__}")
            self.clear()
            return False

        return True

    def _save(self) -> None:
        if self.session is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.session.model_dump_json(), encoding="utf-8")
