# client/api_client.py

import uuid
from typing import Any, Dict, Iterable, Optional, Union

import requests

from client.permission_cache import PermissionCache
from core.logging_config import logger
from core.permission_helpers import SUPER_ADMIN_REQUIRED

IdLike = Union[str, uuid.UUID]


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, errors: Optional[list] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class SessionExpired(ApiError):
    """The server no longer accepts this session; the local cache was cleared."""


class AdminApiClient:
    """
    Thin wrapper over the admin HTTP API.

    Every call returns the ``data`` block of the response envelope.
    """

    def __init__(
        self,
        base_url: str,
        cache: Optional[PermissionCache] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache or PermissionCache()
        self.http = session or requests.Session()
        self.timeout = timeout

    # -----------------------------------------------------
    # Transport
    # -----------------------------------------------------
    def _request(self, method: str, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None):
        headers = {}
        if self.cache.token:
            headers["Authorization"] = f"Bearer {self.cache.token}"

        response = self.http.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            params=params,
            headers=headers,
            timeout=self.timeout,
        )

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("message") or response.reason or "Request failed"

        if response.status_code == 401 or (
            response.status_code == 403 and message == SUPER_ADMIN_REQUIRED
        ):
            logger.warning(f"Session rejected ({response.status_code}): {message}")
            self.cache.clear()
            raise SessionExpired(response.status_code, message)

        if not response.ok:
            raise ApiError(response.status_code, message, body.get("errors"))

        return body.get("data")

    # -----------------------------------------------------
    # Auth
    # -----------------------------------------------------
    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.cache.store_login(data)
        return data

    def logout(self) -> None:
        # Tokens are stateless; dropping them locally ends the session
        self.cache.clear()

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")

    def signup(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/signup", json={"name": name, "email": email, "password": password})

    def change_password(self, current_password: str, new_password: str) -> None:
        self._request(
            "POST",
            "/auth/change-password",
            json={"current_password": current_password, "new_password": new_password},
        )

    def refresh(self) -> str:
        refresh_token = self.cache.refresh_token
        if not refresh_token:
            raise SessionExpired(401, "No refresh token stored")

        data = self._request("POST", "/auth/refresh-token", json={"refresh_token": refresh_token})
        self.cache.update_token(data["token"])
        return data["token"]

    # -----------------------------------------------------
    # Users
    # -----------------------------------------------------
    def list_users(self, page: int = 1, limit: int = 10, search: Optional[str] = None):
        return self._request("GET", "/users", params=_page_params(page, limit, search))

    def get_user(self, user_id: IdLike):
        return self._request("GET", f"/users/{user_id}")

    def create_user(self, **fields):
        return self._request("POST", "/users", json=fields)

    def update_user(self, user_id: IdLike, **fields):
        return self._request("PUT", f"/users/{user_id}", json=fields)

    def delete_user(self, user_id: IdLike) -> None:
        self._request("DELETE", f"/users/{user_id}")

    # -----------------------------------------------------
    # Roles
    # -----------------------------------------------------
    def list_roles(self, page: int = 1, limit: int = 10, search: Optional[str] = None):
        return self._request("GET", "/roles", params=_page_params(page, limit, search))

    def get_role(self, role_id: IdLike):
        return self._request("GET", f"/roles/{role_id}")

    def create_role(self, name: str):
        return self._request("POST", "/roles", json={"name": name})

    def update_role(self, role_id: IdLike, name: str):
        return self._request("PUT", f"/roles/{role_id}", json={"name": name})

    def delete_role(self, role_id: IdLike) -> None:
        self._request("DELETE", f"/roles/{role_id}")

    def grant_permissions(self, role_id: IdLike, permission_ids: Iterable[IdLike]):
        return self._request(
            "POST",
            f"/roles/{role_id}/permissions",
            json={"permission_ids": [str(pid) for pid in permission_ids]},
        )

    def revoke_permissions(self, role_id: IdLike, permission_ids: Iterable[IdLike]):
        return self._request(
            "DELETE",
            f"/roles/{role_id}/permissions",
            json={"permission_ids": [str(pid) for pid in permission_ids]},
        )

    # -----------------------------------------------------
    # Permissions
    # -----------------------------------------------------
    def list_permissions(self, page: int = 1, limit: int = 10, search: Optional[str] = None):
        return self._request("GET", "/permissions", params=_page_params(page, limit, search))

    def get_permission(self, permission_id: IdLike):
        return self._request("GET", f"/permissions/{permission_id}")

    def create_permission(self, resource: str, action: str, name: Optional[str] = None, description: Optional[str] = None):
        payload = {"resource": resource, "action": action, "description": description}
        if name:
            payload["name"] = name
        return self._request("POST", "/permissions", json=payload)

    def update_permission(self, permission_id: IdLike, **fields):
        return self._request("PUT", f"/permissions/{permission_id}", json=fields)

    def delete_permission(self, permission_id: IdLike) -> None:
        self._request("DELETE", f"/permissions/{permission_id}")


def _page_params(page: int, limit: int, search: Optional[str]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"page": page, "limit": limit}
    if search:
        params["search"] = search
    return params
