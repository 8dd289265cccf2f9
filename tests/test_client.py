# tests/test_client.py

"""
Tests for the admin client: local permission cache and HTTP wrapper.
"""

import json
from unittest.mock import Mock

import pytest

from client import AdminApiClient, ApiError, PermissionCache, SessionExpired
from core.permission_helpers import SUPER_ADMIN_REQUIRED

LOGIN_DATA = {
    "user": {"id": "u-1", "email": "user@example.com"},
    "role": {
        "id": "r-1",
        "name": "Editor",
        "permissions": {
            "post": {"create": True, "delete": False},
            "user": {"read": True},
        },
    },
    "token": "access-token",
    "refresh_token": "refresh-token",
}


@pytest.fixture
def cache(tmp_path):
    return PermissionCache(tmp_path / "session.json")


def _response(status_code, body=None, reason="OK"):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


def _client(cache, *responses):
    http = Mock()
    http.request.side_effect = list(responses)
    return AdminApiClient("http://api.test/", cache=cache, session=http), http


# -----------------------------------------------------
# PermissionCache
# -----------------------------------------------------
def test_empty_cache_denies_everything(cache):
    assert cache.has_permission("post", "create") is False
    assert cache.has_any_permission([("post", "create")]) is False


def test_store_login_reads_matrix_under_role(cache):
    cache.store_login(LOGIN_DATA)

    assert cache.token == "access-token"
    assert cache.has_permission("post", "create") is True
    assert cache.has_permission("post", "delete") is False
    assert cache.has_permission("post", "unknown") is False
    assert cache.has_permission("nothing", "read") is False


def test_store_login_without_role_fails_closed(cache):
    cache.store_login({**LOGIN_DATA, "role": None})

    assert cache.token == "access-token"
    assert cache.permissions is None
    assert cache.has_permission("user", "read") is False


def test_non_boolean_values_are_denied(cache):
    data = {**LOGIN_DATA, "role": {"permissions": {"post": {"create": "true", "delete": 1}}}}
    cache.store_login(data)

    assert cache.has_permission("post", "create") is False
    assert cache.has_permission("post", "delete") is False


def test_any_and_all_guards(cache):
    cache.store_login(LOGIN_DATA)

    assert cache.has_any_permission([("post", "delete"), ("user", "read")]) is True
    assert cache.has_all_permissions([("post", "create"), ("user", "read")]) is True
    assert cache.has_all_permissions([("post", "create"), ("post", "delete")]) is False
    assert cache.has_any_permission([]) is False
    assert cache.has_all_permissions([]) is True


def test_session_persists_across_instances(cache, tmp_path):
    cache.store_login(LOGIN_DATA)

    restored = PermissionCache(tmp_path / "session.json")
    assert restored.load() is True
    assert restored.refresh_token == "refresh-token"
    assert restored.has_permission("post", "create") is True


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps(["a", "list"]),
        json.dumps({"refresh_token": "missing-access-token"}),
        json.dumps({"token": "t", "permissions": ["post.create"]}),
    ],
)
def test_corrupted_session_is_discarded(tmp_path, content):
    path = tmp_path / "session.json"
    path.write_text(content, encoding="utf-8")

    cache = PermissionCache(path)

    assert cache.load() is False
    assert cache.token is None
    assert cache.has_permission("post", "create") is False
    assert not path.exists()


def test_clear_removes_file(cache):
    cache.store_login(LOGIN_DATA)
    cache.clear()

    assert cache.token is None
    assert not cache.path.exists()


# -----------------------------------------------------
# AdminApiClient
# -----------------------------------------------------
def test_login_stores_session(cache):
    api, http = _client(cache, _response(200, {"success": True, "data": LOGIN_DATA}))

    api.login("user@example.com", "secret123")

    method, url = http.request.call_args.args
    assert (method, url) == ("POST", "http://api.test/auth/login")
    assert cache.has_permission("post", "create") is True


def test_bearer_token_attached(cache):
    cache.store_login(LOGIN_DATA)
    api, http = _client(cache, _response(200, {"success": True, "data": {"users": []}}))

    api.list_users(search="ali")

    kwargs = http.request.call_args.kwargs
    assert kwargs["headers"]["Authorization"] == "Bearer access-token"
    assert kwargs["params"] == {"page": 1, "limit": 10, "search": "ali"}


def test_unauthorized_clears_session(cache):
    cache.store_login(LOGIN_DATA)
    api, _ = _client(cache, _response(401, {"success": False, "message": "Token expired"}))

    with pytest.raises(SessionExpired) as exc:
        api.me()

    assert exc.value.message == "Token expired"
    assert cache.token is None
    assert not cache.path.exists()


def test_super_admin_forbidden_clears_session(cache):
    cache.store_login(LOGIN_DATA)
    api, _ = _client(cache, _response(403, {"success": False, "message": SUPER_ADMIN_REQUIRED}))

    with pytest.raises(SessionExpired):
        api.list_roles()

    assert cache.token is None


def test_other_forbidden_keeps_session(cache):
    cache.store_login(LOGIN_DATA)
    api, _ = _client(
        cache,
        _response(403, {"success": False, "message": "Insufficient permissions: 'user.delete' required"}),
    )

    with pytest.raises(ApiError) as exc:
        api.delete_user("u-2")

    assert not isinstance(exc.value, SessionExpired)
    assert exc.value.status_code == 403
    assert cache.token == "access-token"


def test_non_json_error_uses_reason(cache):
    api, _ = _client(cache, _response(502, reason="Bad Gateway"))

    with pytest.raises(ApiError) as exc:
        api.list_permissions()

    assert exc.value.status_code == 502
    assert exc.value.message == "Bad Gateway"


def test_refresh_updates_token(cache):
    cache.store_login(LOGIN_DATA)
    api, http = _client(cache, _response(200, {"success": True, "data": {"token": "new-access"}}))

    assert api.refresh() == "new-access"
    assert http.request.call_args.kwargs["json"] == {"refresh_token": "refresh-token"}
    assert cache.token == "new-access"


def test_grant_permissions_sends_ids(cache):
    cache.store_login(LOGIN_DATA)
    api, http = _client(cache, _response(200, {"success": True, "data": {}}))

    api.grant_permissions("r-1", ["p-1", "p-2"])

    method, url = http.request.call_args.args
    assert (method, url) == ("POST", "http://api.test/roles/r-1/permissions")
    assert http.request.call_args.kwargs["json"] == {"permission_ids": ["p-1", "p-2"]}
