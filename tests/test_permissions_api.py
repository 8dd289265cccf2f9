# tests/test_permissions_api.py

"""
Tests for the permission catalog endpoints.
"""

import uuid

from fastapi.testclient import TestClient


def test_create_permission_defaults_name(client: TestClient, super_headers):
    response = client.post(
        "/permissions",
        json={"resource": " post ", "action": "publish", "description": "Publish posts"},
        headers=super_headers,
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["name"] == "post.publish"
    assert data["resource"] == "post"


def test_create_permission_duplicate_name(client: TestClient, super_headers, seeded):
    response = client.post(
        "/permissions",
        json={"resource": "user", "action": "read"},
        headers=super_headers,
    )

    assert response.status_code == 409
    assert response.json()["message"] == "A permission with this name already exists"


def test_create_permission_validation(client: TestClient, super_headers):
    response = client.post("/permissions", json={"resource": "p"}, headers=super_headers)

    assert response.status_code == 400
    fields = {err["field"] for err in response.json()["errors"]}
    assert {"resource", "action"} <= fields


def test_list_permissions_search(client: TestClient, super_headers, seeded):
    response = client.get(
        "/permissions",
        params={"search": "grant", "limit": 100},
        headers=super_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [p["name"] for p in data["permissions"]] == ["permission.grant"]
    assert data["pagination"]["total"] == 1


def test_update_permission(client: TestClient, super_headers):
    created = client.post(
        "/permissions",
        json={"resource": "post", "action": "publish"},
        headers=super_headers,
    ).json()["data"]

    response = client.put(
        f"/permissions/{created['id']}",
        json={"description": "Make a post public"},
        headers=super_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["description"] == "Make a post public"
    assert data["name"] == "post.publish"


def test_delete_permission_removes_it_from_matrix(client: TestClient, super_headers, basic_user):
    created = client.post(
        "/permissions",
        json={"resource": "post", "action": "publish"},
        headers=super_headers,
    ).json()["data"]

    response = client.delete(f"/permissions/{created['id']}", headers=super_headers)
    assert response.status_code == 200

    me = client.get("/auth/me", headers=super_headers).json()["data"]
    assert "post" not in me["role"]["permissions"]


def test_get_missing_permission(client: TestClient, super_headers):
    response = client.get(f"/permissions/{uuid.uuid4()}", headers=super_headers)
    assert response.status_code == 404


def test_permissions_require_super_admin(client: TestClient, admin_headers):
    # ADMIN holds permission.read, but catalog management is super admin only
    response = client.get("/permissions", headers=admin_headers)
    assert response.status_code == 403
