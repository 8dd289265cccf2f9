# tests/test_main.py

"""
Tests for application startup.
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from main import create_app


class _MountWithoutPath:
    """Route entry exposing neither ``path`` nor ``methods``."""


def test_startup_with_database_init_serves_requests():
    with patch("main.create_db_and_tables") as create_tables:
        with TestClient(create_app()) as client:
            response = client.get("/health")

    create_tables.assert_called_once()
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_startup_skips_database_init_when_disabled():
    with patch("main.create_db_and_tables") as create_tables:
        with TestClient(create_app(init_db=False)):
            pass

    create_tables.assert_not_called()


def test_startup_tolerates_routes_without_path():
    app = create_app(init_db=False)
    app.router.routes.append(_MountWithoutPath())

    with TestClient(app):
        pass


def test_startup_validates_config():
    with patch("main.validate_config_on_startup") as validate:
        with TestClient(create_app(init_db=False)):
            pass

    validate.assert_called_once()
