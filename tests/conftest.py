# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os

# Must be set before anything imports core.config
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from typing import Callable, Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, select

import models  # noqa: F401
from core.rate_limiter import reset_rate_limits
from core.security import hash_password
from core.tokens import issue_token
from database import build_engine, get_session
from jobs.seed_database import seed
from main import create_app
from models.role import Role
from models.user import User

DEFAULT_PASSWORD = "password123"


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test."""
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture(scope="function")
def seeded(session) -> Dict[str, Role]:
    """System roles, permission catalog and default grants."""
    seed(session)
    return {role.name: role for role in session.exec(select(Role)).all()}


@pytest.fixture(scope="function")
def app(session):
    """Create a test FastAPI application instance bound to the test session."""
    test_app = create_app(init_db=False)
    test_app.dependency_overrides[get_session] = lambda: session
    yield test_app
    test_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_limits():
    """Reset the login rate limiter before each test."""
    reset_rate_limits()
    yield
    reset_rate_limits()


# -----------------------------------------------------
# Accounts
# -----------------------------------------------------
@pytest.fixture
def make_user(session, seeded) -> Callable[..., User]:
    def _make(
        email: str,
        role_name: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        is_active: bool = True,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role_id=seeded[role_name].id if role_name else None,
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def super_admin(make_user) -> User:
    return make_user("root@example.com", "SUPERADMIN", name="Root Admin")


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("admin@example.com", "ADMIN", name="Plain Admin")


@pytest.fixture
def basic_user(make_user) -> User:
    return make_user("user@example.com", "USER", name="Basic User")


@pytest.fixture
def no_role_user(make_user) -> User:
    return make_user("norole@example.com", None, name="No Role")


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(str(user.id), user.email)}"}


@pytest.fixture
def headers_for() -> Callable[[User], Dict[str, str]]:
    return auth_headers


@pytest.fixture
def super_headers(super_admin) -> Dict[str, str]:
    return auth_headers(super_admin)


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture
def user_headers(basic_user) -> Dict[str, str]:
    return auth_headers(basic_user)
