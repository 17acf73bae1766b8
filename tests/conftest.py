import os
import sys
import pytest
from fastapi.testclient import TestClient

ROOT_DIR = os.path.dirname(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Cheap hashing and no demo account while testing; must be set before the app is imported.
os.environ.setdefault("MYFINANCE_ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("MYFINANCE_ARGON2_TIME_COST", "1")
os.environ.setdefault("MYFINANCE_SEED_DEMO_USER", "false")

from main import app, get_storage  # noqa: E402
from models import User  # noqa: E402
from store import Storage  # noqa: E402


@pytest.fixture
def storage():
    """A fresh, empty application state."""
    return Storage()


@pytest.fixture
def make_user(storage):
    """Put a user straight into the store (no password hashing)."""
    def _make_user(email: str = "user@example.com") -> User:
        user = User(email=email, hashed_password="not-a-real-hash")
        storage.users.put(user.id, user)
        return user

    return _make_user


@pytest.fixture(scope="function")
def client(storage):
    """Return a TestClient wired to a fresh in-memory storage for each test."""
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_helpers(client):
    """
    Common auth utilities shared across test modules.
    Provides register/login helpers and a token helper.
    """
    def register_user(email: str, password: str):
        return client.post("/api/auth/register", json={"email": email, "password": password})

    def login_user(email: str, password: str):
        return client.post("/api/auth/login", json={"email": email, "password": password})

    def get_token(email: str, password: str) -> str:
        res_reg = register_user(email, password)
        assert res_reg.status_code in (201, 400)
        res_login = login_user(email, password)
        assert res_login.status_code == 200
        data = res_login.json()
        assert "token" in data
        return data["token"]

    def auth_headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    return {
        "register_user": register_user,
        "login_user": login_user,
        "get_token": get_token,
        "auth_headers": auth_headers,
    }


@pytest.fixture
def authed(auth_helpers):
    """Headers for a freshly registered user."""
    token = auth_helpers["get_token"]("owner@example.com", "OwnerPass123!")
    return auth_helpers["auth_headers"](token)
