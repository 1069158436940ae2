"""Pytest shared fixtures for the user resource."""
import base64
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from objectapi.config import AppConfig
from objectapi.core.cache import MemoryCache
from objectapi.core.db import get_connection, init_schema
from objectapi.core.hooks import HookRegistry
from objectapi.core.repository import UserRepository


# ─────────────────────────────────────────────────────────────────────────────
# Core collaborators
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "objectapi.db")


@pytest.fixture
def db(db_path):
    conn = get_connection(db_path)
    init_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def cache():
    return MemoryCache(ttl=60)


@pytest.fixture
def hooks():
    return HookRegistry()


@pytest.fixture
def repository(db, cache):
    return UserRepository(db, cache)


@pytest.fixture
def settings(db_path, tmp_path):
    return AppConfig(
        database_path=db_path,
        audit_log_dir=str(tmp_path / "audit"),
        audit_log_signing_key="test-signing-key",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def alice(repository):
    return repository.create_user("alice@example.com", "alice", "alice-pass")


@pytest.fixture
def bob(repository):
    return repository.create_user("bob@example.com", "bob", "bob-pass")


@pytest.fixture
def admin_user(repository):
    user = repository.create_user("root@example.com", "root", "root-pass")
    repository.set_admin(user, True)
    return user


# ─────────────────────────────────────────────────────────────────────────────
# Flask
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def app(settings, hooks):
    from objectapi.flask_app import create_app

    flask_app = create_app(settings, hooks)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def basic_auth(email: str, password: str) -> dict:
    """Authorization header for HTTP Basic credentials."""
    token = base64.b64encode(f"{email}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def auth_header():
    return basic_auth
