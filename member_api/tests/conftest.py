import gc
from contextlib import ExitStack
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient

from member_api.auth.password import hash_password
from member_api.config import Settings, get_settings
from member_api.db import dispose_engine, get_session_factory, reset_session_factory
from member_api.db.repositories import create_member

PACKAGE_DIR = Path(__file__).resolve().parent.parent


def apply_migrations(db_url: str) -> None:
    cfg = Config(str(PACKAGE_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(PACKAGE_DIR / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")


def _reset_db_state() -> None:
    get_settings.cache_clear()
    dispose_engine()
    reset_session_factory()


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    """Fresh migrated SQLite database; the app's engine is bound to it."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    _reset_db_state()
    apply_migrations(url)

    yield url

    _reset_db_state()
    # Release SQLite file handles
    gc.collect()


@pytest.fixture
def db_session(db_url):
    session = get_session_factory()()
    yield session
    session.close()


@pytest.fixture
def make_client(db_url):
    """Build a TestClient around an app configured with ``overrides``."""
    with ExitStack() as stack:

        def factory(**overrides) -> TestClient:
            from member_api.main import create_app

            # TestClient requests arrive from the peer "testclient"
            overrides.setdefault("trusted_proxies", "testclient")
            settings = Settings(database_url=db_url, **overrides)
            return stack.enter_context(TestClient(create_app(settings)))

        yield factory


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def admin_member(db_session):
    return create_member(
        db_session,
        name="Admin",
        email="admin@example.com",
        password_hash=hash_password("admin-password"),
        role="admin",
    )


@pytest.fixture
def admin_headers(client, admin_member):
    response = client.post(
        "/api/v1/login",
        json={"email": "admin@example.com", "password": "admin-password"},
    )
    assert response.status_code == 200
    return auth_headers(response.json()["token"])


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client, email="alice@example.com", password="secret-password", name="Alice"):
    response = client.post(
        "/api/v1/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()
