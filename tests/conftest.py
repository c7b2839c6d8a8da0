"""
Shared fixtures: an isolated SQLite file per test, the FastAPI app bound to
it, and helpers for seeding accounts and logging in.
"""

import os
from functools import partial

os.environ.setdefault("SECURITY__BCRYPT_ROUNDS", "4")

import anyio
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from arcade_admin.core.config import DatabaseSettings, Settings, get_settings
from arcade_admin.infrastructure.database.session import build_session_factory, init_db
from arcade_admin.main import create_app
from arcade_admin.modules.accounts.models import AccountCreateInput
from arcade_admin.modules.accounts.service import AccountService

get_settings.cache_clear()

ADMIN_PASSWORD = "admin123"
DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        environment="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'arcade.db'}"),
    )


@pytest.fixture
def engine(settings):
    return create_async_engine(settings.database_url, poolclass=NullPool)


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(anyio_backend, engine, session_factory):
    await init_db(engine)
    async with session_factory() as db:
        yield db


async def seed_account(session_factory, **fields):
    async with session_factory() as db:
        account = await AccountService.with_session(db).create_account(AccountCreateInput(**fields))
        await db.commit()
        return account


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(client, session_factory):
    """The root admin; tables already exist once the client has started."""
    return anyio.run(
        partial(seed_account, session_factory, username="admin", password=ADMIN_PASSWORD, role="admin")
    )


def login(client, username, password=DEFAULT_PASSWORD):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    # requests in tests authenticate by header only
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['data']['accessToken']}"}


def create_account(client, headers, username, role, password=DEFAULT_PASSWORD, **extra):
    resp = client.post(
        "/api/auth/users",
        json={"username": username, "password": password, "role": role, **extra},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
def admin_headers(client, admin):
    return login(client, "admin", ADMIN_PASSWORD)
