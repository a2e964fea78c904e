"""
Shared pytest fixtures for the hookified tests.
This file contains database setup, test client configuration, and utility fixtures
that can be reused across all test files.
"""

import os
import tempfile

# Configuration is read at import time, so it has to be in place first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'hookified_import.db')}",
)
os.environ.setdefault("CRON_SECRET", "test-cron-secret")

from contextlib import asynccontextmanager  # noqa: E402
from unittest.mock import patch  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from hookified.app import app  # noqa: E402
from hookified.db import db_client  # noqa: E402
from hookified.db.models import Base  # noqa: E402
from hookified.services.dependencies import (  # noqa: E402
    get_firing_dispatcher,
    get_setup_cache,
)
from hookified.services.execution.dispatcher import BoundedWorkerPool  # noqa: E402


@pytest_asyncio.fixture
async def test_database(tmp_path):
    """
    Set up a temporary SQLite database for testing.
    Tables are created from the model metadata; the file is removed with tmp_path.
    """
    url = f"sqlite+aiosqlite:///{tmp_path / 'hookified_test.db'}"
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield url


@pytest_asyncio.fixture
async def db_session(test_database):
    """
    Point the global db_client at the temporary database.
    """
    original_engine = db_client.engine
    original_session = db_client.async_session

    test_engine = create_async_engine(test_database)
    db_client.engine = test_engine
    db_client.async_session = async_sessionmaker(bind=test_engine, expire_on_commit=False)

    yield db_client

    await test_engine.dispose()
    db_client.engine = original_engine
    db_client.async_session = original_session


@pytest_asyncio.fixture
async def test_user(db_session):
    return await db_session.get_or_create_user_by_provider_id("test_user_123")


@pytest_asyncio.fixture
async def firing_dispatcher():
    """A worker pool standing in for the one the app lifespan would create."""
    dispatcher = BoundedWorkerPool(concurrency=2, queue_size=10)
    app.dependency_overrides[get_firing_dispatcher] = lambda: dispatcher

    yield dispatcher

    app.dependency_overrides.pop(get_firing_dispatcher, None)
    await dispatcher.shutdown()


@pytest_asyncio.fixture
async def test_client_factory(db_session, firing_dispatcher):
    """
    Factory fixture that creates test clients for specific users.

    Usage:
        async def test_something(test_client_factory, test_user):
            async with test_client_factory(test_user) as client:
                response = await client.get("/api/v1/hooks")
    """
    from hookified.services.auth.depends import get_user

    @asynccontextmanager
    async def _create_client_for_user(user=None, setup_cache=None):
        async def mock_get_user():
            return user

        overrides = {}
        if user is not None:
            overrides[get_user] = mock_get_user
        if setup_cache is not None:
            overrides[get_setup_cache] = lambda: setup_cache

        originals = {dep: app.dependency_overrides.get(dep) for dep in overrides}
        app.dependency_overrides.update(overrides)

        try:
            async with AsyncClient(
                transport=ASGITransport(app=app), base_url="http://test"
            ) as client:
                yield client
        finally:
            for dep, original in originals.items():
                if original:
                    app.dependency_overrides[dep] = original
                else:
                    app.dependency_overrides.pop(dep, None)

    return _create_client_for_user


@pytest.fixture
def mock_httpx():
    """
    Route outbound httpx.AsyncClient traffic through a handler.

    Clients created before the handler is installed (such as the ASGI test
    client) keep their own transport.

    Usage:
        def handler(request: httpx.Request) -> httpx.Response: ...
        requests = mock_httpx(handler)
    """
    real_client = httpx.AsyncClient
    patchers = []

    def _install(handler):
        seen = []

        def _record(request):
            seen.append(request)
            return handler(request)

        def _factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(_record)
            return real_client(*args, **kwargs)

        patcher = patch("httpx.AsyncClient", side_effect=_factory)
        patcher.start()
        patchers.append(patcher)
        return seen

    yield _install

    for patcher in patchers:
        patcher.stop()
