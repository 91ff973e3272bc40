from contextlib import asynccontextmanager
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from tunecircle.db.database import Base, async_get_db
from tunecircle.main import app
from tunecircle.services.spotify_token_manager import CatalogAccessToken
from tunecircle.services.user_auth_service import get_current_user

from .utils.utils import add_test_user

SQLITE_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TestingAsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def test_lifespan(app: FastAPI):
    yield


@pytest.fixture(scope="function")
async def db_session():
    """Fresh in-memory database per test; services commit and roll back freely."""
    async_engine = create_async_engine(SQLITE_DATABASE_URL, poolclass=StaticPool)
    async with async_engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    async with TestingAsyncSessionLocal(bind=async_engine) as async_session:
        yield async_session
    await async_engine.dispose()


@pytest.fixture(scope="function", autouse=True)
def fresh_catalog_token():
    with patch(
        "tunecircle.services.spotify_token_manager.CATALOG_TOKEN", CatalogAccessToken()
    ) as token:
        yield token


@pytest.fixture(scope="function", autouse=True)
def upload_path(tmp_path):
    with patch.dict("tunecircle.services.avatar_service.config", {"UPLOAD_PATH": str(tmp_path)}):
        yield tmp_path


@pytest.fixture(scope="function")
async def current_user(db_session):
    return await add_test_user(db_session)


@pytest.fixture(scope="function")
async def anonymous_client(db_session):
    """Client that goes through the real bearer credential check."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[async_get_db] = override_get_db
    app.router.lifespan_context = test_lifespan
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="https://test"
    ) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def test_client(db_session, current_user):
    """Create a test client that uses the override_get_db fixture to return a session."""

    async def override_get_db():
        yield db_session

    async def mock_get_current_user():
        return current_user

    app.dependency_overrides[async_get_db] = override_get_db
    app.dependency_overrides[get_current_user] = mock_get_current_user
    app.router.lifespan_context = test_lifespan
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="https://test"
    ) as test_client:
        yield test_client
    app.dependency_overrides.clear()
