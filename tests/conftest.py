# tests/conftest.py
import asyncio
import sys
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from tutordesk.backend.main import app
from tutordesk.backend.api.auth import get_current_user
from tutordesk.backend.api.dependencies import get_db_client
from tutordesk.backend.api.schemas.user import AdminIdentity
from tutordesk.backend.api.utilities.limiter import limiter
from tutordesk.backend.db.db_client import AsyncPostgresClient

# This is the crucial fix for Windows asyncio issues with pytest.
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest.fixture
def db_client() -> AsyncMock:
    """An AsyncPostgresClient stand-in; every method is an AsyncMock."""
    return AsyncMock(spec=AsyncPostgresClient)


@pytest_asyncio.fixture
async def http_client(db_client):
    """
    HTTP client against the app with the database client and the auth
    dependency overridden. The lifespan (pool creation) is not run.
    """
    app.dependency_overrides[get_db_client] = lambda: db_client
    app.dependency_overrides[get_current_user] = lambda: AdminIdentity(id="admin-1", email="admin@example.com")
    limiter.enabled = False

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
