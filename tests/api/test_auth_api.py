from datetime import datetime, timedelta, timezone

import jwt
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from tutordesk.backend.main import app
from tutordesk.backend.config.config import settings
from tutordesk.backend.api.dependencies import get_db_client
from tutordesk.backend.api.utilities.limiter import limiter


def create_token(payload: dict, expires_in: timedelta = timedelta(minutes=5)) -> str:
    to_encode = {**payload, "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest_asyncio.fixture
async def unauthenticated_client(db_client):
    """Only the database is overridden; tokens are really verified."""
    app.dependency_overrides[get_db_client] = lambda: db_client
    limiter.enabled = False
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.asyncio
class TestAuth:

    async def test_root_needs_no_token(self, unauthenticated_client):
        response = await unauthenticated_client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "Student Attendance & Payment Tracker API"

    async def test_missing_token_returns_401(self, unauthenticated_client, db_client):
        response = await unauthenticated_client.get("/api/students")

        assert response.status_code == 401
        assert "message" in response.json()
        db_client.list_students.assert_not_called()

    async def test_invalid_token_returns_401(self, unauthenticated_client):
        response = await unauthenticated_client.get("/api/students", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json() == {"message": "Could not validate credentials"}

    async def test_expired_token_returns_401(self, unauthenticated_client):
        token = create_token({"sub": "admin-1"}, expires_in=timedelta(minutes=-1))

        response = await unauthenticated_client.get("/api/students", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_token_without_subject_returns_401(self, unauthenticated_client):
        token = create_token({"email": "admin@example.com"})

        response = await unauthenticated_client.get("/api/students", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    async def test_valid_token_reaches_the_handler(self, unauthenticated_client, db_client):
        db_client.list_students.return_value = []
        token = create_token({"sub": "admin-1", "email": "admin@example.com"})

        response = await unauthenticated_client.get("/api/students", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == []

    async def test_health_needs_no_token(self, unauthenticated_client):
        response = await unauthenticated_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
