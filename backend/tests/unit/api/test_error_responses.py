"""
Unit Tests for error translation at the HTTP boundary
"""
import logging

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError

from eventqr.core.database import get_db
from eventqr.main import app


class UnreachableSession:
    """Session whose every round trip fails as if the database were down"""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("could not connect to server at 10.0.0.5"))

    async def commit(self):
        raise OperationalError("COMMIT", {}, Exception("could not connect to server at 10.0.0.5"))

    async def rollback(self):
        return None


@pytest.fixture
async def outage_client():
    async def unreachable_db():
        yield UnreachableSession()

    app.dependency_overrides[get_db] = unreachable_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_db, None)


class TestStorageOutage:
    @pytest.mark.parametrize("method,path", [
        ("get", "/api/events"),
        ("get", "/api/registrations"),
        ("get", "/api/stats"),
        ("get", "/api/form-schemas/some-event"),
    ])
    async def test_outage_is_opaque_503(self, outage_client: AsyncClient, method, path):
        response = await getattr(outage_client, method)(path)

        assert response.status_code == 503
        assert response.json() == {
            "message": "Service temporarily unavailable",
            "code": "STORAGE_UNAVAILABLE",
        }
        assert "10.0.0.5" not in response.text
        assert "Traceback" not in response.text

    async def test_registration_write_during_outage(self, outage_client: AsyncClient):
        response = await outage_client.post(
            "/api/registrations", json={"eventId": "e1", "name": "Ann", "phone": "1"}
        )

        assert response.status_code == 503
        assert response.json()["code"] == "STORAGE_UNAVAILABLE"

    async def test_gated_route_during_outage(self, outage_client: AsyncClient, session_cookie_name):
        response = await outage_client.get("/api/user", headers={"Cookie": f"{session_cookie_name}=abc"})

        assert response.status_code == 503

    async def test_logout_still_succeeds(self, outage_client: AsyncClient, session_cookie_name):
        response = await outage_client.post("/api/logout", headers={"Cookie": f"{session_cookie_name}=abc"})

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}


class TestRequestLogging:
    async def test_client_error_logged_as_warning(self, client: AsyncClient, caplog):
        with caplog.at_level(logging.INFO, logger="eventqr"):
            await client.get("/api/events/nope")

        records = [r for r in caplog.records if getattr(r, "event_type", None) == "http_request"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].http_status == 404
        assert records[0].http_path == "/api/events/nope"
