"""
Rutas Seguras Backend — Stats, Health & Envelope Tests
======================================================

What:  Dashboard counters, the /health probe, and cross-cutting response
       behaviour (error envelope for unknown paths, X-Request-ID echo).
"""

import pytest

from conftest import bearer, create_route, create_user


class TestStats:

    @pytest.mark.asyncio
    async def test_stats_require_authentication(self, test_client):
        assert (await test_client.get("/api/stats")).status_code == 401

    @pytest.mark.asyncio
    async def test_stats_count_active_rows(self, test_client, db_session, cliente_token):
        await create_user(db_session, "gone@x.com", active=False)
        await create_route(db_session)
        await create_route(db_session, active=False)
        await test_client.post(
            "/api/contacts",
            json={"name": "Ana", "email": "ana@x.com", "message": "Hola"},
        )

        response = await test_client.get("/api/stats", headers=bearer(cliente_token))

        assert response.status_code == 200
        assert response.json()["data"] == {"users": 1, "routes": 1, "units": 0, "contacts": 1}


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_connected_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"]
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_health_reports_unreachable_database(self, app, test_client, monkeypatch):
        class BrokenEngine:
            def connect(self):
                raise ConnectionError("database is down")

        monkeypatch.setattr(app.state.database, "engine", BrokenEngine())

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestEnvelope:

    @pytest.mark.asyncio
    async def test_unknown_path_uses_error_envelope(self, test_client):
        response = await test_client.get("/api/nothing-here")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "http_error"
        assert body["timestamp"]

    @pytest.mark.asyncio
    async def test_generated_request_id_is_returned(self, test_client):
        response = await test_client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "trace-abc-123"})
        assert response.headers["X-Request-ID"] == "trace-abc-123"

    @pytest.mark.asyncio
    async def test_unsafe_request_id_is_replaced(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
        assert response.headers["X-Request-ID"] != "bad id with spaces"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get(
            "/api/auth/me", headers={"X-Request-ID": "trace-401"}
        )
        assert response.json()["request_id"] == "trace-401"
