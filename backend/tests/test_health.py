"""
Exam Builder Backend — Health Endpoint Tests
==============================================

What:  GET /health reports OK/200 when the database answers and
       DEGRADED/503 when it does not.
How:   ping_database is patched; no database is touched.
"""

from unittest.mock import AsyncMock, patch

import pytest

from app import __version__


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        with patch("app.routes.health.ping_database", AsyncMock(return_value=None)):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["version"] == __version__
        assert body["services"]["api"] == "OK"
        assert body["services"]["database"]["status"] == "OK"
        assert "timestamp" in body and "message" in body

    @pytest.mark.asyncio
    async def test_database_down(self, test_client):
        with patch(
            "app.routes.health.ping_database",
            AsyncMock(side_effect=ConnectionRefusedError("no route to host")),
        ):
            response = await test_client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "DEGRADED"
        assert body["services"]["database"]["status"] == "ERROR"
