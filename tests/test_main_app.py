"""
Main Application Tests

Tests for main.py application setup and endpoints.
"""

import os

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root(self, test_client):
        data = test_client.get("/").json()

        assert data["name"] == "StreakGuard"
        assert data["status"] == "running"

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRequestId:

    def test_generates_request_id(self, test_client):
        response = test_client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 16

    def test_echoes_request_id(self, test_client):
        response = test_client.get("/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"


class TestErrorHandlers:

    def test_unhandled_exception_is_generic(self, services):
        from main import create_app

        async def explode():
            raise RuntimeError("secret internals")

        services.auth.logout = explode
        client = TestClient(create_app(services), raise_server_exceptions=False)

        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}


class TestCorsOrigins:

    def test_defaults(self):
        from main import get_cors_origins

        with patch.dict(os.environ, {"CORS_ORIGINS": ""}):
            assert "http://localhost:3000" in get_cors_origins()

    def test_from_environment(self):
        from main import get_cors_origins

        with patch.dict(os.environ, {"CORS_ORIGINS": "https://a.example, https://b.example,"}):
            assert get_cors_origins() == ["https://a.example", "https://b.example"]


class TestLifespan:

    def test_builds_services_from_config(self, mock_config):
        from main import create_app

        app = create_app()
        with patch('main.get_config', return_value=mock_config), \
                patch('main.setup_structured_logging') as mock_setup:
            mock_config.log_level = "INFO"
            mock_config.json_logs = False
            mock_config.service_name = "streakguard"
            with TestClient(app) as client:
                assert client.get("/api/v1/engagement/rank", params={"points": 0}).status_code == 200
                assert app.state.services is not None

        mock_setup.assert_called_once_with(level="INFO", json_output=False, service_name="streakguard")
