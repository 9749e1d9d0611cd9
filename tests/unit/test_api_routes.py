"""
Tests for the HTTP API.

The TestClient is used without its context manager, so the startup
hook (scheduler, Telegram polling) never runs; services are injected
through app.state.
"""
import sqlite3

import pytest
from fastapi.testclient import TestClient

from jester.main import create_app
from jester.models.schemas import ContentResult, ContentSource, FailureReason


@pytest.fixture
def client(services):
    app = create_app()
    app.state.services = services
    return TestClient(app)


class TestRoot:
    def test_banner(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.text.startswith("🤖 Jester bot is running!")

    def test_info(self, client):
        data = client.get("/api/info").json()
        assert data["name"] == "Jester Telegram Bot"
        assert data["version"] == "2.0.0"
        assert "Message splitting" in data["features"]


class TestHealth:
    def test_up(self, client, services):
        services.audit_log.statistics.return_value = {"total_messages": 5, "unique_chats": 2}

        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "UP",
            "database": "connected",
            "bot": "running",
            "total_messages": 5,
            "unique_chats": 2,
        }

    def test_database_down(self, client, services):
        services.audit_log.statistics.side_effect = sqlite3.OperationalError("unable to open database file")

        response = client.get("/api/health")
        assert response.status_code == 503
        assert response.json()["status"] == "DOWN"
        assert response.json()["database"] == "disconnected"

    def test_log_disabled(self, client, services):
        services.audit_log = None
        assert client.get("/api/health").json()["database"] == "disabled"


class TestDailyHoroscope:
    def test_valid_sign(self, client, services):
        response = client.get("/api/v1/get-horoscope/daily", params={"sign": "овен", "Day": "today"})
        assert response.status_code == 200
        assert response.text == "🔮 овен"
        services.horoscopes.get.assert_called_once_with("овен")

    def test_invalid_sign(self, client, services):
        services.horoscopes.get.side_effect = None
        services.horoscopes.get.return_value = ContentResult(
            content="❓", source=ContentSource.HINT, failure=FailureReason.INVALID_KEY,
        )
        services.horoscopes.signs = ["овен", "телец"]

        response = client.get("/api/v1/get-horoscope/daily", params={"sign": "дракон"})
        assert response.status_code == 400
        assert response.json()["valid_keys"] == ["овен", "телец"]

    def test_sign_required(self, client):
        assert client.get("/api/v1/get-horoscope/daily").status_code == 422
