"""
Tests for the setup-required state: the API boots without a database and
says what is missing instead of failing.
"""
import pytest

import core.database as database
from core.config import settings
from core.database import get_db
from core.exceptions import SetupRequiredError


@pytest.fixture
def unconfigured(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    monkeypatch.setattr(settings, "POSTGRES_HOST", None)


class TestSetupStatus:

    def test_configured(self, client):
        assert client.get("/v1/setup").json() == {"setup_required": False, "missing": []}
        assert client.get("/health").status_code == 200

    def test_setup_endpoint_lists_missing_keys(self, client, unconfigured):
        assert client.get("/v1/setup").json() == {"setup_required": True, "missing": ["DATABASE_URL"]}

    def test_health_reports_setup_required(self, client, unconfigured):
        resp = client.get("/health")
        assert resp.status_code == 503
        assert resp.json()["status"] == "setup_required"

    def test_postgres_host_is_enough(self, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", None)
        monkeypatch.setattr(settings, "POSTGRES_HOST", "db.internal")
        assert settings.database_url.startswith("postgresql://")
        assert "@db.internal:" in settings.database_url
        assert settings.missing_setup_keys == []

    def test_ping_has_no_dependencies(self, client, unconfigured):
        assert client.get("/ping").json() == {"pong": True}


class TestDataRoutesWithoutDatabase:

    def test_get_db_raises_setup_required(self, monkeypatch, unconfigured):
        monkeypatch.setattr(database, "SessionLocal", None)
        with pytest.raises(SetupRequiredError) as exc_info:
            next(get_db())
        assert exc_info.value.missing == ["DATABASE_URL"]
        assert not database.is_configured()

    def test_data_route_returns_setup_payload(self, client, athlete, auth_headers):
        def _unconfigured_db():
            raise SetupRequiredError(["DATABASE_URL"])
            yield  # pragma: no cover

        client.app.dependency_overrides[get_db] = _unconfigured_db
        resp = client.get("/v1/profile", headers=auth_headers(athlete))
        assert resp.status_code == 503
        data = resp.json()
        assert data["error_code"] == "SETUP_REQUIRED"
        assert data["setup_required"] is True
        assert data["missing"] == ["DATABASE_URL"]
