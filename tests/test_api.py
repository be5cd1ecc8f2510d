import re
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from log_service.api import create_app
from log_service.config import ServiceConfig
from log_service.errors import ConfigurationError, StoreUnavailable
from log_service.models import parse_iso

UUID4 = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


@pytest.fixture
def failing_client(service_config):
    store = MagicMock()
    store.put.side_effect = StoreUnavailable("database is locked")
    store.query_recent.side_effect = StoreUnavailable("database is locked")
    app = create_app(service_config, store=store)
    app.config["TESTING"] = True
    return app.test_client()


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "healthy"
        assert data["table"] == "test_logs"
        assert data["backend"] == "memory"
        assert "validation" in data


class TestAppFactory:
    def test_missing_table_name_fails_fast(self):
        with pytest.raises(ConfigurationError):
            create_app(ServiceConfig(table_name=""))


class TestLogIngestion:
    def test_valid_log_accepted(self, client):
        before = datetime.now(timezone.utc)
        resp = client.post("/api/logs", json={"severity": "error", "message": "disk full"})
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["success"] is True
        assert UUID4.match(data["id"])
        assert abs((parse_iso(data["dateTime"]) - before).total_seconds()) < 1

    def test_missing_severity_rejected(self, client):
        resp = client.post("/api/logs", json={"message": "no severity"})
        assert resp.status_code == 400
        assert resp.get_json() == {
            "error": "Missing required fields: severity and message are required"
        }

    def test_invalid_severity_rejected(self, client):
        resp = client.post("/api/logs", json={"severity": "critical", "message": "boom"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid severity. Must be one of: info, warning, error"

    def test_non_json_body_rejected(self, client):
        resp = client.post("/api/logs", data="not json", content_type="text/plain")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Request body must be a JSON object"

    def test_rejected_entries_not_stored(self, client):
        client.post("/api/logs", json={"severity": "critical", "message": "boom"})
        client.post("/api/logs", json={"message": "no severity"})
        assert client.get("/api/logs").get_json() == {"count": 0, "logs": []}

    def test_store_failure_returns_500(self, failing_client):
        resp = failing_client.post("/api/logs", json={"severity": "info", "message": "hello"})
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Internal server error", "message": "database is locked"}

    def test_cors_headers(self, client):
        resp = client.post("/api/logs", json={"severity": "info", "message": "hello"})
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        resp = client.post("/api/logs", json={})
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_preflight(self, client):
        resp = client.open("/api/logs", method="OPTIONS")
        assert resp.status_code == 200
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]


class TestRecentLogs:
    def test_empty(self, client):
        resp = client.get("/api/logs")
        assert resp.status_code == 200
        assert resp.get_json() == {"count": 0, "logs": []}

    def test_persisted_shape(self, client):
        posted = client.post("/api/logs", json={"severity": "warning", "message": "slow"}).get_json()
        data = client.get("/api/logs").get_json()
        assert data["count"] == 1
        assert data["logs"][0] == {
            "logPartition": "LOGS",
            "dateTime": posted["dateTime"],
            "id": posted["id"],
            "severity": "warning",
            "message": "slow",
        }

    def test_capped_at_100_newest_first(self, client):
        for i in range(105):
            client.post("/api/logs", json={"severity": "info", "message": f"entry {i}"})
        data = client.get("/api/logs").get_json()
        assert data["count"] == 100
        assert len(data["logs"]) == 100
        assert data["logs"][0]["message"] == "entry 104"
        stamps = [log["dateTime"] for log in data["logs"]]
        assert stamps == sorted(stamps, reverse=True)

    def test_store_failure_returns_500(self, failing_client):
        resp = failing_client.get("/api/logs")
        assert resp.status_code == 500
        assert resp.get_json()["error"] == "Internal server error"


class TestFullFlow:
    def test_ingest_then_read(self, client):
        """Submit an error entry, then find it at the top of the recent window."""
        for i in range(3):
            assert client.post("/api/logs", json={"severity": "info", "message": f"m{i}"}).status_code == 201

        resp = client.post("/api/logs", json={"severity": "error", "message": "disk full"})
        assert resp.status_code == 201
        log_id = resp.get_json()["id"]

        logs = client.get("/api/logs").get_json()["logs"]
        assert logs[0]["id"] == log_id

        stats = client.get("/health").get_json()["validation"]
        assert stats["total"] == 4
        assert stats["valid"] == 4
