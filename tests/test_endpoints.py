"""
HTTP-level tests using FastAPI's TestClient.

Each test builds its own application on a temporary data directory
(see conftest.py).
"""

import json
import logging

import pytest
from fastapi.testclient import TestClient

from visit_tracker.core.exceptions import StorageError
from visit_tracker.core.setting import Settings
from visit_tracker.main import create_app
from visit_tracker.services.visit_log_service import VisitLogService
from visit_tracker.storage.interface import RecordStore
from visit_tracker.storage.json_file_store import JsonFileStore


class FailingStore(RecordStore):
    async def load(self):
        return []

    async def save(self, records):
        raise StorageError("read-only filesystem")


def _stored(path):
    return json.loads(path.read_text())


class TestHomePage:

    def test_home_page_calls_track(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "fetch('/track')" in response.text
        assert "console.error" in response.text

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestTrackEndpoint:

    def test_first_track(self, client, tmp_path):
        response = client.get("/track", headers={"User-Agent": "pytest-browser"})

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "totalVisits": 1}
        stored = _stored(tmp_path / "visits.json")
        assert len(stored) == 1
        assert stored[0]["ip"] == "testclient"
        assert stored[0]["userAgent"] == "pytest-browser"

    def test_forwarded_for_takes_precedence(self, client, tmp_path):
        client.get("/track", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert _stored(tmp_path / "visits.json")[0]["ip"] == "203.0.113.7"

    def test_sequential_tracks_count_up(self, client):
        for expected in range(1, 6):
            response = client.get("/track")
            assert response.json()["totalVisits"] == expected

    def test_31st_call_in_window_is_rejected(self, client, tmp_path):
        headers = {"X-Forwarded-For": "198.51.100.1"}
        for _ in range(30):
            assert client.get("/track", headers=headers).status_code == 200

        response = client.get("/track", headers=headers)

        assert response.status_code == 429
        assert response.json() == {"status": "error", "message": "Too many requests, slow down!"}
        assert len(_stored(tmp_path / "visits.json")) == 30

    def test_rate_limit_is_keyed_on_peer_not_forwarded_header(self, client, tmp_path):
        for i in range(30):
            response = client.get("/track", headers={"X-Forwarded-For": f"10.0.0.{i}"})
            assert response.status_code == 200

        response = client.get("/track", headers={"X-Forwarded-For": "10.0.0.99"})

        assert response.status_code == 429
        stored = _stored(tmp_path / "visits.json")
        assert len(stored) == 30
        assert stored[-1]["ip"] == "10.0.0.29"

    def test_rate_limit_is_per_peer(self, app, client):
        limiter = app.state.rate_limiter
        for _ in range(30):
            limiter.hit("192.0.2.50")

        response = client.get("/track")

        assert response.status_code == 200
        assert limiter.remaining("testclient") == 29

    @pytest.mark.parametrize("content", [
        b"\xff\xfe\x00garbage\x80",
        b"[" * 100000,
    ])
    def test_undecodable_log_is_discarded(self, client, tmp_path, content):
        (tmp_path / "visits.json").write_bytes(content)

        response = client.get("/track")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "totalVisits": 1}
        assert len(_stored(tmp_path / "visits.json")) == 1

    def test_access_log_names_peer_and_forwarded_address(self, client, caplog):
        caplog.set_level(logging.INFO, logger="visit_tracker")

        client.get("/track", headers={"X-Forwarded-For": "203.0.113.9"})

        lines = [r.getMessage() for r in caplog.records if r.name == "visit_tracker"]
        assert any(
            line.startswith("GET /track 200") and "peer:testclient" in line
            and "forwarded:203.0.113.9" in line
            for line in lines
        )

    def test_corrupt_log_is_discarded(self, client, tmp_path):
        (tmp_path / "visits.json").write_text("<<garbage>>")

        response = client.get("/track")

        assert response.json() == {"status": "ok", "totalVisits": 1}
        assert len(_stored(tmp_path / "visits.json")) == 1

    def test_write_failure_is_server_error(self, app, client, tmp_path):
        app.state.visit_log_service = VisitLogService(
            visits=FailingStore(), muted=JsonFileStore(tmp_path / "muted.json")
        )

        response = client.get("/track")

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Server error"}

    def test_response_carries_process_time(self, client):
        assert "x-process-time" in client.get("/track").headers


class TestAnalyticsEndpoint:

    def test_empty_without_activity(self, client):
        response = client.get("/analytics-data")
        assert response.status_code == 200
        assert response.json() == []

    def test_returns_tracked_visits(self, client):
        client.get("/track", headers={"X-Forwarded-For": "1.1.1.1", "User-Agent": "a"})
        client.get("/track", headers={"X-Forwarded-For": "2.2.2.2", "User-Agent": "b"})

        records = client.get("/analytics-data").json()

        assert [(r["ip"], r["userAgent"]) for r in records] == [("1.1.1.1", "a"), ("2.2.2.2", "b")]

    def test_corrupt_log_reads_as_empty(self, client, tmp_path):
        (tmp_path / "visits.json").write_text("[{broken")
        assert client.get("/analytics-data").json() == []

    def test_analytics_is_not_rate_limited(self, client):
        for _ in range(35):
            assert client.get("/analytics-data").status_code == 200


class TestMuteEndpoint:

    def test_missing_timestamp_is_rejected(self, client, tmp_path):
        client.get("/track", headers={"X-Forwarded-For": "1.1.1.1"})
        before = (tmp_path / "visits.json").read_text()

        response = client.post("/mute-entry", json={"ip": "1.1.1.1"})

        assert response.status_code == 400
        assert response.json()["status"] == "error"
        assert "timestamp" in response.json()["message"]
        assert (tmp_path / "visits.json").read_text() == before
        assert not (tmp_path / "muted.json").exists()

    def test_missing_ip_is_rejected(self, client, tmp_path):
        response = client.post("/mute-entry", json={"timestamp": "2026-01-01T00:00:00.000Z"})
        assert response.status_code == 400
        assert not (tmp_path / "muted.json").exists()

    def test_non_json_body_is_rejected(self, client):
        response = client.post(
            "/mute-entry", content="not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"status": "error", "message": "Invalid request body"}

    def test_mute_moves_entry_and_repeat_duplicates_it(self, client, tmp_path):
        client.get("/track", headers={"X-Forwarded-For": "1.1.1.1", "User-Agent": "a"})
        client.get("/track", headers={"X-Forwarded-For": "2.2.2.2", "User-Agent": "b"})
        entry = client.get("/analytics-data").json()[0]

        first = client.post("/mute-entry", json=entry)

        assert first.status_code == 200
        assert first.json() == {"status": "ok", "message": "Entry muted successfully"}
        assert [r["ip"] for r in client.get("/analytics-data").json()] == ["2.2.2.2"]
        assert _stored(tmp_path / "muted.json") == [entry]

        second = client.post("/mute-entry", json=entry)

        assert second.status_code == 200
        assert [r["ip"] for r in client.get("/analytics-data").json()] == ["2.2.2.2"]
        assert _stored(tmp_path / "muted.json") == [entry, entry]

    def test_write_failure_is_server_error(self, app, client, tmp_path):
        app.state.visit_log_service = VisitLogService(
            visits=JsonFileStore(tmp_path / "visits.json"), muted=FailingStore()
        )

        response = client.post(
            "/mute-entry", json={"ip": "1.1.1.1", "timestamp": "2026-01-01T00:00:00.000Z"}
        )

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Server error"}

    def test_mute_over_undecodable_logs(self, client, tmp_path):
        (tmp_path / "visits.json").write_bytes(b"\xff\xfe\x00garbage\x80")
        (tmp_path / "muted.json").write_text("[" * 100000)
        entry = {"ip": "1.1.1.1", "userAgent": None, "timestamp": "2026-01-01T00:00:00.000Z"}

        response = client.post("/mute-entry", json=entry)

        assert response.status_code == 200
        assert _stored(tmp_path / "visits.json") == []
        assert _stored(tmp_path / "muted.json") == [entry]


class TestEnvironment:

    def test_docs_served_in_development(self, client):
        assert client.get("/docs").status_code == 200
        assert client.get("/openapi.json").status_code == 200

    def test_docs_hidden_in_production(self, tmp_path):
        production = Settings(_env_file=None, DATA_DIR=tmp_path, ENV_SETTING="production")
        client = TestClient(create_app(production))

        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404
        assert client.get("/track").status_code == 200
