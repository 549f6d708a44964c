"""
Shared fixtures.

Every test gets its own application, built on a temporary data directory, so
no test touches the working directory or another test's rate limit counters.
"""

import pytest
from fastapi.testclient import TestClient

from visit_tracker.core.setting import Settings
from visit_tracker.main import create_app
from visit_tracker.services.visit_log_service import VisitLogService
from visit_tracker.storage.json_file_store import JsonFileStore


@pytest.fixture
def app_settings(tmp_path):
    return Settings(_env_file=None, DATA_DIR=tmp_path)


@pytest.fixture
def app(app_settings):
    return create_app(app_settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def visits_store(tmp_path):
    return JsonFileStore(tmp_path / "visits.json")


@pytest.fixture
def muted_store(tmp_path):
    return JsonFileStore(tmp_path / "muted.json")


@pytest.fixture
def service(visits_store, muted_store):
    return VisitLogService(visits=visits_store, muted=muted_store)
