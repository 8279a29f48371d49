import os
import tempfile

# env must be set before wellness.config is imported
_DB_DIR = tempfile.mkdtemp(prefix="wellness-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["CREATE_TABLES_ON_STARTUP"] = "true"

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from wellness.main import app
from wellness.api.deps import get_kv_store
from wellness.services.aggregation import to_millis
from wellness.services.auth_service import get_current_user
from wellness.services.dashboard_storage import DashboardStorage
from wellness.services.kv_store import InMemoryKeyValueStore

NOW = datetime(2026, 10, 19, 12, 0, 0)


def ms_ago(days=0, hours=0, now=NOW):
    return to_millis(now - timedelta(days=days, hours=hours))


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def storage(memory_store):
    return DashboardStorage(memory_store, clock=lambda: NOW)


@pytest.fixture
def client(memory_store):
    app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(id=1, email="tester@mindful-app.com", name="Tester")
    app.dependency_overrides[get_kv_store] = lambda: memory_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_client():
    app.dependency_overrides.clear()
    with TestClient(app) as c:
        yield c
