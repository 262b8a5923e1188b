"""Shared fixtures for the wordtype test suite."""
import pytest
from fastapi.testclient import TestClient

import auth
import coze
import youdao
from cache import MemoryStore


@pytest.fixture(autouse=True)
def reset_rate_limits():
    auth._rate_buckets.clear()
    yield
    auth._rate_buckets.clear()


@pytest.fixture()
def memory_store():
    return MemoryStore()


@pytest.fixture()
def coze_config(monkeypatch):
    """Point the workflow client at a fully configured (fake) deployment."""
    monkeypatch.setattr(coze, "COZE_TOKEN", "pat_server_token_0123456789")
    monkeypatch.setattr(coze, "COZE_BASE_URL", "https://coze.example")
    monkeypatch.setattr(coze, "COZE_WORKFLOW_ID", "wf-123")
    monkeypatch.setattr(coze, "COZE_APP_ID", "app-456")


@pytest.fixture()
def no_upstream_config(monkeypatch):
    for name in ("COZE_TOKEN", "COZE_WORKFLOW_ID", "COZE_APP_ID"):
        monkeypatch.setattr(coze, name, "")
    monkeypatch.setattr(youdao, "YOUDAO_APP_KEY", "")
    monkeypatch.setattr(youdao, "YOUDAO_APP_SECRET", "")


@pytest.fixture()
def client():
    from backend import app

    with TestClient(app) as test_client:
        yield test_client
