import pytest
from pydantic import ValidationError

from core_config import Settings
from core_config.constants import DEFAULT_API_PREFIX, DEFAULT_GRAPH_FANOUT_WORKERS


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("FLOW_MANAGER_SERVICE_URL", "API_PREFIX", "GRAPH_FANOUT_WORKERS",
                 "API_RATE_LIMIT_DEFAULT", "USERS_DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = Settings()
    assert s.flow_manager_service_url is None
    assert s.api_prefix == DEFAULT_API_PREFIX
    assert s.graph_fanout_workers == DEFAULT_GRAPH_FANOUT_WORKERS
    assert s.api_rate_limit_default == "100/minute"
    assert s.users_database_url.startswith("sqlite+aiosqlite://")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FLOW_MANAGER_SERVICE_URL", "  https://flows.internal/v1  ")
    monkeypatch.setenv("API_PREFIX", "bff/")
    monkeypatch.setenv("GRAPH_FANOUT_WORKERS", "8")
    s = Settings()
    assert s.flow_manager_service_url == "https://flows.internal/v1"
    assert s.api_prefix == "/bff"
    assert s.graph_fanout_workers == 8


def test_blank_upstream_url_is_unset(monkeypatch):
    monkeypatch.setenv("FLOW_MANAGER_SERVICE_URL", "   ")
    assert Settings().flow_manager_service_url is None


def test_fanout_workers_must_be_positive(monkeypatch):
    monkeypatch.setenv("GRAPH_FANOUT_WORKERS", "0")
    with pytest.raises(ValidationError):
        Settings()
