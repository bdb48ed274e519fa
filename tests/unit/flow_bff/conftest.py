import pytest
from fastapi.testclient import TestClient

from core_config import Settings
from flow_bff.app import create_app
from flow_bff.users import StaticUserDirectory
from tests.helpers.flow_manager_stub import BASE_URL, EMAIL, FIXED_NOW, TENANT_KEY, FakeFlowManager


def make_settings(**overrides) -> Settings:
    values = {"FLOW_MANAGER_SERVICE_URL": BASE_URL, "API_RATE_LIMIT_DEFAULT": ""}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def upstream() -> FakeFlowManager:
    return FakeFlowManager()


@pytest.fixture
def directory() -> StaticUserDirectory:
    return StaticUserDirectory({EMAIL: TENANT_KEY, "nophone@example.com": "  "})


@pytest.fixture
def make_client(upstream, directory):
    def _make(**overrides) -> TestClient:
        app = create_app(
            make_settings(**overrides),
            directory=directory,
            http_client=upstream.client(),
            clock=lambda: FIXED_NOW,
        )
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
