import pytest

from core_http.errors import Failure
from core_logging.error_codes import ErrorCode
from flow_bff.service_urls import Resource, ServiceLocator, item_url, resolve_service_url


@pytest.mark.parametrize("base,expected", [
    ("https://flows.internal", "https://flows.internal/nodes/"),
    ("https://flows.internal/", "https://flows.internal/nodes/"),
    ("https://flows.internal/v1", "https://flows.internal/v1/nodes/"),
    ("https://flows.internal/v1/", "https://flows.internal/v1/nodes/"),
    ("https://flows.internal/v1/edges", "https://flows.internal/v1/nodes/"),
    ("https://flows.internal/v1/node-properties/", "https://flows.internal/v1/nodes/"),
    ("http://flows.internal:8081/v1?debug=1#frag", "http://flows.internal:8081/v1/nodes/"),
    ("  https://flows.internal/v1  ", "https://flows.internal/v1/nodes/"),
])
def test_resolve_service_url(base, expected):
    assert resolve_service_url(base, Resource.NODES) == expected


@pytest.mark.parametrize("base", [None, "", "   ", "flows.internal/v1", "ftp://flows.internal",
                                  "https://", "http://flows.internal:notaport/"])
def test_unusable_base_urls_resolve_to_none(base):
    assert resolve_service_url(base, Resource.NODES) is None


def test_compound_resource_names_are_not_confused():
    base = "https://flows.internal/v1/properties"
    assert resolve_service_url(base, Resource.NODE_PROPERTIES) == "https://flows.internal/v1/node-properties/"
    assert resolve_service_url(base, "condition-properties") == "https://flows.internal/v1/condition-properties/"
    base = "https://flows.internal/v1/notification-recipients"
    assert resolve_service_url(base, Resource.NOTIFICATIONS) == "https://flows.internal/v1/notifications/"


def test_item_url_encodes_segments():
    assert item_url("https://flows.internal/v1/nodes/", 7) == "https://flows.internal/v1/nodes/7"
    assert item_url("https://f/v1/condition-properties/", 5, 9) == "https://f/v1/condition-properties/5/9"
    assert item_url("https://f/v1/nodes/", "a/b") == "https://f/v1/nodes/a%2Fb"


def test_locator_require_returns_only_requested_urls():
    urls = ServiceLocator("https://flows.internal/v1").require(Resource.NODES, Resource.EDGES)
    assert dict(urls) == {
        Resource.NODES: "https://flows.internal/v1/nodes/",
        Resource.EDGES: "https://flows.internal/v1/edges/",
    }
    assert len(urls) == 2


def test_locator_not_configured():
    locator = ServiceLocator(None)
    assert locator.configured is False
    assert locator.url_for(Resource.COMPANIES) is None
    result = locator.require(Resource.NODES)
    assert isinstance(result, Failure)
    assert result.status == 500
    assert result.code == ErrorCode.FLOW_MANAGER_SERVICE_URL_NOT_CONFIGURED
