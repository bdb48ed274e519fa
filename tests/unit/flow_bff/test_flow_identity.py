import httpx
import pytest

from core_http.errors import Failure
from core_logging.error_codes import ErrorCode
from flow_bff.identity import (
    IdentityResolver,
    coerce_company_id,
    company_id_from_listing,
    normalize_email,
)
from flow_bff.service_urls import ServiceLocator
from flow_bff.upstream import UpstreamProxy
from flow_bff.users import StaticUserDirectory
from tests.helpers.flow_manager_stub import BASE_URL, COMPANY_ID, EMAIL, TENANT_KEY, FakeFlowManager


def _resolver(upstream, base_url=BASE_URL, phones=None):
    directory = StaticUserDirectory(phones if phones is not None else {EMAIL: TENANT_KEY})
    return IdentityResolver(ServiceLocator(base_url), UpstreamProxy(upstream.client), directory), directory


def test_normalize_email():
    assert normalize_email("  Ana@Example.COM ") == "ana@example.com"
    assert normalize_email("   ") is None
    assert normalize_email(None) is None


@pytest.mark.parametrize("candidate,expected", [
    (42, 42), ("42", 42), (" 42 ", 42), (42.0, 42), ("42.0", 42),
    (0, None), ("0", None), (-5, None), ("-5", None), (-5.0, None),
    (True, None), (42.5, None), ("abc", None),
    ("", None), (None, None), (float("inf"), None), ([42], None),
])
def test_coerce_company_id(candidate, expected):
    assert coerce_company_id(candidate) == expected


def test_company_id_from_listing_falls_back_to_company_id():
    assert company_id_from_listing([{"id": 5, "company_id": 6}]) == 5
    assert company_id_from_listing({"items": [{"company_id": "6"}]}) == 6
    assert company_id_from_listing([{"id": None, "company_id": 6}]) == 6
    assert company_id_from_listing([]) is None
    assert company_id_from_listing(["42"]) is None
    assert company_id_from_listing({"id": 42}) is None


@pytest.mark.asyncio
async def test_resolve_happy_path():
    upstream = FakeFlowManager()
    resolver, directory = _resolver(upstream)
    assert await resolver.resolve(EMAIL) == COMPANY_ID
    assert directory.lookups == [EMAIL]
    assert upstream.last().params == {"unique_identifier": TENANT_KEY}


@pytest.mark.asyncio
async def test_resolve_without_configuration_does_nothing():
    upstream = FakeFlowManager()
    resolver, directory = _resolver(upstream, base_url=None)
    result = await resolver.resolve(EMAIL)
    assert result == Failure(500, ErrorCode.FLOW_MANAGER_SERVICE_URL_NOT_CONFIGURED)
    assert directory.lookups == []
    assert upstream.calls == []


@pytest.mark.asyncio
async def test_resolve_unknown_user():
    upstream = FakeFlowManager()
    resolver, _ = _resolver(upstream, phones={})
    assert await resolver.resolve(EMAIL) == Failure(400, ErrorCode.COMPANY_NUMBER_REQUIRED)
    assert upstream.calls == []


@pytest.mark.asyncio
async def test_resolve_not_found_carries_listing():
    upstream = FakeFlowManager()
    upstream.companies[TENANT_KEY] = [{"id": "n/a"}]
    resolver, _ = _resolver(upstream)
    assert await resolver.resolve(EMAIL) == Failure(404, ErrorCode.COMPANY_ID_NOT_FOUND, [{"id": "n/a"}])


@pytest.mark.asyncio
async def test_resolve_upstream_failure():
    upstream = FakeFlowManager()
    upstream.override("GET", "companies/", httpx.Response(401, json={"detail": "no"}))
    resolver, _ = _resolver(upstream)
    assert await resolver.resolve(EMAIL) == Failure(401, ErrorCode.COMPANIES_FETCH_FAILED, {"detail": "no"})
