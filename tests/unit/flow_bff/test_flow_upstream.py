import httpx
import pytest

from core_http.errors import Failure
from core_logging.error_codes import ErrorCode
from flow_bff.upstream import (
    JsonBody,
    TextBody,
    TransportError,
    UpstreamProxy,
    extract_items,
    read_body,
)
from tests.helpers.flow_manager_stub import BASE_URL, FakeFlowManager


def _proxy(handler) -> UpstreamProxy:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return UpstreamProxy(lambda: client)


def test_read_body_variants():
    assert read_body(httpx.Response(200, json={"a": 1})) == JsonBody({"a": 1})
    assert read_body(httpx.Response(200, text="plain")) == TextBody("plain")
    assert read_body(httpx.Response(204)) == TextBody("")
    empty_json = httpx.Response(200, content=b"", headers={"content-type": "application/json; charset=utf-8"})
    assert read_body(empty_json) == JsonBody(None)
    broken = httpx.Response(200, content=b"{", headers={"content-type": "application/json"})
    assert read_body(broken) == JsonBody(None)


def test_extract_items_shapes():
    assert extract_items([1, 2]) == [1, 2]
    assert extract_items({"items": [3]}) == [3]
    assert extract_items({"items": "nope"}) == []
    assert extract_items({"data": [1]}) == []
    assert extract_items(None) == []
    assert extract_items("text") == []


@pytest.mark.asyncio
async def test_send_returns_any_status():
    proxy = _proxy(lambda req: httpx.Response(418, text="teapot"))
    result = await proxy.send("GET", f"{BASE_URL}/nodes/")
    assert result.status == 418
    assert result.ok is False
    assert result.payload == "teapot"


@pytest.mark.asyncio
async def test_send_folds_transport_errors():
    def _raise(req):
        raise httpx.ConnectTimeout("")

    result = await _proxy(_raise).send("GET", f"{BASE_URL}/nodes/")
    assert result == TransportError("ConnectTimeout")


@pytest.mark.asyncio
async def test_forward_success_and_failures():
    proxy = _proxy(lambda req: httpx.Response(200, json={"id": 1}))
    assert await proxy.forward("GET", f"{BASE_URL}/nodes/1", failure_code=ErrorCode.NODES_FETCH_FAILED) == {"id": 1}

    proxy = _proxy(lambda req: httpx.Response(404, json={"detail": "gone"}))
    failure = await proxy.forward("GET", f"{BASE_URL}/nodes/1", failure_code=ErrorCode.NODES_FETCH_FAILED)
    assert failure == Failure(404, ErrorCode.NODES_FETCH_FAILED, {"detail": "gone"})


@pytest.mark.asyncio
async def test_forward_sends_canonical_json():
    upstream = FakeFlowManager()
    proxy = UpstreamProxy(upstream.client)
    await proxy.forward("PUT", f"{BASE_URL}/nodes/7", failure_code=ErrorCode.NODES_UPDATE_FAILED,
                        json={"updated_at": "T", "prompt": "p", "created_at": "C"})
    call = upstream.last()
    assert call.raw == b'{"created_at":"C","prompt":"p","updated_at":"T"}'
    assert call.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_list_items_passes_params_and_unwraps():
    upstream = FakeFlowManager()
    proxy = UpstreamProxy(upstream.client)
    items = await proxy.list_items(f"{BASE_URL}/edges/", failure_code=ErrorCode.EDGES_FETCH_FAILED,
                                   params={"source_node_id": 7})
    assert [e["id"] for e in items] == [11]
    assert upstream.last().params == {"source_node_id": "7"}
