"""
Calls to the flow-manager service.

``UpstreamProxy.send`` returns either an :class:`UpstreamResponse` (any status)
or a :class:`TransportError`; ``forward`` folds that into the body payload on
2xx or a :class:`Failure` carrying the operation's error code. Nothing here
raises past the proxy.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

import httpx

from core_config.constants import METRIC_PREFIX
from core_http.client import get_http_client, send_request
from core_http.errors import Failure
from core_http.headers import is_json_content_type
from core_logging import get_logger, log_stage
from core_logging.error_codes import ErrorCode
from core_utils import jsonx

logger = get_logger("flow_bff.upstream")


@dataclass(frozen=True)
class JsonBody:
    """Body announced as JSON; ``value`` is None when it did not parse."""
    value: Any


@dataclass(frozen=True)
class TextBody:
    text: str


Body = Union[JsonBody, TextBody]


def body_payload(body: Body) -> Any:
    if isinstance(body, JsonBody):
        return body.value
    return body.text


@dataclass(frozen=True)
class UpstreamResponse:
    status: int
    body: Body

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def payload(self) -> Any:
        return body_payload(self.body)


@dataclass(frozen=True)
class TransportError:
    """The request never produced a response (DNS, connect, timeout, protocol...)."""
    message: str


def read_body(resp: httpx.Response) -> Body:
    if is_json_content_type(resp.headers.get("content-type")):
        if not resp.content:
            return JsonBody(None)
        try:
            return JsonBody(jsonx.loads(resp.content))
        except ValueError:
            # best-effort read: a broken JSON body degrades to null
            return JsonBody(None)
    return TextBody(resp.text)


def extract_items(payload: Any) -> List[Any]:
    """Normalize ``Listing = list | {"items": list}``; any other shape is empty."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        return payload["items"]
    return []


class UpstreamProxy:
    def __init__(self, client_provider: Optional[Callable[[], httpx.AsyncClient]] = None) -> None:
        self._client_provider = client_provider or get_http_client

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Union[UpstreamResponse, TransportError]:
        try:
            resp = await send_request(
                self._client_provider(), method, url,
                params=params, json=json, metric_prefix=METRIC_PREFIX,
            )
        except httpx.HTTPError as exc:
            return TransportError(str(exc) or exc.__class__.__name__)
        return UpstreamResponse(status=resp.status_code, body=read_body(resp))

    async def forward(
        self,
        method: str,
        url: str,
        *,
        failure_code: ErrorCode,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Union[Any, Failure]:
        """Body payload on 2xx; otherwise a Failure with *failure_code*."""
        result = await self.send(method, url, params=params, json=json)
        if isinstance(result, TransportError):
            log_stage(logger, "upstream", "upstream.transport_failed",
                      error_code=failure_code.value, status_code=502, method=method)
            return Failure(502, failure_code, result.message)
        if not result.ok:
            log_stage(logger, "upstream", "upstream.rejected",
                      error_code=failure_code.value, status_code=result.status, method=method)
            return Failure(result.status, failure_code, result.payload)
        return result.payload

    async def list_items(
        self,
        url: str,
        *,
        failure_code: ErrorCode,
        params: Optional[Dict[str, Any]] = None,
    ) -> Union[List[Any], Failure]:
        payload = await self.forward("GET", url, failure_code=failure_code, params=params)
        if isinstance(payload, Failure):
            return payload
        return extract_items(payload)
