import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import httpx

from core_utils import jsonx
from core_observability.otel import inject_trace_context
from core_logging import get_logger, log_stage, current_request_id
from core_http.headers import ACCEPT_JSON, JSON_CONTENT_TYPE, X_REQUEST_ID
import core_metrics

# Module-level logger for this package
logger = get_logger("core_http")

_shared_client: httpx.AsyncClient | None = None

def _inject_headers(headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Merge caller headers with process context (trace + request-id).
    Never mutates the input dict.
    """
    base: Dict[str, str] = inject_trace_context({})
    rid = current_request_id()
    if rid:
        base.setdefault(X_REQUEST_ID, rid)
    if headers:
        base.update(headers)
    return base

def get_http_client() -> httpx.AsyncClient:
    """
    Return the process-wide ``httpx.AsyncClient``.

    Timeouts are httpx defaults. The client is shared by every request and
    **must not be closed** by callers; use :func:`close_http_client` at
    shutdown. A closed client is replaced on the next call.
    """
    global _shared_client
    if _shared_client is None or _shared_client.is_closed:
        if _shared_client is not None:
            log_stage(logger, "http.client", "recreating_shared_client",
                      request_id=current_request_id() or "startup")
        _shared_client = httpx.AsyncClient()
    return _shared_client

async def close_http_client() -> None:
    global _shared_client
    if _shared_client is not None and not _shared_client.is_closed:
        await _shared_client.aclose()
    _shared_client = None

async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    json: Any = None,
    headers: Optional[Dict[str, str]] = None,
    metric_prefix: str = "http_client",
) -> httpx.Response:
    """
    One upstream HTTP call, no retries.

    Always sends ``accept: application/json``; when *json* is given the body is
    canonical JSON (sorted keys) with ``Content-Type: application/json``.
    Returns the response whatever its status; transport failures propagate as
    ``httpx.HTTPError``.
    """
    method = method.upper()
    hdrs = _inject_headers({**ACCEPT_JSON, **(headers or {})})
    content: bytes | None = None
    if json is not None:
        content = jsonx.dumps_bytes(json)
        hdrs["Content-Type"] = JSON_CONTENT_TYPE
    parts = urlsplit(url)
    http_attrs = {
        "method": method,
        "scheme": parts.scheme or "http",
        "host": parts.hostname or "",
        "target": parts.path or "/",
    }
    log_stage(
        logger, "http.client", "http.client.request",
        request_id=current_request_id(),
        http=http_attrs,
        param_keys=sorted((params or {}).keys()),
    )
    t0 = time.perf_counter()
    try:
        resp = await client.request(method, url, params=params, content=content, headers=hdrs)
    except httpx.HTTPError as exc:
        core_metrics.counter(f"{metric_prefix}_upstream_requests_total", 1, method=method, code="transport_error")
        log_stage(
            logger, "http.client", "http.client.transport_error",
            request_id=current_request_id(),
            http=http_attrs,
            error=exc.__class__.__name__,
            latency_ms=int((time.perf_counter() - t0) * 1000.0),
        )
        raise
    dt = time.perf_counter() - t0
    core_metrics.counter(f"{metric_prefix}_upstream_requests_total", 1, method=method, code=str(resp.status_code))
    core_metrics.histogram(f"{metric_prefix}_upstream_latency_seconds", dt, method=method)
    log_stage(
        logger, "http.client", "http.client.response",
        request_id=current_request_id(),
        http={**http_attrs, "status_code": resp.status_code},
        latency_ms=int(dt * 1000.0),
    )
    return resp

__all__ = ["get_http_client", "close_http_client", "send_request"]
