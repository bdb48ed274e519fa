from __future__ import annotations
import time
from typing import Tuple
from fastapi import FastAPI, Request
from opentelemetry import trace as _trace
from core_logging import (
    get_logger, log_stage, bind_trace_ids, bind_request_id, current_trace_ids,
    reset_request_aggregate, emit_request_summary, emit_request_error_summary,
)
from core_utils.ids import generate_request_id
import core_metrics

_DEFAULT_SUPPRESS: Tuple[str, ...] = ("/healthz", "/readyz", "/metrics")

def attach_request_logging(
    app: FastAPI,
    *,
    service: str,
    metric_prefix: str,
    ttfb_label_route: bool = False,
    suppress_paths: Tuple[str, ...] = _DEFAULT_SUPPRESS,
) -> None:
    """
    Install the uniform request logger middleware.
    Emits:
      - {metric_prefix}_ttfb_seconds (histogram)
      - {metric_prefix}_http_requests_total (counter{method,code})
      - {metric_prefix}_http_5xx_total (counter)
    Adds headers:
      - x-request-id, x-trace-id (when available)
    """
    logger = get_logger(service)

    @app.middleware("http")
    async def _request_logger(request: Request, call_next):
        path = str(request.url.path or "")
        should_log = not any(path.endswith(p) for p in suppress_paths)

        reset_request_aggregate()
        _ctx = _trace.get_current_span().get_span_context()
        if getattr(_ctx, "trace_id", 0):
            bind_trace_ids(f"{_ctx.trace_id:032x}", f"{_ctx.span_id:016x}")

        # keep a caller-supplied request id, otherwise mint one
        req_id = request.headers.get("x-request-id") or generate_request_id()
        bind_request_id(req_id)
        t0 = time.perf_counter()
        if should_log:
            log_stage(
                logger, "http.server", "http.server.request",
                request_id=req_id,
                http={"method": request.method, "target": path},
            )

        resp = await call_next(request)

        if "x-trace-id" not in resp.headers:
            _tid, _ = current_trace_ids()
            if _tid:
                resp.headers["x-trace-id"] = _tid
        resp.headers["x-request-id"] = req_id

        dt = time.perf_counter() - t0
        if ttfb_label_route:
            _route_obj = request.scope.get("route")
            _route = getattr(_route_obj, "path", None) or path
            core_metrics.histogram(f"{metric_prefix}_ttfb_seconds", dt, route=_route)
        else:
            core_metrics.histogram(f"{metric_prefix}_ttfb_seconds", dt)
        core_metrics.counter(f"{metric_prefix}_http_requests_total", 1, method=request.method, code=str(resp.status_code))
        if resp.status_code >= 500:
            core_metrics.counter(f"{metric_prefix}_http_5xx_total", 1)

        if should_log:
            log_stage(
                logger, "http.server", "http.server.response",
                request_id=req_id,
                http={"status_code": resp.status_code, "method": request.method, "target": path},
                latency_ms=int(dt * 1000.0),
            )
            emit_request_error_summary(logger, service=service)
            emit_request_summary(logger, service=service)
        return resp
