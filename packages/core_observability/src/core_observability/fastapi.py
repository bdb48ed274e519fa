from __future__ import annotations
import os
from .otel import init_tracing, instrument_fastapi_app
from core_logging.request_logging import attach_request_logging
from core_metrics.fastapi import attach_prometheus_endpoint

def instrument_app(
    app,
    service_name: str | None = None,
    *,
    ttfb_label_route: bool = True,
    attach_metrics_endpoint: bool = True,
) -> None:
    """
    One-call FastAPI instrumentation:
      • OTEL tracer provider + server-span middleware,
      • structured request logging with `<service>_*` metric names,
      • Prometheus `/metrics`.
    The span middleware is registered last so it wraps request logging and
    every request log line carries the active trace id.
    """
    svc = service_name or os.getenv("OTEL_SERVICE_NAME") or os.getenv("SERVICE_NAME") or "flow_bff"
    init_tracing(svc)
    attach_request_logging(app, service=svc, metric_prefix=svc, ttfb_label_route=ttfb_label_route)
    instrument_fastapi_app(app, service_name=svc)
    if attach_metrics_endpoint:
        attach_prometheus_endpoint(app)
