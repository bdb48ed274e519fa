import os
from typing import Dict, Optional

from opentelemetry import trace as _trace
from opentelemetry.propagate import extract, inject, set_global_textmap
from opentelemetry.propagators.textmap import default_setter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, ALWAYS_ON
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from core_logging import bind_trace_ids, get_logger, log_stage

_tracing_initialized = False

def _service_name(service_name: Optional[str]) -> str:
    return service_name or os.getenv("OTEL_SERVICE_NAME") or os.getenv("SERVICE_NAME") or "flow_bff"

def init_tracing(service_name: Optional[str] = None) -> None:
    """
    Idempotent tracer-provider bootstrap. Spans are exported over OTLP/HTTP
    only when OTEL_EXPORTER_OTLP_ENDPOINT is set; otherwise they still get
    real ids for log correlation.
    """
    global _tracing_initialized
    if _tracing_initialized:
        return
    _tracing_initialized = True

    svc = _service_name(service_name)
    tp = TracerProvider(resource=Resource.create({"service.name": svc}), sampler=ParentBased(ALWAYS_ON))
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        tp.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=_normalize_http_endpoint(endpoint))))
    _trace.set_tracer_provider(tp)
    set_global_textmap(TraceContextTextMapPropagator())

    log_stage(
        get_logger(svc), "init", "tracing_setup",
        exporter=endpoint or "", request_id="startup",
    )

def _normalize_http_endpoint(ep: str) -> str:
    # OTLP/HTTP exporters expect the full /v1/traces path
    if ep.endswith("/v1/traces"):
        return ep
    return ep.rstrip("/") + "/v1/traces"

def instrument_fastapi_app(app, service_name: Optional[str] = None) -> None:
    """
    Install a middleware that runs every request inside a server span
    (continuing an incoming W3C ``traceparent``) and mirrors the trace id on
    the response as ``x-trace-id``.
    """
    if getattr(app, "_otel_server_span_installed", False):
        return
    setattr(app, "_otel_server_span_installed", True)
    tracer = _trace.get_tracer(_service_name(service_name))

    @app.middleware("http")
    async def _otel_server_span(request, call_next):
        name = f"HTTP {request.method} {request.url.path}"
        with tracer.start_as_current_span(name, context=extract(dict(request.headers)),
                                          kind=_trace.SpanKind.SERVER) as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.target", request.url.path)
            ctx = span.get_span_context()
            tid = f"{ctx.trace_id:032x}" if ctx.trace_id else None
            if tid:
                bind_trace_ids(tid, f"{ctx.span_id:016x}")
            try:
                response = await call_next(request)
            finally:
                bind_trace_ids(None, None)
            span.set_attribute("http.status_code", response.status_code)
            if tid:
                response.headers["x-trace-id"] = tid
            return response

def current_trace_id_hex() -> Optional[str]:
    ctx = _trace.get_current_span().get_span_context()
    if ctx.trace_id:
        return f"{ctx.trace_id:032x}"
    return None

def inject_trace_context(headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Outbound headers with W3C trace context from the current span. Any
    caller-supplied ``traceparent`` / ``tracestate`` / ``x-trace-id`` is dropped
    so inbound values are never forwarded verbatim.
    """
    hdrs: Dict[str, str] = {
        k: v for k, v in (headers or {}).items()
        if k.lower() not in ("x-trace-id", "traceparent", "tracestate")
    }
    inject(hdrs, setter=default_setter)
    tid = current_trace_id_hex()
    if tid:
        hdrs["x-trace-id"] = tid
    return hdrs
