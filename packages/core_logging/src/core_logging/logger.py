import logging, sys, orjson, os, asyncio
from typing import Any, Optional, Dict, Iterable, List, Tuple
import time
import contextvars
from contextlib import contextmanager

# ────────────────────────────────────────────────────────────
# Request-level aggregation & summary emission
# ────────────────────────────────────────────────────────────
class _ReqAgg:
    __slots__ = ("events", "timers", "last", "errors")
    def __init__(self) -> None:
        self.events: dict[str, dict[str, int]] = {}
        self.timers: dict[str, list[float]] = {}
        self.last: dict[str, Any] = {}
        self.errors: list[dict[str, Any]] = []

_REQ_AGG: contextvars.ContextVar[Optional[_ReqAgg]] = contextvars.ContextVar("REQ_AGG", default=None)

# Attributes worth surfacing once in the request summary (last value wins)
_SUMMARY_KEYS = ("request_id", "company_id", "principal_fp", "resource", "route")

def _get_req_agg() -> _ReqAgg:
    agg = _REQ_AGG.get()
    if agg is None:
        agg = _ReqAgg()
        _REQ_AGG.set(agg)
    return agg

def reset_request_aggregate() -> None:
    """Start a fresh aggregate for the current request context."""
    _REQ_AGG.set(_ReqAgg())

def _should_summarize() -> bool:
    # LOG_EMIT_MODE=verbose emits every breadcrumb
    return os.getenv("LOG_EMIT_MODE", "summary").lower() in ("summary", "summarize", "compact")

def _should_emit_summary_for_service() -> bool:
    return os.getenv("LOG_SUMMARY_EMIT", "1").lower() in ("1", "true", "yes", "on")

def _is_error_like(event: str, extras: Dict[str, Any]) -> bool:
    if "error" in extras or "error_code" in extras or extras.get("level") == "ERROR":
        return True
    try:
        if int(extras.get("status_code", 200)) >= 500:
            return True
    except (TypeError, ValueError):
        pass
    ev = (event or "").lower()
    return any(k in ev for k in ("error", "failed", "exception", "denied", "not_found", "mismatch"))

def _always_emit(stage: str, event: str) -> bool:
    return stage == "init"

def _iter_latencies_ms(extras: Dict[str, Any]) -> Iterable[float]:
    v = extras.get("latency_ms")
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        yield float(v)

def _agg_note(stage: str, event: str, extras: Dict[str, Any]) -> None:
    agg = _get_req_agg()
    st = agg.events.setdefault(stage, {})
    st[event] = st.get(event, 0) + 1
    for v in _iter_latencies_ms(extras):
        agg.timers.setdefault(stage, []).append(v)
    for k in _SUMMARY_KEYS:
        v = extras.get(k)
        if v is not None and v != "":
            agg.last[k] = v
    http = extras.get("http")
    if isinstance(http, dict):
        if isinstance(http.get("method"), str) and stage == "http.server":
            agg.last["method"] = http["method"]
        if isinstance(http.get("target"), str) and stage == "http.server":
            agg.last["path"] = http["target"]
    if _is_error_like(event, extras):
        agg.errors.append({
            "stage": stage,
            "event": event,
            "attrs": {k: v for k, v in extras.items() if k not in ("message", "event")},
        })
    tid, _ = current_trace_ids()
    if tid and "trace_id" not in agg.last:
        agg.last["trace_id"] = tid

def emit_request_summary(logger: logging.Logger, *, service: Optional[str] = None) -> None:
    """Emit one compact per-request summary line when summary mode is active."""
    if not _should_summarize() or not _should_emit_summary_for_service():
        _REQ_AGG.set(None)
        return
    agg = _REQ_AGG.get()
    if not agg:
        return
    timers = {}
    for stage, vals in agg.timers.items():
        if not vals:
            continue
        srt = sorted(vals)
        n = len(srt)
        timers[stage] = {
            "count": n,
            "sum_ms": round(sum(srt), 3),
            "p50_ms": round(float(srt[int(0.5 * (n - 1))]), 3),
            "p95_ms": round(float(srt[int(0.95 * (n - 1))]), 3),
            "max_ms": round(max(srt), 3),
        }
    # upstream fan-out per request is the number operators care about
    upstream_calls = int((agg.events.get("http.client") or {}).get("http.client.request", 0))
    payload = {
        "stage": "summary",
        "service": service or os.getenv("SERVICE_NAME") or logger.name,
        "counts": {k: sum(v.values()) for k, v in agg.events.items()},
        "events": agg.events,
        "timers": timers,
        "upstream_calls": upstream_calls,
        **agg.last,
        "error_count": len(agg.errors),
    }
    rid = current_request_id()
    if rid and not payload.get("request_id"):
        payload["request_id"] = rid
    logger.info("request_summary", extra=_sanitize_extra(payload))
    _REQ_AGG.set(None)

# ────────────────────────────────────────────────────────────
# Error helpers (single-line ERRORs + end-of-request rollup)
# ────────────────────────────────────────────────────────────
def record_error(
    code: str,
    *,
    where: str,
    message: str,
    logger: logging.Logger,
    status_code: Optional[int] = None,
    context: Optional[Dict[str, Any]] = None,
    level: Optional[str] = None,
    **extras: Any,
) -> None:
    """
    Emit one normalized error line and keep a crumb for the end-of-request
    error rollup. Client-side failures (4xx) log at WARNING unless *level*
    says otherwise; everything else logs at ERROR.
    """
    agg = _get_req_agg()
    crumb = {
        "code": str(code),
        "where": str(where),
        "message": str(message),
        **({"status_code": int(status_code)} if status_code is not None else {}),
        **({"context": context} if isinstance(context, dict) else {}),
    }
    agg.errors.append(crumb)
    if level is None:
        level = "WARNING" if status_code is not None and 400 <= int(status_code) < 500 else "ERROR"
    levelno = getattr(logging, level.upper(), logging.ERROR)
    payload = {
        "stage": extras.pop("stage", None) or "error",
        "error_code": str(code),
        "error_message": message,
        "where": where,
        **({"status_code": int(status_code)} if status_code is not None else {}),
        **({"context": context} if isinstance(context, dict) else {}),
        **extras,
    }
    logger.log(levelno, "error", extra=_sanitize_extra(payload))

def _normalize_error_crumbs(crumbs: List[Dict[str, Any]]) -> Tuple[int, List[Dict[str, Any]]]:
    out: List[Dict[str, Any]] = []
    for c in crumbs or []:
        if "code" in c and "where" in c and "message" in c:
            out.append({k: v for k, v in c.items() if v is not None})
            continue
        ev = c.get("event")
        attrs = c.get("attrs") or {}
        out.append({
            "code": str(attrs.get("error_code") or str(ev or "GENERIC").upper().replace(".", "_")),
            "where": c.get("stage") or "unknown",
            "message": str(attrs.get("error_message") or attrs.get("error") or ev or "error"),
        })
    return len(out), out

def emit_request_error_summary(logger: logging.Logger, *, service: Optional[str] = None) -> None:
    """One compact rollup line when the current request accumulated errors."""
    agg = _REQ_AGG.get()
    if not agg or not agg.errors or not _should_emit_summary_for_service():
        return
    count, errors = _normalize_error_crumbs(agg.errors)
    payload: Dict[str, Any] = {
        "stage": "summary",
        "service": service or os.getenv("SERVICE_NAME") or logger.name,
        "error_count": count,
        "errors": errors[:50],
        "cause": errors[0]["code"],
    }
    rid = current_request_id()
    if rid:
        payload["request_id"] = rid
    tid = agg.last.get("trace_id") or current_trace_ids()[0]
    if tid:
        payload["trace_id"] = tid
    # 5xx-free requests only failed validation or ownership: keep them at WARNING
    statuses = [e.get("status_code") for e in errors if isinstance(e.get("status_code"), int)]
    if statuses and all(s < 500 for s in statuses):
        logger.warning("request_error_summary", extra=_sanitize_extra(payload))
    else:
        logger.error("request_error_summary", extra=_sanitize_extra(payload))

# ────────────────────────────────────────────────────────────
# Context binding (request id, trace ids)
# ────────────────────────────────────────────────────────────
_TRACE_IDS: contextvars.ContextVar[tuple[Optional[str], Optional[str]]] = \
    contextvars.ContextVar("_TRACE_IDS", default=(None, None))
_REQUEST_ID: contextvars.ContextVar[Optional[str]] = \
    contextvars.ContextVar("_REQUEST_ID", default=None)

def bind_trace_ids(trace_id: Optional[str], span_id: Optional[str]) -> None:
    """Bind trace/span ids for log correlation when OTEL has no active span."""
    _TRACE_IDS.set((trace_id, span_id))

def bind_request_id(request_id: Optional[str]) -> None:
    """Bind the current request_id into the local context for log injection."""
    _REQUEST_ID.set(request_id)

def current_request_id() -> Optional[str]:
    return _REQUEST_ID.get()

def current_trace_ids() -> tuple[Optional[str], Optional[str]]:
    return _TRACE_IDS.get()

class _RequestIdFilter(logging.Filter):
    """Inject the bound request_id into records that lack one."""
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            rid = _REQUEST_ID.get()
            if rid:
                record.request_id = rid
        return True

# Reserved LogRecord attributes we must not overwrite
_RESERVED: set[str] = {
    "name", "msg", "args", "levelname", "levelno",
    "pathname", "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message", "asctime",
    "taskName",
}

# Flat keys of the log envelope; everything else nests under `meta`
_TOP_LEVEL: set[str] = {
    "ts", "level", "service", "stage", "latency_ms",
    "request_id", "trace_id", "span_id",
    "company_id", "principal_fp",
    "status_code", "error_code", "path", "method",
}

def _default(obj):
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).decode("utf-8", errors="replace")
    if isinstance(obj, BaseException):
        return {"error": obj.__class__.__name__, "message": str(obj)}
    return str(obj)

class JsonFormatter(logging.Formatter):
    """One JSON object per line: fixed top-level envelope, extras under ``meta``."""

    def format(self, record: logging.LogRecord) -> str:
        base: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "service": os.getenv("SERVICE_NAME", record.name),
            "event": record.getMessage(),
        }

        trace_id, span_id = _otel_ids()
        if not trace_id:
            trace_id, span_id = _TRACE_IDS.get()
        if trace_id:
            base["trace_id"] = trace_id
        if span_id:
            base["span_id"] = span_id

        meta: Dict[str, Any] = {}
        for key, val in record.__dict__.items():
            if key in _RESERVED:
                continue
            if key in _TOP_LEVEL:
                base[key] = val
            else:
                meta[key] = val
        if record.exc_info:
            meta["exception"] = self.formatException(record.exc_info)
        if meta:
            base["meta"] = meta

        return orjson.dumps(base, default=_default).decode("utf-8")

def _otel_ids() -> tuple[Optional[str], Optional[str]]:
    from opentelemetry import trace as _otel_trace
    ctx = _otel_trace.get_current_span().get_span_context()
    # trace_id 0 means no valid span
    if getattr(ctx, "trace_id", 0):
        return f"{ctx.trace_id:032x}", f"{ctx.span_id:016x}"
    return None, None

class StructuredLogger(logging.Logger):
    """
    `logging.Logger` that accepts arbitrary keyword arguments
    (``logger.info("msg", stage="ownership")``) and folds them into ``extra``.
    """

    def _log(                                   # noqa: PLR0913 – keep signature
        self,
        level: int,
        msg: str,
        args,
        exc_info=None,
        extra: Dict[str, Any] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **kwargs: Any,
    ) -> None:
        if kwargs:
            extra = {**(extra or {}), **kwargs}
        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=_sanitize_extra(extra),
            stack_info=stack_info,
            stacklevel=stacklevel,
        )


class DynamicStdoutHandler(logging.StreamHandler):
    """Write to whatever ``sys.stdout`` is at emit time (capsys/redirect friendly)."""

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        self.setStream(sys.stdout)
        super().emit(record)


logging.setLoggerClass(StructuredLogger)


def get_logger(name: str = "app", level: str | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    is_service_root = "." not in name  # only top-level names own handlers

    if is_service_root:
        if not logger.handlers:
            handler = DynamicStdoutHandler()
            handler.setFormatter(JsonFormatter())
            logger.addHandler(handler)
        logger.propagate = False
    else:
        # module loggers bubble up to their service root
        for h in list(logger.handlers):
            logger.removeHandler(h)
        logger.propagate = True

    logger.setLevel(level or os.getenv("SERVICE_LOG_LEVEL", "INFO"))
    if not any(isinstance(f, _RequestIdFilter) for f in logger.filters):
        logger.addFilter(_RequestIdFilter())
    if is_service_root:
        log_once_process(logger, key=f"summary_emit_config:{name}",
                         event="summary.emit_config", enabled=_should_emit_summary_for_service(),
                         mode=os.getenv("LOG_EMIT_MODE", "summary"))
    return logger

def _emit_stage_log(logger: logging.Logger, stage: str, event: str, **extras: Any):
    payload = {"stage": stage, **extras}
    _agg_note(stage, event, payload)
    # summary mode folds routine breadcrumbs into request_summary
    if _should_summarize() and not _always_emit(stage, event) and not _is_error_like(event, payload):
        return
    logger.info(event, extra=_sanitize_extra(payload))

def log_stage(logger: logging.Logger, stage: str, event: str, **fixed: Any):
    """
    *Imperative*  →  log_stage(logger, "ownership", "check_passed", resource="nodes")
    *Decorator*   →  @log_stage(logger, "graph", "fanout")
                     async def fan_out(...): ...
    *Context*     →  with log_stage(logger, "upstream", "call").ctx(url=...): ...

    The imperative line is emitted immediately; the decorator / ``.ctx``
    variants add a ``<event>.done`` line carrying ``latency_ms``.
    """
    _emit_stage_log(logger, stage, event, **fixed)

    def _decorator(fn):
        if asyncio.iscoroutinefunction(fn):
            async def _aw(*a, **kw):
                t0 = time.perf_counter()
                try:
                    return await fn(*a, **kw)
                finally:
                    _emit_stage_log(logger, stage, f"{event}.done",
                                    latency_ms=(time.perf_counter() - t0) * 1000, **fixed)
            return _aw

        def _w(*a, **kw):
            t0 = time.perf_counter()
            try:
                return fn(*a, **kw)
            finally:
                _emit_stage_log(logger, stage, f"{event}.done",
                                latency_ms=(time.perf_counter() - t0) * 1000, **fixed)
        return _w

    @contextmanager
    def _ctx(**dynamic):
        _emit_stage_log(logger, stage, f"{event}.start", **(fixed | dynamic))
        t0 = time.perf_counter()
        try:
            yield
        finally:
            _emit_stage_log(logger, stage, f"{event}.done",
                            latency_ms=(time.perf_counter() - t0) * 1000, **(fixed | dynamic))

    _decorator.ctx = _ctx
    return _decorator

def _sanitize_extra(extra: Dict[str, Any] | None) -> Dict[str, Any]:
    """
    Rename keys that would collide with LogRecord attributes:
    ``message`` becomes ``message_extra``, any other collision ``meta_<key>``.
    A nested ``meta`` dict is flattened.
    """
    if not extra:
        return {}
    safe: Dict[str, Any] = {}
    for k, v in extra.items():
        key = str(k)
        if key == "meta" and isinstance(v, dict):
            for mk, mv in v.items():
                mk = str(mk)
                safe[f"meta_{mk}" if mk in _RESERVED else mk] = mv
            continue
        if key in _RESERVED:
            safe["message_extra" if key == "message" else f"meta_{key}"] = v
        else:
            safe[key] = v
    return safe

_ONCE_KEYS: set[str] = set()
def log_once_process(logger: logging.Logger, key: str, *, level: int = logging.INFO, event: str, **kwargs: Any) -> None:
    """Emit a structured line exactly once per *key* for the process lifetime."""
    if key in _ONCE_KEYS:
        return
    _ONCE_KEYS.add(key)
    logger.log(level, event, extra=_sanitize_extra(kwargs))
