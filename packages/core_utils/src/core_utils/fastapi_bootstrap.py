"""
core_utils.fastapi_bootstrap — one-call FastAPI wiring for services.

Applies standard instrumentation and optional HTTP hardening; health routes
are attached separately by each service (core_utils.health).

Environment knobs (all optional):
  CORS_ORIGINS   — comma/space separated origins (e.g. "https://x, https://y").
  RATE_LIMIT     — "<count>/<unit>", units: second|minute|hour (e.g. "60/minute").
  PROXY_HEADERS  — "0" disables X-Forwarded-* handling (default on).
  FORWARDED_ALLOW_IPS — peers whose X-Forwarded-For is honored, comma separated
                   addresses/networks or "*" (default "127.0.0.1").
"""
from __future__ import annotations
import os, re
from typing import Iterable
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from core_observability.fastapi import instrument_app
from core_utils.rate_limit import RateLimitMiddleware

_UNIT_SECONDS = {"second": 1, "minute": 60, "hour": 3600}

def _parse_origins(s: str | None) -> list[str]:
    if not s:
        return []
    return [p.strip() for p in re.split(r"[\s,]+", s) if p.strip()]

def _trusted_proxies(s: str | None) -> list[str] | str:
    """``"*"`` trusts every peer; otherwise a list of addresses/networks (default loopback only)."""
    if s is None or not s.strip():
        return ["127.0.0.1"]
    if s.strip() == "*":
        return "*"
    return _parse_origins(s)

def _parse_rate_limit(s: str | None) -> tuple[int, float] | None:
    if not s:
        return None
    m = re.match(r"^(\d+)\s*/\s*(second|minute|hour)s?$", s.strip(), flags=re.I)
    if not m:
        return None
    count = int(m.group(1))
    return count, count / _UNIT_SECONDS[m.group(2).lower()]

def setup_service(
    app: FastAPI,
    service_name: str,
    *,
    enable_cors_env: str = "CORS_ORIGINS",
    rate_limit_env: str = "RATE_LIMIT",
    exclude_rate_limit_paths: Iterable[str] = ("/healthz", "/readyz", "/metrics"),
    attach_metrics_endpoint: bool = True,
    default_rate_limit: str | None = None,
) -> None:
    """
    Apply standard wiring to `app`:

      • tracing, request logging and /metrics via core_observability.fastapi.instrument_app
      • optional CORS (origins from env var)
      • reverse-proxy header handling for trusted proxies only
      • optional token-bucket RateLimitMiddleware (rate from env var, else *default_rate_limit*)
    """
    instrument_app(app, service_name, ttfb_label_route=True, attach_metrics_endpoint=attach_metrics_endpoint)

    origins = _parse_origins(os.getenv(enable_cors_env))
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    rl = _parse_rate_limit(os.getenv(rate_limit_env) or default_rate_limit)
    if rl:
        capacity, refill_per_sec = rl
        app.add_middleware(
            RateLimitMiddleware,
            capacity=capacity,
            refill_per_sec=refill_per_sec,
            exclude_paths=tuple(exclude_rate_limit_paths),
        )

    # added last so it runs first: the limiter keys on the forwarded client
    # only when the peer is a trusted proxy
    if os.getenv("PROXY_HEADERS", "1").lower() in ("1", "true", "yes"):
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=_trusted_proxies(os.getenv("FORWARDED_ALLOW_IPS")))

__all__ = ["setup_service"]
