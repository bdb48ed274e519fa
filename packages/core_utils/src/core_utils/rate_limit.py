"""
Per-client token-bucket rate limiter for FastAPI services.
Over-limit requests get a 429 in the standard error envelope.
"""

import time
from collections import OrderedDict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

DEFAULT_MAX_CLIENTS = 10_000


class _TokenBucket:
    __slots__ = ("capacity", "refill_per_sec", "tokens", "last")

    def __init__(self, capacity: int, refill_per_sec: float) -> None:
        self.capacity = capacity
        self.refill_per_sec = refill_per_sec
        self.tokens = float(capacity)
        self.last = time.monotonic()

    def allow(self) -> bool:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last) * self.refill_per_sec)
        self.last = now
        if self.tokens >= 1:
            self.tokens -= 1
            return True
        return False


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Token bucket keyed by client host; `exclude_paths` are never throttled.
    At most `max_clients` buckets are kept, least recently seen evicted first.
    """

    def __init__(
        self,
        app,
        *,
        capacity: int,
        refill_per_sec: float,
        exclude_paths: tuple[str, ...] = ("/healthz", "/readyz", "/metrics"),
        max_clients: int = DEFAULT_MAX_CLIENTS,
    ):  # noqa: D401
        super().__init__(app)
        self._capacity = capacity
        self._refill_per_sec = refill_per_sec
        self._exclude_paths = set(exclude_paths)
        self._max_clients = max(1, max_clients)
        self._buckets: "OrderedDict[str, _TokenBucket]" = OrderedDict()

    def _bucket_for(self, key: str) -> _TokenBucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = _TokenBucket(self._capacity, self._refill_per_sec)
            while len(self._buckets) > self._max_clients:
                self._buckets.popitem(last=False)
        else:
            self._buckets.move_to_end(key)
        return bucket

    async def dispatch(self, request: Request, call_next):  # noqa: D401
        if request.url.path in self._exclude_paths:
            return await call_next(request)
        key = (request.client.host if request.client else "global") or "global"
        if self._bucket_for(key).allow():
            return await call_next(request)
        return JSONResponse(status_code=429, content={"error": {"code": "RATE_LIMITED"}})


__all__ = ["RateLimitMiddleware", "DEFAULT_MAX_CLIENTS"]
