"""
core_metrics – tiny helpers so services can record counters / histograms
without touching prometheus_client directly.  Metric families are created
lazily on first use; the label names of that first call define the family,
so call-sites must use a stable label set per metric name.
"""

from __future__ import annotations

import threading
import time as _time
from typing import Any, Dict, Tuple

from prometheus_client import Counter, Gauge, Histogram

_COUNTERS: Dict[str, Tuple[Counter, Tuple[str, ...]]] = {}
_HISTOS: Dict[str, Tuple[Histogram, Tuple[str, ...]]] = {}
_GAUGES: Dict[str, Tuple[Gauge, Tuple[str, ...]]] = {}
_LOCK = threading.Lock()


def _family(store: Dict[str, Tuple[Any, Tuple[str, ...]]], cls, name: str, doc: str, attrs: Dict[str, Any]):
    with _LOCK:
        entry = store.get(name)
        if entry is None:
            labelnames = tuple(sorted(attrs))
            entry = (cls(name, doc, labelnames=labelnames), labelnames)
            store[name] = entry
    metric, labelnames = entry
    if not labelnames:
        return metric
    return metric.labels(**{k: str(attrs.get(k, "")) for k in labelnames})


def counter(name: str, inc: int | float = 1, **attrs: Any) -> None:
    """Increment counter *name* by *inc* (default 1)."""
    _family(_COUNTERS, Counter, name, f"Counter for {name}", attrs).inc(inc)


def histogram(name: str, value: float, **attrs: Any) -> None:
    """Record *value* in histogram *name*."""
    _family(_HISTOS, Histogram, name, f"Histogram for {name}", attrs).observe(value)


def gauge(name: str, value: float, **attrs: Any) -> None:
    """Set gauge *name* to *value*."""
    _family(_GAUGES, Gauge, name, f"Gauge for {name}", attrs).set(value)


def record_latency_seconds(name: str, t0: float, **attrs: Any) -> float:
    """Observe the time elapsed since ``t0`` (a ``perf_counter`` value); returns it."""
    dt = _time.perf_counter() - t0
    histogram(name, dt, **attrs)
    return dt


__all__ = ["counter", "histogram", "gauge", "record_latency_seconds"]
