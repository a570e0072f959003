"""Latency and cache hit metrics for the classes listing.

Collected in-process; exposed through the ``/metrics`` endpoint.
"""
import time
from collections import defaultdict, deque
from contextlib import contextmanager

# Bounded so long-running workers keep a recent window only
_WINDOW = 1000

_timers: dict[str, deque] = defaultdict(lambda: deque(maxlen=_WINDOW))
_counters: dict[str, int] = defaultdict(int)


@contextmanager
def record_latency(name: str):
    start = time.perf_counter()
    try:
        yield
    finally:
        _timers[name].append((time.perf_counter() - start) * 1000.0)


def increment(name: str, amount: int = 1) -> None:
    _counters[name] += amount


def _percentiles(values: list[float]) -> dict:
    if not values:
        return {"count": 0, "avg_ms": None, "p95_ms": None, "p99_ms": None}
    ordered = sorted(values)

    def pct(p: float) -> float:
        return ordered[min(len(ordered) - 1, int(round(p * (len(ordered) - 1))))]

    return {
        "count": len(ordered),
        "avg_ms": sum(ordered) / len(ordered),
        "p95_ms": pct(0.95),
        "p99_ms": pct(0.99),
    }


def get_metrics_snapshot() -> dict:
    return {
        "latency": {name: _percentiles(list(values)) for name, values in _timers.items()},
        "counters": dict(_counters),
    }


def reset_metrics() -> None:
    _timers.clear()
    _counters.clear()
