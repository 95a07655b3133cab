from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock


@dataclass
class RouteStats:
    requests: int = 0
    duration_ms: float = 0.0
    max_duration_ms: float = 0.0
    # "2xx", "4xx", "5xx"...
    status_classes: Counter = field(default_factory=Counter)

    @property
    def errors(self) -> int:
        return self.status_classes["4xx"] + self.status_classes["5xx"]


class InMemoryRequestMetrics:
    """Per-route request counters kept for the life of the process.

    Keys are ``(route template, method)`` so ``/api/orders/{order_id}`` is one
    entry no matter how many ids were requested.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], RouteStats] = {}
        self._lock = Lock()

    def observe(self, endpoint: str, method: str, status_code: int, duration_ms: float) -> None:
        with self._lock:
            stats = self._routes.setdefault((endpoint, method), RouteStats())
            stats.requests += 1
            stats.duration_ms += duration_ms
            stats.max_duration_ms = max(stats.max_duration_ms, duration_ms)
            stats.status_classes[f"{status_code // 100}xx"] += 1

    def snapshot(self) -> dict[str, dict]:
        with self._lock:
            return {
                f"{method} {endpoint}": {
                    "total_requests": stats.requests,
                    "total_duration_ms": round(stats.duration_ms, 2),
                    "avg_duration_ms": round(stats.duration_ms / stats.requests, 2) if stats.requests else 0.0,
                    "max_duration_ms": round(stats.max_duration_ms, 2),
                    "error_count": stats.errors,
                    "status_classes": dict(stats.status_classes),
                }
                for (endpoint, method), stats in sorted(self._routes.items())
            }

    def reset(self) -> None:
        with self._lock:
            self._routes.clear()


request_metrics = InMemoryRequestMetrics()
