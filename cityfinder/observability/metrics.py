"""In-process counters for provider lookups, the forward cache and city resolution."""
from __future__ import annotations

import contextlib
import time
from typing import Dict, Iterator, Optional

from cityfinder.observability.log import get_logger

LOGGER = get_logger(__name__)

PROVIDER_COUNTERS = ("provider_requests", "provider_failures", "provider_empty")
CACHE_COUNTERS = ("forward_cache_hits", "forward_cache_misses")
RESOLVER_COUNTERS = ("cities_resolved", "cities_unmatched")
TIMERS = ("command_duration_ms",)


class MetricsRegistry:
    """Counters shared by the client, resolver and CLI of one locator."""

    def __init__(self) -> None:
        names = PROVIDER_COUNTERS + CACHE_COUNTERS + RESOLVER_COUNTERS + TIMERS
        self._counters: Dict[str, int] = dict.fromkeys(names, 0)

    def incr(self, name: str, value: int = 1) -> None:
        self._counters[name] = self._counters.get(name, 0) + value

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    def cache_hit_ratio(self) -> Optional[float]:
        """Share of forward lookups answered from the cache; None before any lookup."""
        hits = self.get("forward_cache_hits")
        total = hits + self.get("forward_cache_misses")
        if not total:
            return None
        return hits / total

    def snapshot(self) -> Dict[str, int]:
        return dict(self._counters)


@contextlib.contextmanager
def record_duration(registry: MetricsRegistry, metric_name: str) -> Iterator[None]:
    """Add the wall time of the block, in milliseconds, to ``metric_name``."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        registry.incr(metric_name, elapsed_ms)
        LOGGER.debug("timer_stop", metric=metric_name, duration_ms=elapsed_ms)
