"""Cache diagnostics as an explicit, disposable context."""

from chat_cache.metrics.context import CacheMetrics, MetricsSnapshot

__all__ = [
    "CacheMetrics",
    "MetricsSnapshot",
]
