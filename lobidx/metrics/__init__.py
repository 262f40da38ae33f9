"""Market analytics: candles and rebalancer pool metrics."""

from __future__ import annotations

from lobidx.metrics.chart import ChartAggregator
from lobidx.metrics.pool import ClaimVolumes, PoolMetricsAggregator, claim_volumes

__all__ = [
    "ChartAggregator",
    "ClaimVolumes",
    "PoolMetricsAggregator",
    "claim_volumes",
]
