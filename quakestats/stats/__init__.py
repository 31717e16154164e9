"""
Cluster statistics for quakestats.

Usage:
    from quakestats.stats import aggregate_all, summarize

    stats = await aggregate_all(clusters, significance_threshold=5.0)
    depth = summarize([e.depth for e in events])
"""

from .summary import MetricStatistics, summarize, summarize_metric
from .aggregator import (
    ClusterStatistics,
    aggregate,
    aggregate_all,
    aggregate_all_sync,
    gather_fail_fast,
    time_since_last_significant,
)

__all__ = [
    "MetricStatistics",
    "summarize",
    "summarize_metric",
    "ClusterStatistics",
    "aggregate",
    "aggregate_all",
    "aggregate_all_sync",
    "gather_fail_fast",
    "time_since_last_significant",
]
