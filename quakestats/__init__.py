"""
quakestats: spatial clustering and concurrent statistics for earthquake events.

Usage:
    from quakestats import cluster, aggregate_all_sync, monthly_counts

    clusters = cluster(events, k=5, seed=42)
    stats = aggregate_all_sync(clusters, significance_threshold=4.5)
    per_month = monthly_counts(events)
"""

from .errors import (
    AggregationError,
    ClusteringFailed,
    EmptyMetricSample,
    EventValidationError,
    InvalidClusterCount,
    QuakeStatsError,
    TableConstructionError,
    TemporalConversionError,
)
from .events import Event, events_from_geojson, synthetic_events
from .spatial import Cluster, ClusteringConfig, cluster, cluster_with_diagnostics, project_coordinates
from .stats import (
    ClusterStatistics,
    MetricStatistics,
    aggregate,
    aggregate_all,
    aggregate_all_sync,
    summarize,
)
from .temporal import aggregate_by_month, events_to_table, monthly_counts

__version__ = "0.1.0"

__all__ = [
    # Errors
    "AggregationError",
    "ClusteringFailed",
    "EmptyMetricSample",
    "EventValidationError",
    "InvalidClusterCount",
    "QuakeStatsError",
    "TableConstructionError",
    "TemporalConversionError",

    # Events
    "Event",
    "events_from_geojson",
    "synthetic_events",

    # Clustering
    "Cluster",
    "ClusteringConfig",
    "cluster",
    "cluster_with_diagnostics",
    "project_coordinates",

    # Statistics
    "ClusterStatistics",
    "MetricStatistics",
    "aggregate",
    "aggregate_all",
    "aggregate_all_sync",
    "summarize",

    # Temporal
    "aggregate_by_month",
    "events_to_table",
    "monthly_counts",
]
