"""
Error taxonomy for the clustering and aggregation core.

Every expected failure is raised as a subclass of :class:`QuakeStatsError`
so callers can surface the specific kind. Precondition violations
(e.g. ``k = 0``) additionally subclass :class:`ValueError`.
"""

from __future__ import annotations

from typing import Optional


class QuakeStatsError(Exception):
    """Base class for all errors raised by quakestats."""

    @property
    def kind(self) -> str:
        """Error kind name used in telemetry events."""
        return type(self).__name__


class InvalidClusterCount(QuakeStatsError, ValueError):
    """Requested number of clusters is not a positive integer."""

    def __init__(self, k):
        self.k = k
        super().__init__(f"Cluster count must be a positive integer, got {k!r}")


class ClusteringFailed(QuakeStatsError):
    """The k-means fit could not produce a valid partition."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Clustering failed: {reason}")


class EmptyMetricSample(QuakeStatsError, ValueError):
    """Statistics were requested over zero values."""

    def __init__(self, metric: Optional[str] = None):
        self.metric = metric
        label = f"'{metric}'" if metric else "metric"
        super().__init__(f"Cannot summarize {label}: sample is empty")


class AggregationError(QuakeStatsError):
    """
    First per-cluster failure of a batch aggregation.

    Attributes:
        cluster_index: Position of the failing cluster in the input sequence
        error: The original exception raised for that cluster
    """

    def __init__(self, cluster_index: int, error: BaseException):
        self.cluster_index = cluster_index
        self.error = error
        super().__init__(
            f"Aggregation failed for cluster #{cluster_index}: "
            f"{type(error).__name__}: {error}"
        )


class TableConstructionError(QuakeStatsError):
    """Columnar event table could not be built or is missing columns."""


class TemporalConversionError(QuakeStatsError):
    """A timestamp could not be converted to a calendar date."""


class EventValidationError(QuakeStatsError, ValueError):
    """An event source payload failed validation."""
