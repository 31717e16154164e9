"""
Concurrent per-cluster statistics.

For each cluster three independent computations are scheduled on an
executor and joined with :func:`asyncio.gather`:
- depth summary
- magnitude summary
- time elapsed since the most recent significant event

A batch runs every cluster concurrently and joins with a fail-fast policy:
the first failure in input order aborts the batch as an
:class:`~quakestats.errors.AggregationError`. Output order always matches
input order, whatever order the tasks complete in.

Clusters and events are immutable, so they are shared by reference with
worker threads without locking. The functions here never configure the
event loop; :func:`aggregate_all_sync` is a convenience for scripts that
have none.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from ..errors import AggregationError
from ..events.models import Event
from ..spatial.kmeans import Cluster
from ..telemetry import TelemetrySink, emit_first_failure, track_operation
from .summary import MetricStatistics, summarize_metric

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ClusterStatistics:
    """
    Statistics derived from one cluster.

    Attributes:
        cluster_id: Id of the source cluster
        centroid: ``(longitude, latitude)`` of the source cluster
        size: Number of member events
        depth: Depth summary
        magnitude: Magnitude summary
        since_last_significant: Time between the run's reference time and the
            latest event above the significance threshold; None if no member
            qualifies
    """
    cluster_id: int
    centroid: Tuple[float, float]
    size: int
    depth: MetricStatistics
    magnitude: MetricStatistics
    since_last_significant: Optional[timedelta]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        since = self.since_last_significant
        return {
            "cluster_id": self.cluster_id,
            "centroid": {"lng": self.centroid[0], "lat": self.centroid[1]},
            "size": self.size,
            "depth": self.depth.to_dict(),
            "magnitude": self.magnitude.to_dict(),
            "since_last_significant_sec": None if since is None else since.total_seconds(),
        }


def _depth(event: Event) -> float:
    return event.depth


def _magnitude(event: Event) -> float:
    return event.magnitude


def _reference_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    # Naive datetimes are taken as UTC
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def time_since_last_significant(
    events: Sequence[Event],
    significance_threshold: float,
    now: datetime,
) -> Optional[timedelta]:
    """
    Elapsed time from the latest event with magnitude above the threshold.

    The comparison is strict: an event exactly at the threshold is not
    significant. Returns None when no event qualifies.
    """
    latest: Optional[Event] = None
    for event in events:
        if event.magnitude > significance_threshold and (latest is None or event.time_ms > latest.time_ms):
            latest = event
    if latest is None:
        return None
    return _reference_now(now) - latest.occurred_at


async def aggregate(
    cluster: Cluster,
    significance_threshold: float,
    *,
    now: Optional[datetime] = None,
    executor: Optional[Executor] = None,
) -> ClusterStatistics:
    """
    Compute statistics for one cluster.

    Args:
        cluster: Cluster to summarize
        significance_threshold: Magnitude above which an event is significant
        now: Reference time for recency (current UTC time if None)
        executor: Executor for the three sub-computations (loop default if None)

    Raises:
        EmptyMetricSample: If the cluster has no events. When several
            sub-computations fail, the first in (depth, magnitude, recency)
            order is raised.
    """
    loop = asyncio.get_running_loop()
    now = _reference_now(now)
    events = cluster.events

    results = await asyncio.gather(
        loop.run_in_executor(executor, summarize_metric, events, _depth, "depth"),
        loop.run_in_executor(executor, summarize_metric, events, _magnitude, "magnitude"),
        loop.run_in_executor(executor, time_since_last_significant, events, significance_threshold, now),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result

    depth, magnitude, since = results
    return ClusterStatistics(
        cluster_id=cluster.cluster_id,
        centroid=cluster.centroid,
        size=cluster.size,
        depth=depth,
        magnitude=magnitude,
        since_last_significant=since,
    )


async def gather_fail_fast(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """
    Run awaitables concurrently and join with an abort-on-first-error policy.

    Every awaitable runs to completion. If any failed, the failure with the
    lowest input index is raised as :class:`AggregationError` and all other
    results are discarded; otherwise results are returned in input order.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for index, result in enumerate(results):
        if isinstance(result, Exception):
            raise AggregationError(index, result) from result
        if isinstance(result, BaseException):
            raise result
    return list(results)


async def aggregate_all(
    clusters: Sequence[Cluster],
    significance_threshold: float,
    *,
    now: Optional[datetime] = None,
    max_concurrency: Optional[int] = None,
    executor: Optional[Executor] = None,
    sink: Optional[TelemetrySink] = None,
) -> List[ClusterStatistics]:
    """
    Compute statistics for every cluster concurrently.

    One reference time is captured for the whole batch so recency values are
    comparable across clusters.

    Args:
        clusters: Clusters to summarize
        significance_threshold: Magnitude above which an event is significant
        now: Reference time (current UTC time if None)
        max_concurrency: Cap on clusters processed at once (no cap if None)
        executor: Executor for per-cluster sub-computations
        sink: Telemetry sink for batch start/end and first failure

    Returns:
        One ClusterStatistics per cluster, in input order

    Raises:
        AggregationError: Wrapping the first failing cluster (input order)
    """
    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

    clusters = list(clusters)
    now = _reference_now(now)
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _run(c: Cluster) -> ClusterStatistics:
        if semaphore is None:
            return await aggregate(c, significance_threshold, now=now, executor=executor)
        async with semaphore:
            return await aggregate(c, significance_threshold, now=now, executor=executor)

    with track_operation(
        sink,
        "aggregate_all",
        num_clusters=len(clusters),
        significance_threshold=significance_threshold,
        max_concurrency=max_concurrency,
    ) as details:
        try:
            stats = await gather_fail_fast(_run(c) for c in clusters)
        except AggregationError as e:
            logger.warning(f"Batch aggregation aborted: {e}")
            emit_first_failure(sink, "aggregate_all", e.error, cluster_index=e.cluster_index)
            raise
        details["num_significant"] = sum(1 for s in stats if s.since_last_significant is not None)

    logger.info(f"Aggregated statistics for {len(stats)} clusters")
    return stats


def aggregate_all_sync(
    clusters: Sequence[Cluster],
    significance_threshold: float,
    **kwargs: Any,
) -> List[ClusterStatistics]:
    """Run :func:`aggregate_all` on a fresh event loop (no loop may be running)."""
    return asyncio.run(aggregate_all(clusters, significance_threshold, **kwargs))
