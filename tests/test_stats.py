"""
Unit Tests for Statistics Module (quakestats.stats)

Tests metric summaries, per-cluster aggregation, the fail-fast batch join
and batch telemetry.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from quakestats.errors import AggregationError, EmptyMetricSample
from quakestats.stats import (
    ClusterStatistics,
    MetricStatistics,
    aggregate,
    aggregate_all,
    aggregate_all_sync,
    gather_fail_fast,
    summarize,
    summarize_metric,
    time_since_last_significant,
)
from quakestats.telemetry import OUTCOME_FAILURE, PHASE_FAILURE, RecordingSink

from tests.conftest import MAR_01_2014, make_event


# ==============================================================================
# Summary Tests
# ==============================================================================

class TestSummarize:
    """Test min/max/avg summaries."""

    def test_single_value(self):
        assert summarize([5.0]) == MetricStatistics(min=5.0, max=5.0, avg=5.0)

    def test_three_values(self):
        assert summarize([1.0, 2.0, 3.0]) == MetricStatistics(min=1.0, max=3.0, avg=2.0)

    def test_unordered_and_negative_values(self):
        stats = summarize([4.0, -2.0, 7.0, 1.0])

        assert stats.min == -2.0
        assert stats.max == 7.0
        assert stats.avg == pytest.approx(2.5)

    def test_accepts_generator(self):
        stats = summarize(x * 2.0 for x in range(4))
        assert stats == MetricStatistics(min=0.0, max=6.0, avg=3.0)

    def test_empty_sample_fails(self):
        with pytest.raises(EmptyMetricSample):
            summarize([])

    def test_empty_sample_is_not_zeros(self):
        with pytest.raises(ValueError, match="'depth'"):
            summarize([], metric="depth")

    def test_summarize_metric_projects_field(self):
        events = [make_event(depth=d) for d in (10.0, 30.0, 20.0)]
        stats = summarize_metric(events, lambda e: e.depth, metric="depth")
        assert stats == MetricStatistics(min=10.0, max=30.0, avg=20.0)

    def test_to_dict(self):
        assert summarize([1.0, 3.0]).to_dict() == {"min": 1.0, "max": 3.0, "avg": 2.0}


# ==============================================================================
# Recency Tests
# ==============================================================================

class TestTimeSinceLastSignificant:
    """Test the duration since the latest significant event."""

    def test_latest_significant_event_is_used(self, sample_clusters):
        events = sample_clusters[0].events
        since = time_since_last_significant(events, 5.0, MAR_01_2014)

        # Latest event above 5.0 is the M5.5 on 2014-02-10
        assert since == timedelta(days=19)

    def test_threshold_is_strict(self, sample_clusters):
        events = sample_clusters[0].events
        since = time_since_last_significant(events, 5.5, MAR_01_2014)

        # M5.5 does not exceed 5.5; the M6.0 on 2014-01-15 does
        assert since == MAR_01_2014 - datetime(2014, 1, 15, tzinfo=timezone.utc)

    def test_none_when_nothing_qualifies(self, sample_clusters):
        assert time_since_last_significant(sample_clusters[1].events, 7.0, MAR_01_2014) is None

    def test_naive_reference_time_is_utc(self, sample_clusters):
        naive = datetime(2014, 3, 1)
        since = time_since_last_significant(sample_clusters[0].events, 5.0, naive)
        assert since == timedelta(days=19)


# ==============================================================================
# Per-Cluster Aggregation Tests
# ==============================================================================

class TestAggregate:
    """Test statistics for a single cluster."""

    def test_aggregate_values(self, sample_clusters):
        stats = asyncio.run(aggregate(sample_clusters[0], 5.0, now=MAR_01_2014))

        assert isinstance(stats, ClusterStatistics)
        assert stats.cluster_id == 0
        assert stats.centroid == (10.5, 20.5)
        assert stats.size == 3
        assert stats.depth == MetricStatistics(min=5.0, max=25.0, avg=15.0)
        assert stats.magnitude.min == 3.0
        assert stats.magnitude.max == 6.0
        assert stats.magnitude.avg == pytest.approx(14.5 / 3)
        assert stats.since_last_significant == timedelta(days=19)

    def test_aggregate_empty_cluster_fails(self, empty_cluster):
        with pytest.raises(EmptyMetricSample) as exc_info:
            asyncio.run(aggregate(empty_cluster, 5.0))
        # Depth is reported first when both summaries fail
        assert exc_info.value.metric == "depth"

    def test_aggregate_with_explicit_executor(self, sample_clusters):
        with ThreadPoolExecutor(max_workers=3) as pool:
            stats = asyncio.run(aggregate(sample_clusters[1], 3.0, now=MAR_01_2014, executor=pool))

        assert stats.depth == MetricStatistics(min=100.0, max=300.0, avg=200.0)
        assert stats.since_last_significant == timedelta(days=19)

    def test_to_dict(self, sample_clusters):
        data = asyncio.run(aggregate(sample_clusters[0], 5.0, now=MAR_01_2014)).to_dict()

        assert data["centroid"] == {"lng": 10.5, "lat": 20.5}
        assert data["since_last_significant_sec"] == 19 * 86400
        assert data["depth"]["avg"] == 15.0


# ==============================================================================
# Batch Aggregation Tests
# ==============================================================================

class TestAggregateAll:
    """Test the concurrent, fail-fast batch."""

    def test_order_matches_input(self, sample_clusters):
        reversed_clusters = list(reversed(sample_clusters))
        stats = asyncio.run(aggregate_all(reversed_clusters, 5.0, now=MAR_01_2014))

        assert [s.cluster_id for s in stats] == [1, 0]

    def test_matches_sequential_results(self, sample_clusters):
        batch = asyncio.run(aggregate_all(sample_clusters, 4.0, now=MAR_01_2014))
        sequential = [asyncio.run(aggregate(c, 4.0, now=MAR_01_2014)) for c in sample_clusters]

        assert batch == sequential

    def test_concurrency_cap_gives_same_results(self, sample_clusters):
        capped = asyncio.run(aggregate_all(sample_clusters, 4.0, now=MAR_01_2014, max_concurrency=1))
        uncapped = asyncio.run(aggregate_all(sample_clusters, 4.0, now=MAR_01_2014))

        assert capped == uncapped

    def test_invalid_concurrency_cap(self, sample_clusters):
        with pytest.raises(ValueError):
            asyncio.run(aggregate_all(sample_clusters, 4.0, max_concurrency=0))

    def test_empty_batch(self):
        assert asyncio.run(aggregate_all([], 4.0)) == []

    def test_empty_cluster_fails_batch(self, sample_clusters, empty_cluster):
        clusters = [sample_clusters[0], empty_cluster, sample_clusters[1]]

        with pytest.raises(AggregationError) as exc_info:
            asyncio.run(aggregate_all(clusters, 4.0))

        err = exc_info.value
        assert err.cluster_index == 1
        assert isinstance(err.error, EmptyMetricSample)
        assert err.__cause__ is err.error

    def test_shared_reference_time(self, sample_clusters):
        stats = asyncio.run(aggregate_all(sample_clusters, 3.0))

        # Both clusters' latest significant events are on 2014-02-10
        assert stats[0].since_last_significant == stats[1].since_last_significant

    def test_sync_wrapper(self, sample_clusters):
        stats = aggregate_all_sync(sample_clusters, 5.0, now=MAR_01_2014)

        assert len(stats) == 2
        assert stats[1].since_last_significant is None

    def test_telemetry_reports_first_failure(self, sample_clusters, empty_cluster):
        sink = RecordingSink()
        with pytest.raises(AggregationError):
            asyncio.run(aggregate_all([empty_cluster, sample_clusters[0]], 4.0, sink=sink))

        events = sink.for_operation("aggregate_all")
        phases = [e.phase for e in events]
        assert PHASE_FAILURE in phases
        failure = events[phases.index(PHASE_FAILURE)]
        assert failure.error_kind == "EmptyMetricSample"
        assert failure.details["cluster_index"] == 0
        assert events[-1].outcome == OUTCOME_FAILURE


# ==============================================================================
# Join Combinator Tests
# ==============================================================================

class TestGatherFailFast:
    """Test the first-error-in-input-order join."""

    @staticmethod
    async def _value(value, delay):
        await asyncio.sleep(delay)
        return value

    @staticmethod
    async def _fail(message, delay):
        await asyncio.sleep(delay)
        raise RuntimeError(message)

    def test_results_in_input_order(self):
        results = asyncio.run(gather_fail_fast([
            self._value("slow", 0.05),
            self._value("fast", 0.0),
            self._value("medium", 0.01),
        ]))
        assert results == ["slow", "fast", "medium"]

    def test_first_error_by_input_position(self):
        with pytest.raises(AggregationError) as exc_info:
            asyncio.run(gather_fail_fast([
                self._value("ok", 0.0),
                self._fail("late", 0.05),
                self._fail("early", 0.0),
            ]))

        assert exc_info.value.cluster_index == 1
        assert str(exc_info.value.error) == "late"

    def test_empty(self):
        assert asyncio.run(gather_fail_fast([])) == []
