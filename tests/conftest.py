"""
Pytest configuration and shared fixtures for quakestats tests.

This file provides:
- An event factory with sensible defaults
- Small hand-built event sets with known geometry and timing
- Ready-made clusters for aggregation tests
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from quakestats.events import Event
from quakestats.spatial import Cluster


# ==============================================================================
# Time Constants (epoch milliseconds, UTC)
# ==============================================================================

JAN_15_2014_MS = 1_389_744_000_000
FEB_01_2014_MS = 1_391_212_800_000
FEB_10_2014_MS = 1_391_990_400_000
MAR_01_2014 = datetime(2014, 3, 1, tzinfo=timezone.utc)


def make_event(
    lng: float = 0.0,
    lat: float = 0.0,
    *,
    magnitude: float = 3.0,
    depth: float = 10.0,
    time_ms: int = JAN_15_2014_MS,
    event_id: str = "",
) -> Event:
    """Build an event with defaults for fields a test does not care about."""
    return Event(
        magnitude=magnitude,
        depth=depth,
        longitude=lng,
        latitude=lat,
        time_ms=time_ms,
        event_id=event_id,
    )


# ==============================================================================
# Event Sets
# ==============================================================================

@pytest.fixture
def two_group_events() -> List[Event]:
    """Six events in two well separated groups of three, interleaved."""
    return [
        make_event(-118.0, 34.0, event_id="a1"),
        make_event(139.0, 35.0, event_id="b1"),
        make_event(-118.2, 34.1, event_id="a2"),
        make_event(139.2, 35.2, event_id="b2"),
        make_event(-118.4, 33.9, event_id="a3"),
        make_event(139.1, 35.4, event_id="b3"),
    ]


@pytest.fixture
def jan_feb_2014_events() -> List[Event]:
    """Five events: two in January 2014 and three in February 2014."""
    return [
        make_event(1.0, 1.0, magnitude=2.1, time_ms=JAN_15_2014_MS),
        make_event(1.1, 1.0, magnitude=4.0, time_ms=FEB_01_2014_MS),
        make_event(1.2, 1.0, magnitude=3.3, time_ms=JAN_15_2014_MS + 3_600_000),
        make_event(1.3, 1.0, magnitude=5.2, time_ms=FEB_10_2014_MS),
        make_event(1.4, 1.0, magnitude=2.8, time_ms=FEB_10_2014_MS + 60_000),
    ]


# ==============================================================================
# Clusters
# ==============================================================================

@pytest.fixture
def sample_clusters() -> List[Cluster]:
    """Two populated clusters with known depth/magnitude/time values."""
    first = Cluster(
        cluster_id=0,
        events=(
            make_event(10.0, 20.0, magnitude=3.0, depth=5.0, time_ms=JAN_15_2014_MS),
            make_event(10.5, 20.5, magnitude=6.0, depth=15.0, time_ms=JAN_15_2014_MS),
            make_event(11.0, 21.0, magnitude=5.5, depth=25.0, time_ms=FEB_10_2014_MS),
        ),
        centroid_lng=10.5,
        centroid_lat=20.5,
    )
    second = Cluster(
        cluster_id=1,
        events=(
            make_event(-50.0, -10.0, magnitude=2.0, depth=100.0, time_ms=FEB_01_2014_MS),
            make_event(-51.0, -11.0, magnitude=4.0, depth=300.0, time_ms=FEB_10_2014_MS),
        ),
        centroid_lng=-50.5,
        centroid_lat=-10.5,
    )
    return [first, second]


@pytest.fixture
def empty_cluster() -> Cluster:
    return Cluster(cluster_id=2, events=())


@pytest.fixture
def usgs_feature() -> Dict[str, Any]:
    """A single feature in the USGS GeoJSON layout."""
    return {
        "type": "Feature",
        "id": "ci38457511",
        "properties": {
            "mag": 4.4,
            "place": "10km SW of Ridgecrest, CA",
            "time": JAN_15_2014_MS,
            "tsunami": 0,
            "magType": "mw",
        },
        "geometry": {"type": "Point", "coordinates": [-117.6, 35.6, 8.2]},
    }
