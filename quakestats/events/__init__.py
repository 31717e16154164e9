"""Event records and the thin sources that produce them."""

from .models import Event
from .source import (
    Feature,
    FeatureProperties,
    PointGeometry,
    event_from_feature,
    events_from_geojson,
    synthetic_events,
)

__all__ = [
    "Event",
    "Feature",
    "FeatureProperties",
    "PointGeometry",
    "event_from_feature",
    "events_from_geojson",
    "synthetic_events",
]
