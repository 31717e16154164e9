"""
Event sources feeding the core.

Two thin sources are provided:
1. GeoJSON FeatureCollection parsing (USGS catalogue layout), validated with
   pydantic so non-finite or missing numeric fields are rejected at ingestion
2. A seeded synthetic generator for demos and tests

Neither source performs any network I/O.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import EventValidationError
from .models import Event

logger = logging.getLogger(__name__)


# -----------------------------
# GeoJSON schema
# -----------------------------

class FeatureProperties(BaseModel):
    """Subset of USGS feature properties consumed by :class:`Event`."""

    mag: float = Field(..., description="Event magnitude")
    time: int = Field(..., description="Origin time in epoch milliseconds")
    place: Optional[str] = None

    model_config = {"extra": "allow"}

    @field_validator("mag")
    @classmethod
    def _finite_magnitude(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("magnitude must be finite")
        return value


class PointGeometry(BaseModel):
    """GeoJSON Point with ``[longitude, latitude, depth]`` coordinates."""

    type: str = "Point"
    coordinates: List[float] = Field(..., min_length=3)

    @field_validator("coordinates")
    @classmethod
    def _finite_coordinates(cls, value: List[float]) -> List[float]:
        if not all(math.isfinite(v) for v in value[:3]):
            raise ValueError("coordinates must be finite")
        lng, lat = value[0], value[1]
        if not -180.0 <= lng <= 180.0:
            raise ValueError(f"longitude out of range: {lng}")
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"latitude out of range: {lat}")
        return value


class Feature(BaseModel):
    """A single GeoJSON feature describing one event."""

    id: str = ""
    properties: FeatureProperties
    geometry: PointGeometry

    def to_event(self) -> Event:
        lng, lat, depth = self.geometry.coordinates[:3]
        extra = {
            k: v for k, v in self.properties.model_dump().items()
            if k not in ("mag", "time", "place")
        }
        return Event(
            magnitude=float(self.properties.mag),
            depth=float(depth),
            longitude=float(lng),
            latitude=float(lat),
            time_ms=int(self.properties.time),
            event_id=self.id,
            place=self.properties.place or "",
            extra=extra,
        )


def event_from_feature(payload: Dict[str, Any]) -> Event:
    """
    Convert one GeoJSON feature mapping into an :class:`Event`.

    Raises:
        EventValidationError: If the feature is missing fields or carries
            non-finite / out-of-range values
    """
    try:
        return Feature.model_validate(payload).to_event()
    except ValidationError as e:
        feature_id = payload.get("id", "<unknown>") if isinstance(payload, dict) else "<unknown>"
        raise EventValidationError(f"Invalid feature {feature_id}: {e}") from e


def events_from_geojson(
    payload: Dict[str, Any],
    *,
    skip_invalid: bool = False,
) -> List[Event]:
    """
    Parse a GeoJSON FeatureCollection into events.

    Args:
        payload: Decoded FeatureCollection (``{"features": [...]}``)
        skip_invalid: If True, invalid features are logged and dropped
            instead of failing the whole collection

    Returns:
        Events in feature order
    """
    features = payload.get("features")
    if features is None:
        raise EventValidationError("Payload has no 'features' array")

    events: List[Event] = []
    dropped = 0
    for feature in features:
        try:
            events.append(event_from_feature(feature))
        except EventValidationError as e:
            if not skip_invalid:
                raise
            dropped += 1
            logger.warning(f"Dropping invalid feature: {e}")

    if dropped:
        logger.info(f"Parsed {len(events)} events ({dropped} invalid features dropped)")
    return events


# -----------------------------
# Synthetic source
# -----------------------------

def synthetic_events(
    n: int,
    *,
    centers: Sequence[Tuple[float, float]] = ((-118.2, 34.0), (139.7, 35.7), (-72.6, -38.4)),
    spread_deg: float = 0.5,
    start_ms: int = 1_388_534_400_000,  # 2014-01-01T00:00:00Z
    end_ms: int = 1_420_070_400_000,  # 2015-01-01T00:00:00Z
    magnitude_range: Tuple[float, float] = (1.0, 7.5),
    depth_range: Tuple[float, float] = (0.0, 70.0),
    seed: Optional[int] = 0,
) -> List[Event]:
    """
    Generate ``n`` reproducible events scattered around ``centers``.

    Events are assigned to centres round-robin and jittered with a normal
    distribution of ``spread_deg`` degrees. Coordinates are clipped to valid
    longitude/latitude ranges.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if not centers:
        raise ValueError("At least one center is required")

    rng = np.random.default_rng(seed)
    origins = np.asarray(centers, dtype=float)[np.arange(n) % len(centers)]
    jitter = rng.normal(0.0, spread_deg, size=(n, 2))
    coords = origins + jitter
    lng = np.clip(coords[:, 0], -180.0, 180.0)
    lat = np.clip(coords[:, 1], -90.0, 90.0)
    mags = rng.uniform(*magnitude_range, size=n)
    depths = rng.uniform(*depth_range, size=n)
    times = np.sort(rng.integers(start_ms, end_ms, size=n))

    return [
        Event(
            magnitude=round(float(mags[i]), 2),
            depth=round(float(depths[i]), 2),
            longitude=float(lng[i]),
            latitude=float(lat[i]),
            time_ms=int(times[i]),
            event_id=f"syn{i:05d}",
        )
        for i in range(n)
    ]
