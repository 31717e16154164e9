"""Core event record shared by the clustering and temporal paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


@dataclass(frozen=True)
class Event:
    """
    A single earthquake event.

    Instances are created by an event source and are read-only afterwards.
    The core only reads ``magnitude``, ``depth``, ``longitude``, ``latitude``
    and ``time_ms``; the remaining fields are carried through untouched.

    Attributes:
        magnitude: Event magnitude
        depth: Hypocentre depth in kilometres
        longitude: Longitude in decimal degrees
        latitude: Latitude in decimal degrees
        time_ms: Occurrence time as epoch milliseconds (UTC)
        event_id: Source identifier (opaque)
        place: Human-readable location (opaque)
        extra: Any other source fields (opaque)
    """

    magnitude: float
    depth: float
    longitude: float
    latitude: float
    time_ms: int
    event_id: str = ""
    place: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def occurred_at(self) -> datetime:
        """Occurrence time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.time_ms / 1000.0, tz=timezone.utc)

    @property
    def coordinates(self) -> tuple:
        """``(longitude, latitude)`` pair."""
        return (self.longitude, self.latitude)
