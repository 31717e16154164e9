"""
Event counts per calendar month.

Independent of clustering: events are projected into a pandas table, epoch
millisecond timestamps become UTC datetimes, and rows are counted per
(year, month) pair, sorted ascending.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from ..errors import TableConstructionError, TemporalConversionError
from ..events.models import Event
from ..telemetry import TelemetrySink, track_operation

logger = logging.getLogger(__name__)


TABLE_COLUMNS = ("timestamp", "magnitude", "latitude", "longitude")
MONTHLY_COLUMNS = ("year", "month", "count")


def table_from_columns(columns: Dict[str, Sequence]) -> pd.DataFrame:
    """
    Build an event table from equal-length columns.

    Raises:
        TableConstructionError: If column lengths differ
    """
    lengths = {name: len(values) for name, values in columns.items()}
    if len(set(lengths.values())) > 1:
        raise TableConstructionError(f"Inconsistent column lengths: {lengths}")
    return pd.DataFrame(columns)


def events_to_table(events: Sequence[Event]) -> pd.DataFrame:
    """
    Project events into a columnar table.

    Returns:
        DataFrame with columns timestamp (int64 epoch ms), magnitude,
        latitude and longitude (float64), one row per event in input order
    """
    try:
        timestamps = np.array([e.time_ms for e in events], dtype="int64")
    except (OverflowError, ValueError, TypeError) as e:
        raise TemporalConversionError(f"Timestamp cannot be represented as int64 epoch ms: {e}") from e

    return table_from_columns({
        "timestamp": timestamps,
        "magnitude": np.array([e.magnitude for e in events], dtype=float),
        "latitude": np.array([e.latitude for e in events], dtype=float),
        "longitude": np.array([e.longitude for e in events], dtype=float),
    })


def _empty_monthly() -> pd.DataFrame:
    return pd.DataFrame({name: pd.Series(dtype="int64") for name in MONTHLY_COLUMNS})


def aggregate_by_month(table: pd.DataFrame) -> pd.DataFrame:
    """
    Count events per (year, month) of their UTC timestamp.

    Args:
        table: Event table with at least ``timestamp`` and ``magnitude``

    Returns:
        DataFrame with int64 columns year, month, count; one row per distinct
        pair, sorted ascending. Counts are non-null magnitude entries.

    Raises:
        TableConstructionError: If required columns are missing
        TemporalConversionError: If a timestamp is not a valid calendar date
    """
    missing = [c for c in ("timestamp", "magnitude") if c not in table.columns]
    if missing:
        raise TableConstructionError(f"Table is missing required columns: {missing}")

    if table.empty:
        return _empty_monthly()

    try:
        when = pd.to_datetime(table["timestamp"], unit="ms", utc=True)
    except (ValueError, OverflowError, TypeError) as e:
        raise TemporalConversionError(f"Cannot convert timestamps to dates: {e}") from e

    if when.isna().any():
        bad = int(when.isna().sum())
        raise TemporalConversionError(f"{bad} timestamp(s) are missing or not convertible")

    monthly = (
        pd.DataFrame({
            "year": when.dt.year,
            "month": when.dt.month,
            "magnitude": table["magnitude"],
        })
        .groupby(["year", "month"], sort=True)["magnitude"]
        .count()
        .reset_index(name="count")
        .astype("int64")
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Monthly aggregation: {len(table)} rows -> {len(monthly)} months")
    return monthly


def monthly_counts(
    events: Sequence[Event],
    sink: Optional[TelemetrySink] = None,
) -> pd.DataFrame:
    """Convenience: :func:`events_to_table` followed by :func:`aggregate_by_month`."""
    with track_operation(sink, "monthly_counts", num_events=len(events)) as details:
        monthly = aggregate_by_month(events_to_table(events))
        details["num_months"] = len(monthly)
    return monthly
