"""Temporal aggregation of events by calendar month."""

from .monthly import (
    MONTHLY_COLUMNS,
    TABLE_COLUMNS,
    aggregate_by_month,
    events_to_table,
    monthly_counts,
    table_from_columns,
)

__all__ = [
    "MONTHLY_COLUMNS",
    "TABLE_COLUMNS",
    "aggregate_by_month",
    "events_to_table",
    "monthly_counts",
    "table_from_columns",
]
