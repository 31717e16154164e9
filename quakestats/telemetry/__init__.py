"""Observability sinks for quakestats operations."""

from .sinks import (
    NULL_SINK,
    OUTCOME_FAILURE,
    OUTCOME_SUCCESS,
    PHASE_END,
    PHASE_FAILURE,
    PHASE_START,
    LoggingSink,
    NullSink,
    OperationEvent,
    RecordingSink,
    TelemetrySink,
    emit_first_failure,
    resolve_sink,
    track_operation,
)

__all__ = [
    "NULL_SINK",
    "OUTCOME_FAILURE",
    "OUTCOME_SUCCESS",
    "PHASE_END",
    "PHASE_FAILURE",
    "PHASE_START",
    "LoggingSink",
    "NullSink",
    "OperationEvent",
    "RecordingSink",
    "TelemetrySink",
    "emit_first_failure",
    "resolve_sink",
    "track_operation",
]
