"""
Operation telemetry for the clustering and aggregation core.

The core reports run start/end and first failure as :class:`OperationEvent`
records to a :class:`TelemetrySink`. Sinks are advisory: the default
:class:`NullSink` discards everything and results never depend on the sink.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Optional

PHASE_START = "start"
PHASE_END = "end"
PHASE_FAILURE = "first_failure"

OUTCOME_SUCCESS = "success"
OUTCOME_FAILURE = "failure"


@dataclass
class OperationEvent:
    """
    A single structured observability record.

    Attributes:
        operation: Operation name (e.g. ``cluster``, ``aggregate_all``)
        phase: ``start``, ``end`` or ``first_failure``
        outcome: ``success`` / ``failure``; None for start events
        error_kind: Error class name when the outcome is a failure
        duration_ms: Wall time of the operation for end events
        details: Free-form operation context (sizes, parameters)
    """
    operation: str
    phase: str
    outcome: Optional[str] = None
    error_kind: Optional[str] = None
    duration_ms: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    def to_json(self) -> str:
        """Convert to JSON string for logging."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


class TelemetrySink:
    """Receiver for :class:`OperationEvent` records."""

    def emit(self, event: OperationEvent) -> None:
        raise NotImplementedError


class NullSink(TelemetrySink):
    """Sink that discards every event."""

    def emit(self, event: OperationEvent) -> None:
        return None


class LoggingSink(TelemetrySink):
    """Sink that writes each event as a JSON line through :mod:`logging`."""

    def __init__(self, logger_name: str = "quakestats.telemetry", level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self.level = level

    def emit(self, event: OperationEvent) -> None:
        level = logging.WARNING if event.outcome == OUTCOME_FAILURE else self.level
        if self._logger.isEnabledFor(level):
            self._logger.log(level, f"telemetry: {event.to_json()}")


class RecordingSink(TelemetrySink):
    """
    In-memory sink collecting every event.

    Useful in tests and for exporting a run's telemetry for analysis.
    """

    def __init__(self):
        self.events: List[OperationEvent] = []

    def emit(self, event: OperationEvent) -> None:
        self.events.append(event)

    def for_operation(self, operation: str) -> List[OperationEvent]:
        """Events emitted for ``operation`` in emission order."""
        return [e for e in self.events if e.operation == operation]

    def clear(self):
        """Clear recorded events."""
        self.events.clear()

    def export_json(self, filepath: str):
        """
        Export recorded events to a JSON file.

        Args:
            filepath: Path to save JSON file
        """
        with open(filepath, "w") as f:
            json.dump(
                [e.to_dict() for e in self.events],
                f,
                ensure_ascii=False,
                indent=2,
                default=str,
            )


NULL_SINK = NullSink()


def resolve_sink(sink: Optional[TelemetrySink]) -> TelemetrySink:
    """Return ``sink`` or the shared null sink when None."""
    return sink if sink is not None else NULL_SINK


@contextmanager
def track_operation(
    sink: Optional[TelemetrySink],
    operation: str,
    **details: Any,
) -> Iterator[Dict[str, Any]]:
    """
    Emit start/end events around a block.

    The yielded dict is merged into the end event's details, so the block
    can attach results (cluster sizes, row counts). If the block raises, a
    failure end event carrying the error kind is emitted and the exception
    propagates unchanged.
    """
    sink = resolve_sink(sink)
    sink.emit(OperationEvent(operation=operation, phase=PHASE_START, details=dict(details)))
    started = time.perf_counter()
    end_details: Dict[str, Any] = dict(details)
    try:
        yield end_details
    except Exception as e:
        sink.emit(OperationEvent(
            operation=operation,
            phase=PHASE_END,
            outcome=OUTCOME_FAILURE,
            error_kind=type(e).__name__,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            details=end_details,
        ))
        raise
    sink.emit(OperationEvent(
        operation=operation,
        phase=PHASE_END,
        outcome=OUTCOME_SUCCESS,
        duration_ms=(time.perf_counter() - started) * 1000.0,
        details=end_details,
    ))


def emit_first_failure(
    sink: Optional[TelemetrySink],
    operation: str,
    error: BaseException,
    **details: Any,
) -> None:
    """Report the first failure observed by a fail-fast operation."""
    resolve_sink(sink).emit(OperationEvent(
        operation=operation,
        phase=PHASE_FAILURE,
        outcome=OUTCOME_FAILURE,
        error_kind=type(error).__name__,
        details={**details, "message": str(error)},
    ))
