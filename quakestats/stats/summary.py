"""
Descriptive statistics over a numeric sample.

Inputs are assumed finite. NaN or infinite values give unspecified
min/max/avg because of floating-point comparison semantics; event sources
reject them before they reach this module.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterable, Optional

from ..errors import EmptyMetricSample
from ..events.models import Event


@dataclass(frozen=True)
class MetricStatistics:
    """Minimum, maximum and arithmetic mean of a sample."""

    min: float
    max: float
    avg: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def summarize(values: Iterable[float], metric: Optional[str] = None) -> MetricStatistics:
    """
    Summarize a sample in a single pass.

    Args:
        values: Numeric sample (any iterable, consumed once)
        metric: Metric name reported in errors

    Returns:
        MetricStatistics with min, max and avg

    Raises:
        EmptyMetricSample: If ``values`` is empty. Absence of data is never
            reported as zeros.

    Examples:
        >>> summarize([1.0, 2.0, 3.0])
        MetricStatistics(min=1.0, max=3.0, avg=2.0)
    """
    count = 0
    total = 0.0
    lo = hi = 0.0
    for value in values:
        value = float(value)
        if count == 0:
            lo = hi = value
        else:
            if value < lo:
                lo = value
            if value > hi:
                hi = value
        total += value
        count += 1

    if count == 0:
        raise EmptyMetricSample(metric)

    return MetricStatistics(min=lo, max=hi, avg=total / count)


def summarize_metric(
    events: Iterable[Event],
    extractor: Callable[[Event], float],
    metric: Optional[str] = None,
) -> MetricStatistics:
    """Project one numeric field out of ``events`` and summarize it."""
    return summarize((extractor(e) for e in events), metric=metric)
