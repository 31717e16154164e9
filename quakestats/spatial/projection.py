"""Feature extraction for spatial clustering."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..events.models import Event


def project_coordinates(events: Sequence[Event]) -> np.ndarray:
    """
    Extract ``(longitude, latitude)`` feature vectors from events.

    Returns:
        Float array of shape ``(len(events), 2)``; row ``i`` belongs to
        ``events[i]``. Empty input yields shape ``(0, 2)``.
    """
    if len(events) == 0:
        return np.empty((0, 2), dtype=float)
    return np.array([(e.longitude, e.latitude) for e in events], dtype=float)
