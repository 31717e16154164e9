"""
Seeded k-means clustering of events by epicentre.

This module provides:
1. Deterministic centroid seeding (k-means++ or random distinct points)
2. Lloyd iterations with a centroid-movement tolerance
3. Partitioning of the original events, order-preserving within clusters
4. Degenerate input detection (empty, non-finite, single-location input)
5. Diagnostics (cluster sizes, inertia, silhouette score) with suggestions

Clusters that receive no events keep centroid ``(0.0, 0.0)``. This happens
whenever ``k`` exceeds the number of distinct epicentres and is reported in
the diagnostics rather than treated as an error.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.cluster import kmeans_plusplus
from sklearn.metrics import pairwise_distances_argmin, silhouette_score

from ..errors import ClusteringFailed, InvalidClusterCount
from ..events.models import Event
from ..telemetry import TelemetrySink, track_operation
from .projection import project_coordinates

logger = logging.getLogger(__name__)


INIT_METHODS = ("k-means++", "random")


@dataclass
class ClusteringConfig:
    """Configuration for the k-means fit."""

    tol: float = 1e-2
    """Stop once no centroid moves further than this (degrees)."""

    max_iter: int = 300
    """Maximum Lloyd iterations before the fit is reported as non-converged."""

    init: str = "k-means++"
    """Centroid seeding method: 'k-means++' or 'random'."""

    compute_silhouette: bool = True
    """Whether diagnostics include a silhouette score."""

    def __post_init__(self):
        if self.init not in INIT_METHODS:
            raise ValueError(f"Unknown init method '{self.init}'. Expected one of {INIT_METHODS}")
        if self.tol <= 0:
            raise ValueError(f"tol must be positive, got {self.tol}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ClusteringConfig":
        """Build from the ``clustering`` section of a profile, ignoring unknown keys."""
        data = data or {}
        known = {k: data[k] for k in ("tol", "max_iter", "init", "compute_silhouette") if k in data}
        return cls(**known)


@dataclass(frozen=True)
class Cluster:
    """A group of events assigned to the same centroid."""

    cluster_id: int
    """Position of this cluster in the run output."""

    events: Tuple[Event, ...]
    """Member events in their original relative order."""

    centroid_lng: float = 0.0
    """Mean longitude of members (0.0 when empty)."""

    centroid_lat: float = 0.0
    """Mean latitude of members (0.0 when empty)."""

    @property
    def size(self) -> int:
        return len(self.events)

    @property
    def centroid(self) -> Tuple[float, float]:
        """``(longitude, latitude)`` of the centroid."""
        return (self.centroid_lng, self.centroid_lat)

    @property
    def is_empty(self) -> bool:
        return not self.events


@dataclass
class KMeansResult:
    """Array-level outcome of :func:`fit_kmeans`."""

    labels: np.ndarray
    """Cluster index per input row."""

    centers: np.ndarray
    """Fitted centres, shape (k_fitted, 2). k_fitted <= k."""

    n_iter: int
    inertia: float
    n_distinct: int
    converged: bool = True


@dataclass
class ClusteringDiagnostics:
    """Quality assessment for one clustering run."""

    num_points: int
    """Total number of events provided."""

    num_clusters: int
    """Number of clusters requested (and returned)."""

    num_empty: int = 0
    """Clusters that received no events."""

    cluster_sizes: List[int] = field(default_factory=list)
    """Size of each cluster in output order."""

    n_iter: int = 0
    """Lloyd iterations performed."""

    inertia: float = 0.0
    """Sum of squared distances from events to their centroid."""

    silhouette_score: Optional[float] = None
    """Silhouette score (higher = better separation, range [-1, 1])."""

    suggestions: List[str] = field(default_factory=list)
    """Actionable suggestions for improving clustering."""

    config_used: Optional[ClusteringConfig] = None


def _validate_cluster_count(k) -> int:
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        raise InvalidClusterCount(k)
    return int(k)


def _detect_degenerate_case(coords: np.ndarray, k: int) -> np.ndarray:
    """
    Reject input that cannot be partitioned.

    Returns:
        The distinct coordinate rows, lexicographically sorted

    Raises:
        ClusteringFailed: For empty, non-finite or single-location input
            when more than one cluster is requested
    """
    if len(coords) == 0:
        raise ClusteringFailed("no events to cluster")

    if not np.isfinite(coords).all():
        bad = int((~np.isfinite(coords)).any(axis=1).sum())
        raise ClusteringFailed(f"{bad} event(s) have non-finite coordinates")

    distinct = np.unique(coords, axis=0)
    if k > 1 and len(distinct) < 2:
        raise ClusteringFailed(
            f"all {len(coords)} events share one location; cannot split into {k} clusters"
        )
    return distinct


def _initial_centers(
    distinct: np.ndarray,
    n_centers: int,
    seed: Optional[int],
    init: str,
) -> np.ndarray:
    if init == "k-means++":
        centers, _indices = kmeans_plusplus(distinct, n_clusters=n_centers, random_state=seed)
        return np.asarray(centers, dtype=float)

    rng = np.random.default_rng(seed)
    picks = rng.choice(len(distinct), size=n_centers, replace=False)
    return distinct[picks].astype(float)


def fit_kmeans(
    coords: np.ndarray,
    k: int,
    seed: Optional[int] = 0,
    config: Optional[ClusteringConfig] = None,
) -> KMeansResult:
    """
    Lloyd's k-means over 2-D coordinates.

    Seeding runs on the distinct rows, so at most ``min(k, n_distinct)``
    centres are fitted; labels never reference the unfitted clusters.

    Args:
        coords: Array of shape (n, 2)
        k: Requested number of clusters (>= 1)
        seed: Seed for centroid initialisation; same seed, same result
        config: Fit parameters (defaults if None)

    Returns:
        KMeansResult with labels in ``[0, min(k, n_distinct))``

    Raises:
        InvalidClusterCount: If ``k`` is not a positive integer
        ClusteringFailed: On degenerate input or non-convergence
    """
    if config is None:
        config = ClusteringConfig()

    k = _validate_cluster_count(k)
    coords = np.asarray(coords, dtype=float)
    distinct = _detect_degenerate_case(coords, k)
    n_centers = min(k, len(distinct))

    centers = _initial_centers(distinct, n_centers, seed, config.init)

    converged = False
    shift = float("inf")
    n_iter = 0
    for n_iter in range(1, config.max_iter + 1):
        labels = pairwise_distances_argmin(coords, centers)
        updated = centers.copy()
        for j in range(n_centers):
            members = labels == j
            # An abandoned centre stays where it was
            if members.any():
                updated[j] = coords[members].mean(axis=0)

        shift = float(np.sqrt(((updated - centers) ** 2).sum(axis=1)).max())
        centers = updated

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"k-means iteration {n_iter}: max centroid shift {shift:.6g}")

        if shift < config.tol:
            converged = True
            break

    if not converged:
        raise ClusteringFailed(
            f"did not converge within {config.max_iter} iterations (last shift {shift:.3g})"
        )

    labels = pairwise_distances_argmin(coords, centers)
    inertia = float(((coords - centers[labels]) ** 2).sum())

    return KMeansResult(
        labels=labels,
        centers=centers,
        n_iter=n_iter,
        inertia=inertia,
        n_distinct=len(distinct),
        converged=converged,
    )


def _compute_cluster_quality(
    X: np.ndarray,
    labels: np.ndarray,
    num_nonempty: int,
) -> Optional[float]:
    """
    Compute silhouette score for cluster quality assessment.

    Returns None if quality cannot be computed (fewer than two populated
    clusters, or every event in its own cluster).
    """
    if num_nonempty < 2 or num_nonempty >= len(X):
        return None

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        score = silhouette_score(X, labels)
    return float(score)


def _partition(events: Sequence[Event], labels: np.ndarray, k: int) -> List[Cluster]:
    buckets: List[List[Event]] = [[] for _ in range(k)]
    for event, label in zip(events, labels):
        buckets[int(label)].append(event)

    clusters: List[Cluster] = []
    for cid, members in enumerate(buckets):
        if members:
            centroid_lng = float(np.mean([e.longitude for e in members]))
            centroid_lat = float(np.mean([e.latitude for e in members]))
        else:
            centroid_lng, centroid_lat = 0.0, 0.0
        clusters.append(Cluster(
            cluster_id=cid,
            events=tuple(members),
            centroid_lng=centroid_lng,
            centroid_lat=centroid_lat,
        ))
    return clusters


def cluster_with_diagnostics(
    events: Sequence[Event],
    k: int,
    seed: Optional[int] = 0,
    config: Optional[ClusteringConfig] = None,
    sink: Optional[TelemetrySink] = None,
) -> Tuple[List[Cluster], ClusteringDiagnostics]:
    """
    Cluster events by epicentre and assess the result.

    Args:
        events: Input events (not modified)
        k: Number of clusters to return
        seed: Seed for centroid initialisation
        config: Fit parameters (defaults if None)
        sink: Telemetry sink for start/end events

    Returns:
        (clusters, diagnostics). ``clusters`` has exactly ``k`` entries and
        every input event appears in exactly one of them.
    """
    if config is None:
        config = ClusteringConfig()

    with track_operation(sink, "cluster", k=k, num_events=len(events), seed=seed) as details:
        X = project_coordinates(events)
        result = fit_kmeans(X, k, seed=seed, config=config)
        clusters = _partition(events, result.labels, int(k))

        sizes = [c.size for c in clusters]
        num_empty = sum(1 for s in sizes if s == 0)
        suggestions: List[str] = []

        if num_empty:
            logger.warning(
                f"{num_empty} of {k} clusters are empty "
                f"({result.n_distinct} distinct epicentres for {len(events)} events)"
            )
            suggestions.append(
                f"{num_empty} empty cluster(s). Consider reducing k to at most "
                f"{k - num_empty}; empty clusters cannot be summarized."
            )

        silhouette = None
        if config.compute_silhouette:
            silhouette = _compute_cluster_quality(X, result.labels, k - num_empty)
            if silhouette is not None and silhouette < 0.2:
                suggestions.append(
                    f"Low silhouette score ({silhouette:.3f}). Clusters may be poorly separated. "
                    "Consider a different k or seed."
                )

        diagnostics = ClusteringDiagnostics(
            num_points=len(events),
            num_clusters=int(k),
            num_empty=num_empty,
            cluster_sizes=sizes,
            n_iter=result.n_iter,
            inertia=result.inertia,
            silhouette_score=silhouette,
            suggestions=suggestions,
            config_used=config,
        )
        details.update(cluster_sizes=sizes, n_iter=result.n_iter)

    logger.info(
        f"Clustered {len(events)} events into {k} clusters "
        f"in {result.n_iter} iterations (sizes={sizes})"
    )
    return clusters, diagnostics


def cluster(
    events: Sequence[Event],
    k: int,
    seed: Optional[int] = 0,
    config: Optional[ClusteringConfig] = None,
    sink: Optional[TelemetrySink] = None,
) -> List[Cluster]:
    """
    Partition events into ``k`` spatial clusters.

    See :func:`cluster_with_diagnostics` for arguments.

    Raises:
        InvalidClusterCount: If ``k`` < 1
        ClusteringFailed: On degenerate input or non-convergence
    """
    # Silhouette is O(n^2) and only feeds the diagnostics
    config = replace(config or ClusteringConfig(), compute_silhouette=False)
    clusters, _diagnostics = cluster_with_diagnostics(events, k, seed=seed, config=config, sink=sink)
    return clusters
