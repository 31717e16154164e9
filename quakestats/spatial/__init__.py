"""
quakestats.spatial: epicentre projection and seeded k-means clustering.
"""

from .projection import project_coordinates
from .kmeans import (
    Cluster,
    ClusteringConfig,
    ClusteringDiagnostics,
    KMeansResult,
    cluster,
    cluster_with_diagnostics,
    fit_kmeans,
)

__all__ = [
    "project_coordinates",
    "Cluster",
    "ClusteringConfig",
    "ClusteringDiagnostics",
    "KMeansResult",
    "cluster",
    "cluster_with_diagnostics",
    "fit_kmeans",
]
