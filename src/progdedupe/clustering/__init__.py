"""Duplicate scanning: similarity clusters within one collection."""

from progdedupe.clustering.cluster_builder import cluster_records, passes_gate, scan_collection
from progdedupe.clustering.models import (
    ClusteringConfig,
    ClusterMember,
    DuplicateCluster,
    GatePolicy,
    ScanCancelled,
    compute_cluster_id,
)

__all__ = [
    "cluster_records",
    "scan_collection",
    "passes_gate",
    "ClusteringConfig",
    "ClusterMember",
    "DuplicateCluster",
    "GatePolicy",
    "ScanCancelled",
    "compute_cluster_id",
]
