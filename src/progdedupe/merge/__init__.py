"""Cluster merges, survivor suggestion and cascading deletion."""

from progdedupe.merge.models import DeletionReport, MergeError, MergeReport
from progdedupe.merge.processor import delete_records, merge_cluster
from progdedupe.merge.survivor import compute_completeness_score, suggest_survivor

__all__ = [
    "merge_cluster",
    "delete_records",
    "suggest_survivor",
    "compute_completeness_score",
    "MergeError",
    "MergeReport",
    "DeletionReport",
]
