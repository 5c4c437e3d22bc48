"""Data models for cluster merges and record deletion."""

from dataclasses import dataclass, field
from typing import Any

from progdedupe.graph.rewrite import RewriteStats


class MergeError(ValueError):
    """Raised when a merge or deletion request is rejected before mutation."""


@dataclass
class MergeReport:
    """Outcome of one cluster merge.

    Attributes
    ----------
    collection : str
        Collection of the cluster.
    survivor_id : str
        Record that remains.
    removed_ids : list[str]
        Records deleted, in cluster order.
    version : int
        Version of the resulting document.
    rewrite : RewriteStats
        Reference rewrite counters.
    """

    collection: str
    survivor_id: str
    removed_ids: list[str] = field(default_factory=list)
    version: int = 0
    rewrite: RewriteStats = field(default_factory=RewriteStats)

    @property
    def noop(self) -> bool:
        return not self.removed_ids

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "collection": self.collection,
            "survivor_id": self.survivor_id,
            "removed_ids": list(self.removed_ids),
            "version": self.version,
            "rewrite": self.rewrite.to_dict(),
        }


@dataclass
class DeletionReport:
    """Outcome of a cascading record deletion.

    Attributes
    ----------
    collection : str
        Collection the records were removed from.
    deleted_ids : list[str]
        Records removed.
    version : int
        Version of the resulting document.
    rewrite : RewriteStats
        ``removed`` counts references cleared or dropped.
    """

    collection: str
    deleted_ids: list[str] = field(default_factory=list)
    version: int = 0
    rewrite: RewriteStats = field(default_factory=RewriteStats)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "collection": self.collection,
            "deleted_ids": list(self.deleted_ids),
            "version": self.version,
            "rewrite": self.rewrite.to_dict(),
        }
