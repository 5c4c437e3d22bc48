"""Data models for duplicate scanning."""

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class GatePolicy(StrEnum):
    """How the secondary-field gate treats a missing secondary value.

    Attributes
    ----------
    LENIENT : str
        An empty secondary field on either side passes the gate.
    STRICT : str
        An empty secondary field passes only when both sides are empty;
        empty-versus-present counts as evidence against a match.
    """

    LENIENT = "lenient"
    STRICT = "strict"


class ScanCancelled(Exception):
    """Raised when a duplicate scan is cancelled by its caller."""


@dataclass(frozen=True)
class ClusteringConfig:
    """Thresholds for duplicate scanning.

    Attributes
    ----------
    similarity_threshold : float
        Primary-field similarity a candidate must exceed, by default 0.7.
    gate_threshold : float
        Minimum secondary-field similarity, by default 0.5.
    gate_policy : GatePolicy
        Treatment of empty secondary fields, by default LENIENT.
    """

    similarity_threshold: float = 0.7
    gate_threshold: float = 0.5
    gate_policy: GatePolicy = GatePolicy.LENIENT

    def __post_init__(self) -> None:
        """Validate thresholds."""
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be in [0, 1], got {self.similarity_threshold}"
            )
        if not 0.0 <= self.gate_threshold <= 1.0:
            raise ValueError(f"gate_threshold must be in [0, 1], got {self.gate_threshold}")
        object.__setattr__(self, "gate_policy", GatePolicy(self.gate_policy))


@dataclass(frozen=True)
class ClusterMember:
    """One record of a duplicate cluster.

    Attributes
    ----------
    record_id : str
        Record identifier.
    primary : str
        Primary comparison text as stored on the record.
    secondary : str
        Secondary comparison text as stored on the record.
    score : float
        Primary-field similarity to the cluster anchor (1.0 for the anchor).
    """

    record_id: str
    primary: str
    secondary: str = ""
    score: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "record_id": self.record_id,
            "primary": self.primary,
            "secondary": self.secondary,
            "score": round(self.score, 4),
        }


@dataclass(frozen=True)
class DuplicateCluster:
    """Records of one collection judged to be the same entity.

    Attributes
    ----------
    cluster_id : str
        Deterministic cluster identifier.
    collection : str
        Collection the members belong to.
    members : tuple[ClusterMember, ...]
        Members in discovery order; the first member is the anchor.
    """

    cluster_id: str
    collection: str
    members: tuple[ClusterMember, ...]

    @property
    def record_ids(self) -> tuple[str, ...]:
        """Member record ids in discovery order."""
        return tuple(member.record_id for member in self.members)

    @property
    def anchor_id(self) -> str:
        return self.members[0].record_id

    def __len__(self) -> int:
        return len(self.members)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "cluster_id": self.cluster_id,
            "collection": self.collection,
            "members": [member.to_dict() for member in self.members],
        }


def compute_cluster_id(record_ids: Sequence[str]) -> str:
    """Compute deterministic cluster ID from sorted record ids.

    Parameters
    ----------
    record_ids : Sequence[str]
        Record IDs in cluster.

    Returns
    -------
    str
        Cluster ID in format "c:{sha256_prefix}".
    """
    content = "\n".join(sorted(record_ids))
    hash_digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    return f"c:{hash_digest[:12]}"
