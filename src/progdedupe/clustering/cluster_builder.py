"""Group records of one collection into duplicate clusters.

Anchors are visited longest primary field first: a long title compared to
its abbreviated variants scores higher than the variants compared to each
other, so longer anchors reduce missed matches. Every record joins at most
one cluster and singleton clusters are discarded.

The scan is O(n²) in the number of records. It is meant for catalog-sized
collections and is cancellable between anchors; it never mutates the
document, so a cancelled scan leaves nothing to undo.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from progdedupe.clustering.models import (
    ClusteringConfig,
    ClusterMember,
    DuplicateCluster,
    GatePolicy,
    ScanCancelled,
    compute_cluster_id,
)
from progdedupe.models import Document, get_collection
from progdedupe.normalize.text import normalize_text
from progdedupe.scoring.similarity import normalized_similarity


@dataclass(frozen=True)
class _Candidate:
    record_id: str
    primary: str
    secondary: str
    primary_key: str
    secondary_key: str


def passes_gate(secondary_a: str, secondary_b: str, config: ClusteringConfig) -> bool:
    """Check the secondary-field gate for two normalized values.

    Parameters
    ----------
    secondary_a : str
        Normalized secondary field of the anchor.
    secondary_b : str
        Normalized secondary field of the candidate.
    config : ClusteringConfig
        Gate threshold and policy.

    Returns
    -------
    bool
        True if the pair may be clustered.
    """
    if not secondary_a or not secondary_b:
        if config.gate_policy is GatePolicy.STRICT:
            return not secondary_a and not secondary_b
        return True
    return normalized_similarity(secondary_a, secondary_b) >= config.gate_threshold


def cluster_records(
    records: Sequence[Any],
    primary: Callable[[Any], str],
    secondary: Callable[[Any], str] | None = None,
    config: ClusteringConfig | None = None,
    collection: str = "",
    should_cancel: Callable[[], bool] | None = None,
) -> list[DuplicateCluster]:
    """Cluster records by primary-field similarity behind a secondary gate.

    Parameters
    ----------
    records : Sequence[Any]
        Records with an ``id`` attribute.
    primary : Callable[[Any], str]
        Extracts the primary comparison text.
    secondary : Callable[[Any], str] | None, optional
        Extracts the secondary (gate) text. Without it every pair passes
        the gate.
    config : ClusteringConfig | None, optional
        Thresholds; defaults to ``ClusteringConfig()``.
    collection : str, optional
        Collection name recorded on the clusters.
    should_cancel : Callable[[], bool] | None, optional
        Polled before each anchor; returning True aborts the scan.

    Returns
    -------
    list[DuplicateCluster]
        Clusters of two or more records, in discovery order.

    Raises
    ------
    ScanCancelled
        If ``should_cancel`` returns True.
    """
    if config is None:
        config = ClusteringConfig()

    candidates = []
    for record in records:
        primary_text = primary(record) or ""
        secondary_text = (secondary(record) or "") if secondary is not None else ""
        candidates.append(
            _Candidate(
                record_id=record.id,
                primary=primary_text,
                secondary=secondary_text,
                primary_key=normalize_text(primary_text),
                secondary_key=normalize_text(secondary_text),
            )
        )
    # Stable: equal lengths keep document order.
    candidates.sort(key=lambda c: len(c.primary), reverse=True)

    assigned: set[int] = set()
    clusters: list[DuplicateCluster] = []

    for i, anchor in enumerate(candidates):
        if should_cancel is not None and should_cancel():
            raise ScanCancelled(f"Duplicate scan cancelled after {i} of {len(candidates)} anchors")
        if i in assigned:
            continue
        assigned.add(i)
        members = [ClusterMember(anchor.record_id, anchor.primary, anchor.secondary, 1.0)]

        for j in range(i + 1, len(candidates)):
            if j in assigned:
                continue
            other = candidates[j]
            score = normalized_similarity(anchor.primary_key, other.primary_key)
            if score <= config.similarity_threshold:
                continue
            if secondary is not None and not passes_gate(
                anchor.secondary_key, other.secondary_key, config
            ):
                continue
            members.append(ClusterMember(other.record_id, other.primary, other.secondary, score))
            assigned.add(j)

        if len(members) > 1:
            record_ids = [m.record_id for m in members]
            clusters.append(
                DuplicateCluster(
                    cluster_id=compute_cluster_id(record_ids),
                    collection=collection,
                    members=tuple(members),
                )
            )

    return clusters


def scan_collection(
    document: Document,
    collection: str,
    config: ClusteringConfig | None = None,
    language: str = "en",
    should_cancel: Callable[[], bool] | None = None,
) -> list[DuplicateCluster]:
    """Scan one collection of a document for duplicate clusters.

    Parameters
    ----------
    document : Document
        Snapshot to scan (not modified).
    collection : str
        ``library``, ``courses`` or ``faculties``.
    config : ClusteringConfig | None, optional
        Thresholds.
    language : str, optional
        Language of localized primary fields, by default "en".
    should_cancel : Callable[[], bool] | None, optional
        Cancellation callback.

    Returns
    -------
    list[DuplicateCluster]
        Duplicate clusters.

    Raises
    ------
    ValueError
        If the collection has no comparison fields.
    """
    spec = get_collection(collection)
    if spec.primary_text is None:
        raise ValueError(f"Collection {collection!r} does not support duplicate scanning")

    primary_text = spec.primary_text
    secondary_text = spec.secondary_text

    return cluster_records(
        document.records(collection),
        primary=lambda record: primary_text(record, language),
        secondary=(
            None if secondary_text is None else lambda record: secondary_text(record, language)
        ),
        config=config,
        collection=collection,
        should_cancel=should_cancel,
    )
