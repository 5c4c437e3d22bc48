"""Survivor suggestion for duplicate clusters.

The suggestion only pre-selects a record; the caller's explicit choice is
what :func:`~progdedupe.merge.processor.merge_cluster` acts on.
"""

from collections.abc import Sequence
from typing import Any

from progdedupe.graph.integrity import count_references
from progdedupe.graph.sites import REFERENCE_SITES, ReferenceSite
from progdedupe.models import Document


def _filled(value: Any) -> bool:
    if isinstance(value, dict):
        return any(_filled(v) for v in value.values())
    if isinstance(value, list | tuple):
        return len(value) > 0
    if isinstance(value, bool):
        return True
    return value not in (None, "", 0)


def compute_completeness_score(record: Any) -> int:
    """Count populated fields of a record.

    Parameters
    ----------
    record : Any
        Record with a ``to_dict`` method.

    Returns
    -------
    int
        Number of top-level fields (excluding ``id``) holding a non-empty
        value. Localized fields count when any language is filled.
    """
    data = record.to_dict()
    return sum(1 for key, value in data.items() if key != "id" and _filled(value))


def suggest_survivor(
    document: Document,
    collection: str,
    record_ids: Sequence[str],
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> str:
    """Suggest which cluster member should survive a merge.

    Selection is based on lexicographic tuple ranking:
    1. inbound reference count (higher > lower)
    2. completeness score (higher > lower)
    3. tie-breaker: smallest id lexicographically

    Parameters
    ----------
    document : Document
        Current snapshot.
    collection : str
        Collection of the cluster.
    record_ids : Sequence[str]
        Cluster member ids.
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    str
        Suggested survivor id.

    Raises
    ------
    ValueError
        If ``record_ids`` is empty or names no existing record.
    """
    records = [document.find(collection, record_id) for record_id in record_ids]
    present = [record for record in records if record is not None]
    if not present:
        raise ValueError("Cannot suggest a survivor from an empty cluster")

    def ranking_key(record: Any) -> tuple[int, int, str]:
        """Compute ranking key for survivor suggestion."""
        references = count_references(document, collection, record.id, sites)
        completeness = compute_completeness_score(record)
        return (-references, -completeness, record.id)

    return min(present, key=ranking_key).id
