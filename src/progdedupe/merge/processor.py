"""Cluster merge and cascading deletion.

Both operations follow the same recipe on a working copy of the document:
validate the request, build the identifier mapping from the untouched
snapshot, rewrite every site targeting the collection, then delete the
retired records. The caller receives the new snapshot and a report; the
input document is never modified.
"""

from collections.abc import Sequence

from progdedupe.graph.mapping import IdentifierMapping
from progdedupe.graph.rewrite import rewrite_references
from progdedupe.graph.sites import REFERENCE_SITES, ReferenceSite
from progdedupe.merge.models import DeletionReport, MergeError, MergeReport
from progdedupe.models import Document, get_collection


def _check_collection(document: Document, collection: str) -> set[str]:
    try:
        get_collection(collection)
        return set(document.ids(collection))
    except KeyError as e:
        raise MergeError(f"Unknown collection: {collection}") from e


def _unique(ids: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def merge_cluster(
    document: Document,
    collection: str,
    record_ids: Sequence[str],
    survivor_id: str,
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> tuple[Document, MergeReport]:
    """Merge a duplicate cluster into one survivor.

    Parameters
    ----------
    document : Document
        Current snapshot (not modified).
    collection : str
        Collection of the cluster.
    record_ids : Sequence[str]
        Cluster member ids, survivor included.
    survivor_id : str
        Member chosen to remain.
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    tuple[Document, MergeReport]
        New snapshot and report. A cluster with no member besides the
        survivor returns the input snapshot unchanged.

    Raises
    ------
    MergeError
        If the collection is unknown, the survivor is not a member, or a
        member id does not exist.
    """
    existing = _check_collection(document, collection)
    members = _unique(record_ids)

    if survivor_id not in members:
        raise MergeError(f"Survivor {survivor_id!r} is not a member of the cluster")
    missing = [record_id for record_id in members if record_id not in existing]
    if missing:
        raise MergeError(f"Records not found in {collection}: {', '.join(missing)}")

    to_remove = [record_id for record_id in members if record_id != survivor_id]
    if not to_remove:
        return document, MergeReport(collection, survivor_id, version=document.version)

    mapping = IdentifierMapping.merge(document, collection, to_remove, survivor_id, sites)

    working = document.next_version()
    stats = rewrite_references(working, mapping, sites)
    working.remove_records(collection, to_remove)

    report = MergeReport(
        collection=collection,
        survivor_id=survivor_id,
        removed_ids=to_remove,
        version=working.version,
        rewrite=stats,
    )
    return working, report


def delete_records(
    document: Document,
    collection: str,
    record_ids: Sequence[str],
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> tuple[Document, DeletionReport]:
    """Delete records and clear every reference to them.

    Parameters
    ----------
    document : Document
        Current snapshot (not modified).
    collection : str
        Collection to delete from.
    record_ids : Sequence[str]
        Ids to delete.
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    tuple[Document, DeletionReport]
        New snapshot and report.

    Raises
    ------
    MergeError
        If the collection is unknown or an id does not exist.
    """
    existing = _check_collection(document, collection)
    doomed = _unique(record_ids)
    missing = [record_id for record_id in doomed if record_id not in existing]
    if missing:
        raise MergeError(f"Records not found in {collection}: {', '.join(missing)}")
    if not doomed:
        return document, DeletionReport(collection, version=document.version)

    mapping = IdentifierMapping.deletion(document, collection, doomed, sites)

    working = document.next_version()
    stats = rewrite_references(working, mapping, sites)
    working.remove_records(collection, doomed)

    return working, DeletionReport(
        collection=collection,
        deleted_ids=doomed,
        version=working.version,
        rewrite=stats,
    )
