"""Single-record import with explicit conflict resolution.

An incoming record is matched against the target collection first by id,
then by normalized equality of its localized name or title (first hit in
collection order wins). Without a match the record is inserted. With a
match nothing is changed: the caller receives an :class:`ImportConflict`
and must answer with a :class:`Resolution`.

Whatever ends up stored, its references are checked against the document:
keys naming records that do not exist are dropped or cleared.
"""

import copy
import dataclasses
from typing import Any

from progdedupe.conflicts.models import (
    PROTECTED_FIELDS,
    ConflictError,
    ImportConflict,
    ImportResult,
    ImportStatus,
    MatchReason,
    Resolution,
)
from progdedupe.graph.integrity import prune_record_references
from progdedupe.models import (
    Course,
    Document,
    DocumentError,
    Faculty,
    LibraryResource,
    collection_for_kind,
    get_collection,
    mint_id,
    validate_record,
)
from progdedupe.normalize.document_shape import normalize_course
from progdedupe.normalize.text import normalize_text

__all__ = ["parse_record", "find_match", "import_record", "resolve_conflict"]

_RECORD_TYPES: dict[str, Any] = {
    "course": Course,
    "faculty": Faculty,
    "library": LibraryResource,
}


def parse_record(kind: str, data: Any) -> Any:
    """Validate and parse one incoming record.

    Parameters
    ----------
    kind : str
        ``course``, ``faculty`` or ``library``.
    data : Any
        Parsed JSON value. A one-element list is accepted.

    Returns
    -------
    Any
        Typed record; ``id`` is empty when the input carried none.

    Raises
    ------
    DocumentError
        If the record is malformed or lacks a required natural key.
    """
    if isinstance(data, list) and len(data) == 1:
        data = data[0]
    validate_record(kind, data)
    if kind == "course":
        data = normalize_course(data)
    try:
        return _RECORD_TYPES[kind].from_dict(data)
    except (AttributeError, TypeError, ValueError) as e:
        raise DocumentError(f"Invalid {kind} record: {e}") from e


def find_match(
    document: Document,
    collection: str,
    incoming: Any,
) -> tuple[Any, MatchReason] | None:
    """Find the existing record an incoming record collides with.

    Parameters
    ----------
    document : Document
        Current snapshot.
    collection : str
        Target collection.
    incoming : Any
        Parsed incoming record.

    Returns
    -------
    tuple[Any, MatchReason] | None
        Matched record and reason, or None.
    """
    if incoming.id:
        existing = document.find(collection, incoming.id)
        if existing is not None:
            return existing, MatchReason.ID

    match_texts = get_collection(collection).match_texts
    wanted = [normalize_text(text) for text in match_texts(incoming)]
    if not any(wanted):
        return None

    for record in document.records(collection):
        candidates = [normalize_text(text) for text in match_texts(record)]
        for want, have in zip(wanted, candidates, strict=False):
            if want and want == have:
                return record, MatchReason.NAME
    return None


def import_record(document: Document, kind: str, data: Any) -> tuple[Document, ImportResult]:
    """Import one record, or report the conflict it raises.

    Parameters
    ----------
    document : Document
        Current snapshot (not modified).
    kind : str
        ``course``, ``faculty`` or ``library``.
    data : Any
        Parsed JSON record.

    Returns
    -------
    tuple[Document, ImportResult]
        New snapshot with the record inserted (status INSERTED), or the
        input snapshot and a pending conflict (status CONFLICT).

    Raises
    ------
    DocumentError
        If the record is malformed.
    """
    collection = collection_for_kind(kind)
    incoming = parse_record(kind, data)

    match = find_match(document, collection, incoming)
    if match is not None:
        existing, reason = match
        conflict = ImportConflict(kind, collection, incoming, copy.deepcopy(existing), reason)
        result = ImportResult(ImportStatus.CONFLICT, version=document.version, conflict=conflict)
        return document, result

    working = document.next_version()
    record = copy.deepcopy(incoming)
    if not record.id:
        record.id = _fresh_id(working, collection)
    working.add_record(collection, record)
    stats = prune_record_references(working, collection, record.id)
    result = ImportResult(
        ImportStatus.INSERTED,
        record_id=record.id,
        version=working.version,
        pruned=stats.removed,
    )
    return working, result


def _fresh_id(document: Document, collection: str) -> str:
    prefix = get_collection(collection).id_prefix or collection
    return mint_id(prefix, set(document.ids(collection)))


def _overwritten(conflict: ImportConflict, existing: Any) -> Any:
    protected = {
        name: copy.deepcopy(getattr(existing, name)) for name in PROTECTED_FIELDS[conflict.kind]
    }
    return dataclasses.replace(copy.deepcopy(conflict.incoming), id=existing.id, **protected)


def resolve_conflict(
    document: Document,
    conflict: ImportConflict,
    resolution: Resolution | str,
) -> tuple[Document, ImportResult]:
    """Apply the caller's resolution to a pending conflict.

    Parameters
    ----------
    document : Document
        Current snapshot (not modified).
    conflict : ImportConflict
        Conflict returned by :func:`import_record`.
    resolution : Resolution | str
        OVERWRITE keeps the existing id and protected fields and takes
        everything else from the incoming record. CREATE_NEW inserts the
        incoming record unchanged under a freshly minted id. CANCEL
        changes nothing.

    Returns
    -------
    tuple[Document, ImportResult]
        New snapshot (input snapshot on CANCEL) and result.

    Raises
    ------
    ConflictError
        If the matched record no longer exists in ``document``.
    """
    resolution = Resolution(resolution)

    if resolution is Resolution.CANCEL:
        return document, ImportResult(ImportStatus.CANCELLED, version=document.version)

    working = document.next_version()

    if resolution is Resolution.OVERWRITE:
        existing = working.find(conflict.collection, conflict.existing.id)
        if existing is None:
            raise ConflictError(
                f"Record {conflict.existing.id!r} no longer exists in {conflict.collection}"
            )
        merged = _overwritten(conflict, existing)
        working.replace_record(conflict.collection, existing.id, merged)
        stats = prune_record_references(working, conflict.collection, merged.id)
        return working, ImportResult(
            ImportStatus.OVERWRITTEN,
            record_id=merged.id,
            version=working.version,
            pruned=stats.removed,
        )

    record = copy.deepcopy(conflict.incoming)
    record.id = _fresh_id(working, conflict.collection)
    working.add_record(conflict.collection, record)
    stats = prune_record_references(working, conflict.collection, record.id)
    return working, ImportResult(
        ImportStatus.CREATED,
        record_id=record.id,
        version=working.version,
        pruned=stats.removed,
    )
