"""Data models for single-record import and conflict resolution."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class MatchReason(StrEnum):
    """Why an incoming record matched an existing one.

    Attributes
    ----------
    ID : str
        Same record id.
    NAME : str
        Equal normalized name or title in some language.
    """

    ID = "id"
    NAME = "name"


class Resolution(StrEnum):
    """Caller's answer to an import conflict.

    Attributes
    ----------
    OVERWRITE : str
        Replace the existing record's content, keeping its id and the
        protected fields of its kind.
    CREATE_NEW : str
        Insert the incoming record under a freshly minted id.
    CANCEL : str
        Leave the document unchanged.
    """

    OVERWRITE = "overwrite"
    CREATE_NEW = "create_new"
    CANCEL = "cancel"


class ImportStatus(StrEnum):
    INSERTED = "inserted"
    CONFLICT = "conflict"
    OVERWRITTEN = "overwritten"
    CREATED = "created"
    CANCELLED = "cancelled"


class ConflictError(ValueError):
    """Raised when a conflict can no longer be resolved as described."""


# Fields copied from the existing record on overwrite, per record kind.
# The id is always kept and is not listed.
PROTECTED_FIELDS: dict[str, tuple[str, ...]] = {
    "course": (
        "code",
        "name",
        "credits",
        "semester",
        "type",
        "prerequisites",
        "co_requisites",
        "is_essential",
        "is_abet",
        "knowledge_area_id",
    ),
    "faculty": (),
    "library": (),
}


def identifying_fields(record: Any) -> dict[str, Any]:
    """Summarize the natural-key fields of a record for display."""
    summary: dict[str, Any] = {"id": record.id}
    for name in ("code", "name", "title", "author", "email"):
        if hasattr(record, name):
            value = getattr(record, name)
            summary[name] = dict(value) if isinstance(value, dict) else value
    return summary


@dataclass(frozen=True)
class ImportConflict:
    """An incoming record matching an existing one.

    Attributes
    ----------
    kind : str
        Record kind (``course``, ``faculty``, ``library``).
    collection : str
        Target collection.
    incoming : Any
        Parsed incoming record.
    existing : Any
        Matched record of the current snapshot.
    match_reason : MatchReason
        Which match fired.
    """

    kind: str
    collection: str
    incoming: Any
    existing: Any
    match_reason: MatchReason

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kind": self.kind,
            "collection": self.collection,
            "match_reason": self.match_reason.value,
            "incoming": identifying_fields(self.incoming),
            "existing": identifying_fields(self.existing),
        }


@dataclass(frozen=True)
class ImportResult:
    """Outcome of an import step.

    Attributes
    ----------
    status : ImportStatus
        What happened.
    record_id : str | None
        Id of the inserted or overwritten record.
    version : int
        Version of the resulting document.
    conflict : ImportConflict | None
        Pending conflict when ``status`` is CONFLICT.
    pruned : int
        References of the incoming record dropped because their target
        does not exist in the document.
    """

    status: ImportStatus
    record_id: str | None = None
    version: int = 0
    conflict: ImportConflict | None = None
    pruned: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "record_id": self.record_id,
            "version": self.version,
            "conflict": None if self.conflict is None else self.conflict.to_dict(),
            "pruned": self.pruned,
        }
