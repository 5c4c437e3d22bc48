"""Single-record import and conflict resolution."""

from progdedupe.conflicts.models import (
    PROTECTED_FIELDS,
    ConflictError,
    ImportConflict,
    ImportResult,
    ImportStatus,
    MatchReason,
    Resolution,
)
from progdedupe.conflicts.resolver import find_match, import_record, parse_record, resolve_conflict

__all__ = [
    "import_record",
    "resolve_conflict",
    "find_match",
    "parse_record",
    "ImportConflict",
    "ImportResult",
    "ImportStatus",
    "MatchReason",
    "Resolution",
    "ConflictError",
    "PROTECTED_FIELDS",
]
