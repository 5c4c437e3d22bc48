"""Data models for audit logging."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

__all__ = ["EventType", "LogEvent"]


class EventType(StrEnum):
    """Audit event identifiers."""

    SESSION_OPENED = "session_opened"
    DOCUMENT_SAVED = "document_saved"
    DUPLICATES_SCANNED = "duplicates_scanned"
    CLUSTER_MERGED = "cluster_merged"
    RECORDS_DELETED = "records_deleted"
    IDS_CANONICALIZED = "ids_canonicalized"
    RECORD_IMPORTED = "record_imported"
    CONFLICT_DETECTED = "conflict_detected"
    CONFLICT_RESOLVED = "conflict_resolved"
    CATALOG_IMPORTED = "catalog_imported"
    ERROR = "error"


@dataclass
class LogEvent:
    """Structured log event.

    Attributes
    ----------
    ts : str
        ISO8601 timestamp with microseconds (UTC).
    session_id : str
        Editing session identifier.
    level : str
        Log level ("DEBUG", "INFO", "WARN", "ERROR").
    event : str
        Event type identifier.
    data : dict[str, Any]
        Event-specific data payload.
    collection : str | None
        Collection the event concerns.
    record_id : str | None
        Record identifier if event is record-specific.
    """

    ts: str
    session_id: str
    level: str
    event: str
    data: dict[str, Any]
    collection: str | None = None
    record_id: str | None = None
