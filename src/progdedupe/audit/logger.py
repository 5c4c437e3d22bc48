"""Structured audit logger for JSONL event logging.

Provides append-only structured event logging to JSONL files with
a persistent file handle for efficient I/O.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any

from progdedupe.audit.helpers import get_package_version
from progdedupe.audit.models import EventType, LogEvent
from progdedupe.utils import get_iso_timestamp

if TYPE_CHECKING:
    from progdedupe.canonicalize.runner import CanonicalizationReport
    from progdedupe.conflicts.models import ImportConflict, ImportResult
    from progdedupe.merge.models import DeletionReport, MergeReport
    from progdedupe.tabular.catalog import CatalogImportReport

__all__ = ["AuditLogger"]


class AuditLogger:
    """JSONL audit logger with persistent file handle.

    Writes structured log events to a JSONL file (one JSON object per line).
    Events are append-only and flushed after each write for durability.

    Attributes
    ----------
    session_id : str
        Editing session identifier.
    log_path : Path
        Path to JSONL log file.
    """

    def __init__(self, session_id: str, log_path: Path) -> None:
        """Initialize audit logger and open file handle.

        Parameters
        ----------
        session_id : str
            Editing session identifier.
        log_path : Path
            Path to JSONL log file.
        """
        self.session_id = session_id
        self.log_path = log_path

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close file."""
        self.close()

    def close(self) -> None:
        """Flush and close the log file handle."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        collection: str | None = None,
        record_id: str | None = None,
    ) -> None:
        """Write structured event to log.

        Parameters
        ----------
        event_type : str
            Event type identifier (e.g., "cluster_merged").
        data : dict[str, Any] | None, optional
            Event-specific data payload.
        level : str, optional
            Log level ("DEBUG", "INFO", "WARN", "ERROR").
        collection : str | None, optional
            Collection the event concerns.
        record_id : str | None, optional
            Record identifier if event is record-specific.
        """
        log_event = LogEvent(
            ts=get_iso_timestamp(),
            session_id=self.session_id,
            level=level,
            event=str(event_type),
            data=data if data is not None else {},
            collection=collection,
            record_id=record_id,
        )
        self._write_event(log_event)

    def _write_event(self, event: LogEvent) -> None:
        """Write event to JSONL file and flush."""
        json.dump(asdict(event), self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    def session_opened(self, path: str, version: int, counts: dict[str, int]) -> None:
        """Log session_opened event.

        Parameters
        ----------
        path : str
            Document file name.
        version : int
            Snapshot version at open.
        counts : dict[str, int]
            Record count per collection.
        """
        self.event(
            EventType.SESSION_OPENED,
            data={
                "path": path,
                "version": version,
                "counts": counts,
                "progdedupe_version": get_package_version(),
            },
        )

    def document_saved(self, path: str, sha256: str, version: int) -> None:
        """Log document_saved event."""
        self.event(
            EventType.DOCUMENT_SAVED,
            data={"path": path, "sha256": sha256, "version": version},
        )

    def duplicates_scanned(
        self,
        collection: str,
        records: int,
        clusters: list[list[str]],
        parameters: dict[str, Any],
    ) -> None:
        """Log duplicates_scanned event.

        Parameters
        ----------
        collection : str
            Scanned collection.
        records : int
            Records compared.
        clusters : list[list[str]]
            Member ids of every cluster found.
        parameters : dict[str, Any]
            Thresholds and gate policy used.
        """
        self.event(
            EventType.DUPLICATES_SCANNED,
            data={"records": records, "clusters": clusters, "parameters": parameters},
            collection=collection,
        )

    def cluster_merged(self, report: "MergeReport") -> None:
        """Log cluster_merged event."""
        self.event(
            EventType.CLUSTER_MERGED,
            data=report.to_dict(),
            collection=report.collection,
            record_id=report.survivor_id,
        )

    def records_deleted(self, report: "DeletionReport") -> None:
        """Log records_deleted event."""
        self.event(EventType.RECORDS_DELETED, data=report.to_dict(), collection=report.collection)

    def ids_canonicalized(self, report: "CanonicalizationReport") -> None:
        """Log ids_canonicalized event with the full rename mapping."""
        self.event(EventType.IDS_CANONICALIZED, data=report.to_dict(), level="WARN")

    def record_imported(self, collection: str, result: "ImportResult") -> None:
        """Log record_imported event."""
        self.event(
            EventType.RECORD_IMPORTED,
            data=result.to_dict(),
            collection=collection,
            record_id=result.record_id,
        )

    def conflict_detected(self, conflict: "ImportConflict") -> None:
        """Log conflict_detected event."""
        self.event(
            EventType.CONFLICT_DETECTED,
            data=conflict.to_dict(),
            collection=conflict.collection,
            record_id=conflict.existing.id,
        )

    def conflict_resolved(
        self,
        conflict: "ImportConflict",
        resolution: str,
        result: "ImportResult",
    ) -> None:
        """Log conflict_resolved event."""
        self.event(
            EventType.CONFLICT_RESOLVED,
            data={"resolution": resolution, "result": result.to_dict()},
            collection=conflict.collection,
            record_id=result.record_id,
        )

    def catalog_imported(self, report: "CatalogImportReport") -> None:
        """Log catalog_imported event."""
        self.event(EventType.CATALOG_IMPORTED, data=report.to_dict(), collection="courses")

    def error(
        self,
        exception_class: str,
        message: str,
        collection: str | None = None,
        record_id: str | None = None,
    ) -> None:
        """Log error event.

        Parameters
        ----------
        exception_class : str
            Exception class name.
        message : str
            Error message.
        collection : str | None, optional
            Collection the failed operation targeted.
        record_id : str | None, optional
            Record identifier if error is record-specific.
        """
        self.event(
            EventType.ERROR,
            data={"exception_class": exception_class, "message": message},
            level="ERROR",
            collection=collection,
            record_id=record_id,
        )
