"""Workspace: the single-writer handle on the current document snapshot.

Every mutating method computes a complete new snapshot through the pure
operation functions and only then swaps it in. A rejected request raises
before the swap, so the held snapshot is always fully consistent.
"""

import json
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from progdedupe.audit import AuditLogger, generate_session_id
from progdedupe.canonicalize.runner import CanonicalizationReport, canonicalize_ids
from progdedupe.clustering.cluster_builder import scan_collection
from progdedupe.clustering.models import DuplicateCluster
from progdedupe.conflicts.models import ImportConflict, ImportResult, Resolution
from progdedupe.conflicts.resolver import import_record, resolve_conflict
from progdedupe.engine.config import EngineConfig
from progdedupe.graph.integrity import DanglingReference, find_dangling_references
from progdedupe.graph.sites import ReferenceSite, build_reference_sites
from progdedupe.merge.models import DeletionReport, MergeReport
from progdedupe.merge.processor import delete_records, merge_cluster
from progdedupe.merge.survivor import suggest_survivor
from progdedupe.models import (
    COLLECTIONS,
    Document,
    DocumentError,
    collection_for_kind,
    validate_document,
)
from progdedupe.normalize.document_shape import normalize_document
from progdedupe.tabular.catalog import CatalogImportReport, export_catalog, import_catalog
from progdedupe.utils import calculate_bytes_sha256

__all__ = ["Workspace", "parse_document", "load_document", "dump_document"]


def parse_document(text: str) -> Document:
    """Parse, normalize and validate document JSON text.

    Parameters
    ----------
    text : str
        JSON text of a program document.

    Returns
    -------
    Document
        Snapshot at version 0.

    Raises
    ------
    DocumentError
        If the text is not JSON or the document is malformed.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentError(f"Invalid JSON: {e.msg}", path=f"line {e.lineno}") from e
    if not isinstance(data, dict):
        raise DocumentError("Document must be a JSON object")
    normalized = normalize_document(data)
    validate_document(normalized)
    try:
        return Document.from_dict(normalized)
    except (AttributeError, TypeError, ValueError) as e:
        raise DocumentError(f"Invalid document: {e}") from e


def load_document(path: str | Path) -> Document:
    """Read a document file. See :func:`parse_document`."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise DocumentError(f"Cannot read document: {e.strerror}", path=str(path)) from e
    return parse_document(text)


def dump_document(document: Document) -> str:
    """Serialize a document to indented JSON text."""
    return json.dumps(document.to_dict(), ensure_ascii=False, indent=2) + "\n"


class Workspace:
    """Exclusively-owned, versioned handle on one program document.

    Attributes
    ----------
    document : Document
        Current snapshot.
    config : EngineConfig
        Engine configuration.
    sites : tuple[ReferenceSite, ...]
        Reference-site registry built for the configured separator.
    audit : AuditLogger | None
        Event log, open when ``config.events_path`` is set.
    """

    def __init__(
        self,
        document: Document,
        config: EngineConfig | None = None,
        source: str | None = None,
    ) -> None:
        """Initialize the workspace.

        Parameters
        ----------
        document : Document
            Initial snapshot.
        config : EngineConfig | None, optional
            Engine configuration, defaults to ``EngineConfig()``.
        source : str | None, optional
            Name of the file the document was loaded from.
        """
        self.document = document
        self.config = config if config is not None else EngineConfig()
        self.sites: tuple[ReferenceSite, ...] = build_reference_sites(
            self.config.compound_separator
        )
        self.session_id = generate_session_id()
        self.audit: AuditLogger | None = None
        if self.config.events_path is not None:
            self.audit = AuditLogger(self.session_id, self.config.events_path)
            self.audit.session_opened(
                path=source or "",
                version=document.version,
                counts={name: len(document.records(name)) for name in COLLECTIONS},
            )

    @classmethod
    def open(cls, path: str | Path, config: EngineConfig | None = None) -> "Workspace":
        """Load a document file into a new workspace."""
        path = Path(path)
        return cls(load_document(path), config=config, source=path.name)

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the audit log."""
        if self.audit is not None:
            self.audit.close()

    @contextmanager
    def _audited(self, collection: str | None = None) -> Iterator[None]:
        """Log a rejected operation before re-raising it."""
        try:
            yield
        except Exception as e:
            if self.audit is not None:
                self.audit.error(type(e).__name__, str(e), collection=collection)
            raise

    # -- persistence --------------------------------------------------------

    def save(self, path: str | Path) -> str:
        """Write the current snapshot and return its digest."""
        path = Path(path)
        payload = dump_document(self.document).encode("utf-8")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
        digest = calculate_bytes_sha256(payload)
        if self.audit is not None:
            self.audit.document_saved(path.name, digest, self.document.version)
        return digest

    # -- read-only operations -----------------------------------------------

    def scan(
        self,
        collection: str = "library",
        should_cancel: Callable[[], bool] | None = None,
    ) -> list[DuplicateCluster]:
        """Scan a collection for duplicate clusters."""
        with self._audited(collection):
            clusters = scan_collection(
                self.document,
                collection,
                self.config.clustering,
                language=self.config.language,
                should_cancel=should_cancel,
            )
        if self.audit is not None:
            self.audit.duplicates_scanned(
                collection,
                records=len(self.document.records(collection)),
                clusters=[list(cluster.record_ids) for cluster in clusters],
                parameters={
                    "similarity_threshold": self.config.similarity_threshold,
                    "gate_threshold": self.config.gate_threshold,
                    "gate_policy": self.config.gate_policy.value,
                    "language": self.config.language,
                },
            )
        return clusters

    def suggest_survivor(self, collection: str, record_ids: Sequence[str]) -> str:
        """Suggest the survivor of a cluster."""
        return suggest_survivor(self.document, collection, record_ids, self.sites)

    def check(self) -> list[DanglingReference]:
        """List references that do not resolve."""
        return find_dangling_references(self.document, self.sites)

    def export_catalog(self) -> str:
        """Render the course catalog CSV."""
        return export_catalog(self.document)

    # -- mutating operations ------------------------------------------------

    def merge(self, collection: str, record_ids: Sequence[str], survivor_id: str) -> MergeReport:
        """Merge a cluster into ``survivor_id`` and commit the result."""
        with self._audited(collection):
            document, report = merge_cluster(
                self.document, collection, record_ids, survivor_id, self.sites
            )
        self.document = document
        if self.audit is not None and not report.noop:
            self.audit.cluster_merged(report)
        return report

    def delete(self, collection: str, record_ids: Sequence[str]) -> DeletionReport:
        """Delete records with cascading reference cleanup and commit."""
        with self._audited(collection):
            document, report = delete_records(self.document, collection, record_ids, self.sites)
        self.document = document
        if self.audit is not None:
            self.audit.records_deleted(report)
        return report

    def canonicalize(self, *, confirm: bool = False) -> CanonicalizationReport:
        """Run the canonicalization pass and commit the result."""
        with self._audited():
            document, report = canonicalize_ids(
                self.document,
                confirm=confirm,
                language=self.config.language,
                min_slug_length=self.config.min_slug_length,
                sites=self.sites,
            )
        self.document = document
        if self.audit is not None:
            self.audit.ids_canonicalized(report)
        return report

    def import_record(self, kind: str, data: Any) -> ImportResult:
        """Import one record; a conflict is returned, not applied."""
        with self._audited():
            document, result = import_record(self.document, kind, data)
        self.document = document
        if self.audit is not None:
            if result.conflict is not None:
                self.audit.conflict_detected(result.conflict)
            else:
                self.audit.record_imported(collection_for_kind(kind), result)
        return result

    def resolve(self, conflict: ImportConflict, resolution: Resolution | str) -> ImportResult:
        """Apply the caller's answer to a pending import conflict."""
        with self._audited(conflict.collection):
            document, result = resolve_conflict(self.document, conflict, resolution)
        self.document = document
        if self.audit is not None:
            self.audit.conflict_resolved(conflict, Resolution(resolution).value, result)
        return result

    def import_catalog(self, text: str) -> CatalogImportReport:
        """Apply a catalog CSV and commit the result."""
        with self._audited("courses"):
            document, report = import_catalog(self.document, text)
        self.document = document
        if self.audit is not None:
            self.audit.catalog_imported(report)
        return report
