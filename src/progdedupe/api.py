"""Public API for program-document integrity and deduplication.

This module re-exports the pure operations of progdedupe, enabling:
- Loading and saving program documents
- Scanning collections for near-duplicate records
- Merging clusters and deleting records with reference rewriting
- Canonicalizing identifiers
- Importing single records with conflict detection
- Course catalog CSV interchange

Every mutating function takes a :class:`Document` and returns
``(new_document, report)``; the input document is never modified.
"""

from pathlib import Path

from progdedupe.canonicalize import (
    CanonicalizationNotConfirmed,
    CanonicalizationReport,
    canonicalize_ids,
)
from progdedupe.clustering import (
    ClusteringConfig,
    DuplicateCluster,
    GatePolicy,
    ScanCancelled,
    scan_collection,
)
from progdedupe.conflicts import (
    ConflictError,
    ImportConflict,
    ImportResult,
    ImportStatus,
    Resolution,
    import_record,
    resolve_conflict,
)
from progdedupe.engine import (
    EngineConfig,
    Workspace,
    dump_document,
    load_document,
    parse_document,
)
from progdedupe.graph import REFERENCE_SITES, DanglingReference, find_dangling_references
from progdedupe.merge import (
    DeletionReport,
    MergeError,
    MergeReport,
    delete_records,
    merge_cluster,
    suggest_survivor,
)
from progdedupe.models import Document, DocumentError
from progdedupe.tabular import export_catalog, import_catalog

__all__ = [
    # Documents
    "Document",
    "DocumentError",
    "load_document",
    "parse_document",
    "dump_document",
    "save_document",
    # Operations
    "scan_collection",
    "merge_cluster",
    "delete_records",
    "suggest_survivor",
    "canonicalize_ids",
    "import_record",
    "resolve_conflict",
    "find_dangling_references",
    "export_catalog",
    "import_catalog",
    # Types
    "ClusteringConfig",
    "GatePolicy",
    "DuplicateCluster",
    "MergeReport",
    "DeletionReport",
    "CanonicalizationReport",
    "ImportConflict",
    "ImportResult",
    "ImportStatus",
    "Resolution",
    "DanglingReference",
    "REFERENCE_SITES",
    "EngineConfig",
    "Workspace",
    # Errors
    "MergeError",
    "ScanCancelled",
    "CanonicalizationNotConfirmed",
    "ConflictError",
]


def save_document(document: Document, path: str | Path) -> Path:
    """Write a document as indented UTF-8 JSON.

    Parameters
    ----------
    document : Document
        Snapshot to write.
    path : str | Path
        Output file path. Parent directories are created.

    Returns
    -------
    Path
        Path written.

    Examples
    --------
    >>> from progdedupe import load_document, merge_cluster, save_document
    >>> doc = load_document("program.json")
    >>> doc, report = merge_cluster(doc, "library", ["lib-2", "lib-1"], "lib-1")
    >>> save_document(doc, "program.merged.json")  # doctest: +SKIP
    """
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(dump_document(document), encoding="utf-8")
    return output
