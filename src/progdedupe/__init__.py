"""Reference integrity and deduplication for academic program documents.

This package provides:
- Data models (progdedupe.models): records, document snapshot, validation
- Normalization (progdedupe.normalize): text folding and document shape
- Scoring (progdedupe.scoring): normalized edit-distance similarity
- Clustering (progdedupe.clustering): greedy duplicate clustering
- Graph (progdedupe.graph): reference sites, rewriting and integrity checks
- Merge (progdedupe.merge): cluster merge, deletion, survivor suggestion
- Canonicalization (progdedupe.canonicalize): slug-based id renaming
- Conflicts (progdedupe.conflicts): single-record import flow
- Tabular (progdedupe.tabular): course catalog CSV interchange
- Engine (progdedupe.engine): workspace and configuration
- Audit (progdedupe.audit): JSONL event logging
- CLI (progdedupe.cli): command-line interface
- Public API (progdedupe.api): high-level convenience functions
"""

__version__ = "0.1.0"
__license__ = "MIT"

from progdedupe.api import (
    CanonicalizationNotConfirmed,
    ConflictError,
    MergeError,
    Resolution,
    ScanCancelled,
    canonicalize_ids,
    delete_records,
    dump_document,
    export_catalog,
    find_dangling_references,
    import_catalog,
    import_record,
    load_document,
    merge_cluster,
    parse_document,
    resolve_conflict,
    save_document,
    scan_collection,
    suggest_survivor,
)
from progdedupe.engine import EngineConfig, Workspace
from progdedupe.models import Document, DocumentError

__all__ = [
    "__version__",
    "__license__",
    "Document",
    "Workspace",
    "EngineConfig",
    "load_document",
    "parse_document",
    "dump_document",
    "save_document",
    "scan_collection",
    "merge_cluster",
    "delete_records",
    "suggest_survivor",
    "canonicalize_ids",
    "import_record",
    "resolve_conflict",
    "Resolution",
    "find_dangling_references",
    "export_catalog",
    "import_catalog",
    "DocumentError",
    "MergeError",
    "ScanCancelled",
    "CanonicalizationNotConfirmed",
    "ConflictError",
]
