"""Snapshot handle and configuration.

This package provides the workspace that owns the current document snapshot
and commits the results of every operation, plus its configuration type.
"""

from progdedupe.engine.config import EngineConfig
from progdedupe.engine.workspace import Workspace, dump_document, load_document, parse_document

__all__ = [
    "EngineConfig",
    "Workspace",
    "load_document",
    "parse_document",
    "dump_document",
]
