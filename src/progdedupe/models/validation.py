"""JSON Schema validation of program documents and imported records.

Schemas ship with the package under ``progdedupe/schemas``. Validation runs
before any mutation so a rejected input leaves the working document as it
was.
"""

import json
from functools import cache
from importlib.resources import files
from typing import Any

import jsonschema

__all__ = [
    "DocumentError",
    "load_schema",
    "validate_document",
    "validate_record",
]

# Natural-key fields an imported record must carry, per record kind.
REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "course": ("code", "name"),
    "faculty": ("name", "email"),
    "library": ("title",),
}

_RECORD_DEFS: dict[str, str] = {
    "course": "course",
    "faculty": "faculty",
    "library": "libraryResource",
}


class DocumentError(Exception):
    """Raised when a document or record is rejected as malformed."""

    def __init__(self, reason: str, path: str | None = None) -> None:
        """Initialize document error.

        Parameters
        ----------
        reason : str
            Human-readable rejection reason.
        path : str | None, optional
            Location of the offending value (``"courses/3/code"``).
        """
        message = reason if path is None else f"{reason} (at {path})"
        super().__init__(message)
        self.reason = reason
        self.path = path


@cache
def load_schema(name: str) -> dict[str, Any]:
    """Load a bundled JSON schema by file name."""
    resource = files("progdedupe") / "schemas" / name
    schema: dict[str, Any] = json.loads(resource.read_text(encoding="utf-8"))
    return schema


def _raise_first_error(validator: jsonschema.Draft202012Validator, instance: Any) -> None:
    error = jsonschema.exceptions.best_match(validator.iter_errors(instance))
    if error is not None:
        path = "/".join(str(part) for part in error.absolute_path) or None
        raise DocumentError(error.message, path=path)


def validate_document(data: Any) -> None:
    """Validate a parsed program document.

    Parameters
    ----------
    data : Any
        Parsed JSON value.

    Raises
    ------
    DocumentError
        If the value is not an object or violates the document schema.
    """
    if not isinstance(data, dict):
        raise DocumentError("Document must be a JSON object")
    validator = jsonschema.Draft202012Validator(load_schema("document.schema.json"))
    _raise_first_error(validator, data)


def _has_text(value: Any) -> bool:
    if isinstance(value, dict):
        return any(isinstance(text, str) and text.strip() for text in value.values())
    return isinstance(value, str) and bool(value.strip())


def validate_record(kind: str, data: Any) -> None:
    """Validate a single record offered for import.

    Parameters
    ----------
    kind : str
        ``"course"``, ``"faculty"`` or ``"library"``.
    data : Any
        Parsed JSON value.

    Raises
    ------
    DocumentError
        If the value is not an object, lacks a required natural key or
        violates the record schema.
    """
    if kind not in REQUIRED_KEYS:
        raise DocumentError(f"Unknown record kind: {kind}")
    if not isinstance(data, dict):
        raise DocumentError(f"Invalid {kind} record: expected a JSON object")

    missing = [key for key in REQUIRED_KEYS[kind] if not _has_text(data.get(key))]
    if missing:
        raise DocumentError(f"Invalid {kind} record: missing {' or '.join(missing)}")

    document_schema = load_schema("document.schema.json")
    schema = {
        "$schema": document_schema["$schema"],
        "$defs": document_schema["$defs"],
        "$ref": f"#/$defs/{_RECORD_DEFS[kind]}",
    }
    # Incoming records may omit the id; one is assigned on insert.
    instance = data if data.get("id") else {**data, "id": "pending"}
    _raise_first_error(jsonschema.Draft202012Validator(schema), instance)
