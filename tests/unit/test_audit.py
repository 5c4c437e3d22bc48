"""Tests for the audit logger, its helpers and the event schema."""

import json
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import jsonschema
import pytest

from progdedupe.audit import AuditLogger, EventType, generate_session_id, get_package_version
from progdedupe.models.validation import load_schema


@pytest.fixture
def logger(tmp_path: Path) -> Iterator[AuditLogger]:
    """Create a logger that auto-closes after test."""
    lg = AuditLogger(session_id="test_session", log_path=tmp_path / "logs" / "events.jsonl")
    yield lg
    lg.close()


def _read_events(path: Path) -> list[dict]:
    """Read all JSONL events from file."""
    with path.open(encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


@pytest.mark.unit
def test_logger_creates_parent_directories(logger: AuditLogger) -> None:
    assert logger.log_path.exists()
    assert logger.session_id == "test_session"


@pytest.mark.unit
def test_logger_event_writes_valid_jsonl(logger: AuditLogger) -> None:
    """event() writes one line with the full envelope."""
    logger.event(EventType.CLUSTER_MERGED, data={"key": "value"}, collection="library")

    events = _read_events(logger.log_path)

    assert len(events) == 1
    evt = events[0]
    assert evt["session_id"] == "test_session"
    assert evt["event"] == "cluster_merged"
    assert evt["level"] == "INFO"
    assert evt["data"] == {"key": "value"}
    assert evt["collection"] == "library"
    assert evt["record_id"] is None
    assert evt["ts"].endswith("Z")


@pytest.mark.unit
def test_logger_appends(tmp_path: Path) -> None:
    path = tmp_path / "events.jsonl"
    with AuditLogger("s1", path) as first:
        first.document_saved("a.json", "sha256:00", 1)
    with AuditLogger("s2", path) as second:
        second.document_saved("a.json", "sha256:11", 2)

    assert [e["session_id"] for e in _read_events(path)] == ["s1", "s2"]


@pytest.mark.unit
def test_logger_error_event(logger: AuditLogger) -> None:
    logger.error("MergeError", "Survivor not in cluster", collection="library")

    evt = _read_events(logger.log_path)[0]

    assert evt["level"] == "ERROR"
    assert evt["data"] == {
        "exception_class": "MergeError",
        "message": "Survivor not in cluster",
    }


@pytest.mark.unit
def test_events_match_schema(logger: AuditLogger) -> None:
    logger.session_opened("program.json", 0, {"library": 3})
    logger.duplicates_scanned("library", 3, [["lib-2", "lib-1"]], {"similarity_threshold": 0.7})
    logger.error("DocumentError", "bad input")

    schema = load_schema("log_event.schema.json")
    for evt in _read_events(logger.log_path):
        jsonschema.validate(evt, schema)


@pytest.mark.unit
def test_schema_rejects_unknown_event() -> None:
    schema = load_schema("log_event.schema.json")
    evt = {
        "ts": "2026-01-01T00:00:00.000000Z",
        "session_id": "s",
        "level": "INFO",
        "event": "stage_start",
        "data": {},
    }

    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(evt, schema)


@pytest.mark.unit
def test_session_id_format() -> None:
    session_id = generate_session_id()
    timestamp, suffix = session_id.split("__")

    assert len(suffix) == 8
    assert datetime.fromisoformat(timestamp.replace("Z", "+00:00")).tzinfo is not None
    assert generate_session_id() != session_id


@pytest.mark.unit
def test_session_opened_records_package_version(logger: AuditLogger) -> None:
    logger.session_opened("program.json", 0, {"library": 3})

    data = _read_events(logger.log_path)[0]["data"]

    assert data["progdedupe_version"] == get_package_version()
    assert data["counts"] == {"library": 3}
