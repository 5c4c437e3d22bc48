"""Tests for CLI module."""

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from progdedupe.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Provide Click test CLI runner."""
    return CliRunner()


@pytest.fixture
def program_file(tmp_path: Path, program_data: dict[str, Any]) -> Path:
    """Write the sample program document to a temporary file."""
    path = tmp_path / "program.json"
    path.write_text(json.dumps(program_data, ensure_ascii=False), encoding="utf-8")
    return path


def _load(path: Path) -> dict[str, Any]:
    data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    return data


# ---------------------------------------------------------------------------
# Top-level CLI
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_cli_version_flag(runner: CliRunner) -> None:
    """Test --version flag outputs version string."""
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "progdedupe" in result.output


@pytest.mark.unit
def test_cli_help(runner: CliRunner) -> None:
    """Test --help output lists commands."""
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("scan", "merge", "delete", "canonicalize", "import-record", "check"):
        assert command in result.output


@pytest.mark.unit
def test_cli_invalid_command(runner: CliRunner) -> None:
    """Test invalid command returns non-zero exit code."""
    result = runner.invoke(cli, ["invalid-command"])

    assert result.exit_code != 0


@pytest.mark.unit
def test_malformed_document_reports_error(runner: CliRunner, tmp_path: Path) -> None:
    """Test a non-JSON document fails with a readable message."""
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")

    result = runner.invoke(cli, ["check", str(bad)])

    assert result.exit_code == 1
    assert "Error: Invalid JSON" in result.output


# ---------------------------------------------------------------------------
# scan command
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_scan_lists_clusters(runner: CliRunner, program_file: Path) -> None:
    """Test scan prints clusters and marks the suggested survivor."""
    result = runner.invoke(cli, ["scan", str(program_file)])

    assert result.exit_code == 0
    assert "Found 1 duplicate cluster(s) in library" in result.output
    assert "* lib-2" in result.output
    assert "  lib-1" in result.output
    assert "lib-3" not in result.output


@pytest.mark.unit
def test_scan_json(runner: CliRunner, program_file: Path) -> None:
    result = runner.invoke(cli, ["scan", str(program_file), "-c", "faculties", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert len(payload) == 1
    assert sorted(m["record_id"] for m in payload[0]["members"]) == ["fac-1", "fac-2"]
    assert payload[0]["suggested_survivor"] in ("fac-1", "fac-2")


@pytest.mark.unit
def test_scan_without_duplicates(runner: CliRunner, program_file: Path) -> None:
    result = runner.invoke(cli, ["scan", str(program_file), "-c", "courses"])

    assert result.exit_code == 0
    assert "No duplicates found in courses" in result.output


@pytest.mark.unit
def test_scan_rejects_bad_threshold(runner: CliRunner, program_file: Path) -> None:
    result = runner.invoke(cli, ["scan", str(program_file), "--threshold", "1.5"])

    assert result.exit_code == 1
    assert "Error:" in result.output


@pytest.mark.unit
def test_scan_writes_events(runner: CliRunner, program_file: Path, tmp_path: Path) -> None:
    events = tmp_path / "events.jsonl"

    result = runner.invoke(cli, ["scan", str(program_file), "--events", str(events)])

    assert result.exit_code == 0
    lines = events.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["event"] for line in lines] == [
        "session_opened",
        "duplicates_scanned",
    ]


# ---------------------------------------------------------------------------
# merge / delete commands
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_merge_writes_output(runner: CliRunner, program_file: Path, tmp_path: Path) -> None:
    """Test merge redirects references and leaves the input untouched."""
    out = tmp_path / "merged.json"

    result = runner.invoke(
        cli,
        ["merge", str(program_file), "lib-1", "lib-2"]
        + ["-c", "library", "-s", "lib-2", "-o", str(out)],
    )

    assert result.exit_code == 0
    assert "Merged 1 record(s) into lib-2" in result.output
    merged = _load(out)
    assert [r["id"] for r in merged["library"]] == ["lib-2", "lib-3"]
    assert [t["resourceId"] for t in merged["courses"][0]["textbooks"]] == ["lib-2"]
    assert len(_load(program_file)["library"]) == 3


@pytest.mark.unit
def test_merge_overwrites_document_by_default(runner: CliRunner, program_file: Path) -> None:
    result = runner.invoke(
        cli, ["merge", str(program_file), "fac-1", "fac-2", "-c", "faculties", "-s", "fac-1"]
    )

    assert result.exit_code == 0
    assert [f["id"] for f in _load(program_file)["faculties"]] == ["fac-1", "fac-3"]


@pytest.mark.unit
def test_merge_rejects_foreign_survivor(runner: CliRunner, program_file: Path) -> None:
    before = program_file.read_text(encoding="utf-8")

    result = runner.invoke(
        cli, ["merge", str(program_file), "lib-1", "lib-2", "-c", "library", "-s", "lib-3"]
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert program_file.read_text(encoding="utf-8") == before


@pytest.mark.unit
def test_delete_clears_references(runner: CliRunner, program_file: Path) -> None:
    result = runner.invoke(cli, ["delete", str(program_file), "fac-2", "-c", "faculties"])

    assert result.exit_code == 0
    assert "Deleted 1 record(s)" in result.output
    courses = _load(program_file)["courses"]
    assert courses[0]["instructorIds"] == ["fac-1"]
    assert courses[1]["instructorIds"] == []


# ---------------------------------------------------------------------------
# canonicalize command
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_canonicalize_aborts_without_confirmation(
    runner: CliRunner, program_file: Path
) -> None:
    before = program_file.read_text(encoding="utf-8")

    result = runner.invoke(cli, ["canonicalize", str(program_file)], input="n\n")

    assert result.exit_code == 1
    assert "will change" in result.output
    assert program_file.read_text(encoding="utf-8") == before


@pytest.mark.unit
def test_canonicalize_with_yes(runner: CliRunner, program_file: Path) -> None:
    result = runner.invoke(cli, ["canonicalize", str(program_file), "--yes"])

    assert result.exit_code == 0
    data = _load(program_file)
    assert [c["id"] for c in data["courses"]] == ["CS101", "CS201"]
    assert data["generalInfo"]["moetInfo"]["programStructure"]["gen"] == ["CS101"]
    assert data["faculties"][0]["id"] == "fac-nguyenvana"


@pytest.mark.unit
def test_canonicalize_after_prompt(runner: CliRunner, program_file: Path) -> None:
    result = runner.invoke(cli, ["canonicalize", str(program_file)], input="y\n")

    assert result.exit_code == 0
    assert "Renamed" in result.output


# ---------------------------------------------------------------------------
# import-record command
# ---------------------------------------------------------------------------


def _record_file(tmp_path: Path, record: dict[str, Any]) -> Path:
    path = tmp_path / "record.json"
    path.write_text(json.dumps(record), encoding="utf-8")
    return path


@pytest.mark.unit
def test_import_record_inserts(runner: CliRunner, program_file: Path, tmp_path: Path) -> None:
    record = _record_file(tmp_path, {"id": "lib-9", "title": "Compilers"})

    result = runner.invoke(cli, ["import-record", str(program_file), str(record), "-k", "library"])

    assert result.exit_code == 0
    assert "Inserted library lib-9" in result.output
    assert _load(program_file)["library"][-1]["title"] == "Compilers"


@pytest.mark.unit
def test_import_record_conflict_cancelled_by_default(
    runner: CliRunner, program_file: Path, tmp_path: Path
) -> None:
    record = _record_file(tmp_path, {"id": "lib-1", "title": "Algorithms"})
    before = program_file.read_text(encoding="utf-8")

    result = runner.invoke(
        cli, ["import-record", str(program_file), str(record), "-k", "library"], input="\n"
    )

    assert result.exit_code == 0
    assert "Conflict: incoming library matches lib-1 (by id)" in result.output
    assert "Import cancelled" in result.output
    assert program_file.read_text(encoding="utf-8") == before


@pytest.mark.unit
def test_import_record_conflict_overwrite_prompt(
    runner: CliRunner, program_file: Path, tmp_path: Path
) -> None:
    record = _record_file(tmp_path, {"id": "lib-1", "title": "Algorithms Unlocked"})

    result = runner.invoke(
        cli,
        ["import-record", str(program_file), str(record), "-k", "library"],
        input="overwrite\n",
    )

    assert result.exit_code == 0
    library = _load(program_file)["library"]
    assert len(library) == 3
    assert library[0]["id"] == "lib-1"
    assert library[0]["title"] == "Algorithms Unlocked"


@pytest.mark.unit
def test_import_record_resolution_new(
    runner: CliRunner, program_file: Path, tmp_path: Path
) -> None:
    record = _record_file(tmp_path, {"title": "Introduction to Algorithms"})

    result = runner.invoke(
        cli,
        ["import-record", str(program_file), str(record), "-k", "library", "--resolution", "new"],
    )

    assert result.exit_code == 0
    assert "(by name)" in result.output
    library = _load(program_file)["library"]
    assert len(library) == 4
    assert library[-1]["id"] not in ("lib-1", "lib-2", "lib-3")


@pytest.mark.unit
def test_import_record_rejects_malformed(
    runner: CliRunner, program_file: Path, tmp_path: Path
) -> None:
    record = _record_file(tmp_path, {"name": "Algorithms"})

    result = runner.invoke(cli, ["import-record", str(program_file), str(record), "-k", "course"])

    assert result.exit_code == 1
    assert "Error:" in result.output


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_check_clean_document(runner: CliRunner, program_file: Path) -> None:
    result = runner.invoke(cli, ["check", str(program_file)])

    assert result.exit_code == 0
    assert "All references resolve" in result.output


@pytest.mark.unit
def test_check_reports_dangling(
    runner: CliRunner, tmp_path: Path, program_data: dict[str, Any]
) -> None:
    """Test dangling references are listed and set a failing exit code."""
    program_data["courses"][1]["instructorIds"] = ["ghost"]
    path = tmp_path / "program.json"
    path.write_text(json.dumps(program_data), encoding="utf-8")

    result = runner.invoke(cli, ["check", str(path), "--json"])

    assert result.exit_code == 1
    findings = json.loads(result.output)
    assert len(findings) == 1
    assert findings[0]["value"] == "ghost"
    assert findings[0]["target"] == "faculties"


# ---------------------------------------------------------------------------
# catalog commands
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_export_then_import_catalog(
    runner: CliRunner, program_file: Path, tmp_path: Path
) -> None:
    csv_path = tmp_path / "catalog.csv"

    exported = runner.invoke(cli, ["export-catalog", str(program_file), "-o", str(csv_path)])
    imported = runner.invoke(cli, ["import-catalog", str(program_file), str(csv_path)])

    assert exported.exit_code == 0
    assert "Exported 2 course(s)" in exported.output
    assert csv_path.read_bytes().startswith(b"\xef\xbb\xbf")
    assert imported.exit_code == 0
    assert "Updated 2 course(s), added 0" in imported.output
    assert _load(program_file)["courses"][0]["topics"][0]["id"] == "t1"
