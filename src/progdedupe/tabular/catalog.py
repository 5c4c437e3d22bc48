"""Course catalog CSV export and import.

The catalog file carries the catalog fields of every course, one row per
course, in a fixed column order. Import accepts the current layout and the
older one that predates the ``Type`` column; the two are told apart by
whether column 6 holds a course type token.
"""

import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from progdedupe.models import COURSE_TYPES, Course, Document, localized, now_ms
from progdedupe.normalize.text import leading_int

__all__ = [
    "CATALOG_HEADER",
    "CatalogImportReport",
    "export_catalog",
    "write_catalog",
    "parse_catalog",
    "import_catalog",
    "read_catalog",
]

CATALOG_HEADER: tuple[str, ...] = (
    "ID",
    "Code",
    "Name_VI",
    "Name_EN",
    "Credits",
    "Semester",
    "Type",
    "Prerequisites",
    "Co-requisite",
    "Essential",
    "ABET",
    "AreaID",
)

BOM = "\ufeff"
_MIN_COLUMNS = 5


@dataclass
class CatalogImportReport:
    """Outcome of a catalog import.

    Attributes
    ----------
    updated_ids : list[str]
        Existing courses whose catalog fields were replaced.
    added_ids : list[str]
        Courses appended because their id was new.
    legacy_rows : int
        Rows read in the layout without the ``Type`` column.
    version : int
        Version of the resulting document.
    """

    updated_ids: list[str] = field(default_factory=list)
    added_ids: list[str] = field(default_factory=list)
    legacy_rows: int = 0
    version: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "updated": len(self.updated_ids),
            "added": len(self.added_ids),
            "updated_ids": list(self.updated_ids),
            "added_ids": list(self.added_ids),
            "legacy_rows": self.legacy_rows,
            "version": self.version,
        }


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_catalog(document: Document) -> str:
    """Render the course catalog as CSV text (BOM-prefixed).

    Parameters
    ----------
    document : Document
        Snapshot to export.

    Returns
    -------
    str
        CSV text, ``\\n`` line endings, starting with a UTF-8 BOM.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CATALOG_HEADER)
    for course in document.courses:
        writer.writerow(
            [
                course.id,
                course.code,
                course.name.get("vi", ""),
                course.name.get("en", ""),
                _format_number(course.credits),
                course.semester,
                course.type,
                ", ".join(course.prerequisites),
                ", ".join(course.co_requisites),
                1 if course.is_essential else 0,
                1 if course.is_abet else 0,
                course.knowledge_area_id,
            ]
        )
    return BOM + buffer.getvalue()


def write_catalog(document: Document, path: Path) -> int:
    """Write the catalog CSV to ``path`` and return the row count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_catalog(document), encoding="utf-8")
    return len(document.courses)


def _split_codes(text: str) -> list[str]:
    return [code.strip() for code in (text or "").split(",") if code.strip()]


def _is_true(text: str) -> bool:
    return text in ("1", "true")


def _column(cols: list[str], index: int) -> str | None:
    return cols[index] if index < len(cols) else None


def parse_catalog(text: str, timestamp_ms: int | None = None) -> tuple[list[Course], int]:
    """Parse catalog CSV text into courses carrying catalog fields only.

    Parameters
    ----------
    text : str
        CSV text; a leading BOM is ignored. The first line is a header.
    timestamp_ms : int | None, optional
        Timestamp for ids of rows without one, by default the current time.

    Returns
    -------
    tuple[list[Course], int]
        Parsed courses in file order, and the number of rows read in the
        legacy layout.

    Notes
    -----
    Rows with fewer than five columns are skipped. Defaults: id
    ``CID-<ms>-<line>``, code ``NEW``, credits 0, semester 1, type
    ``REQUIRED`` (legacy layout), knowledge area ``other``. ABET defaults
    to the essential flag when its column is absent.
    """
    stamp = now_ms() if timestamp_ms is None else timestamp_ms
    if text.startswith(BOM):
        text = text[len(BOM) :]

    courses: list[Course] = []
    legacy_rows = 0
    for line_no, raw_cols in enumerate(csv.reader(io.StringIO(text))):
        if line_no == 0:
            continue
        cols = [col.strip() for col in raw_cols]
        if not any(cols) or len(cols) < _MIN_COLUMNS:
            continue

        type_token = (_column(cols, 6) or "").upper()
        if type_token in COURSE_TYPES:
            course_type = type_token
            tail = 7
        else:
            course_type = "REQUIRED"
            tail = 6
            legacy_rows += 1

        prerequisites = _column(cols, tail) or ""
        co_requisites = _column(cols, tail + 1) or ""
        essential = _column(cols, tail + 2) or ""
        abet = _column(cols, tail + 3)
        area = _column(cols, tail + 4) or ""

        is_essential = _is_true(essential)
        courses.append(
            Course(
                id=cols[0] or f"CID-{stamp}-{line_no}",
                code=cols[1] or "NEW",
                name=localized({"vi": cols[2], "en": cols[3]}),
                credits=leading_int(cols[4], 0),
                semester=leading_int(_column(cols, 5) or "", 1),
                type=course_type,
                prerequisites=_split_codes(prerequisites),
                co_requisites=_split_codes(co_requisites),
                is_essential=is_essential,
                is_abet=is_essential if abet is None else _is_true(abet),
                knowledge_area_id=area or "other",
            )
        )
    return courses, legacy_rows


_CATALOG_FIELDS: tuple[str, ...] = (
    "code",
    "name",
    "credits",
    "semester",
    "type",
    "prerequisites",
    "co_requisites",
    "is_essential",
    "is_abet",
    "knowledge_area_id",
)


def import_catalog(
    document: Document,
    text: str,
    timestamp_ms: int | None = None,
) -> tuple[Document, CatalogImportReport]:
    """Apply a catalog CSV to the course collection.

    Existing courses (matched by id) get their catalog fields replaced;
    syllabus content is kept. Rows with an unknown id are appended. When
    several rows share an id the last one wins.

    Parameters
    ----------
    document : Document
        Current snapshot (not modified).
    text : str
        Catalog CSV text.
    timestamp_ms : int | None, optional
        Timestamp for generated ids.

    Returns
    -------
    tuple[Document, CatalogImportReport]
        New snapshot and report; the input snapshot when the file holds no
        rows.
    """
    parsed, legacy_rows = parse_catalog(text, timestamp_ms)
    if not parsed:
        return document, CatalogImportReport(legacy_rows=legacy_rows, version=document.version)

    incoming: dict[str, Course] = {}
    for course in parsed:
        incoming[course.id] = course

    working = document.next_version()
    report = CatalogImportReport(legacy_rows=legacy_rows)

    existing_ids = set()
    for course in working.courses:
        existing_ids.add(course.id)
        row = incoming.get(course.id)
        if row is None:
            continue
        for name in _CATALOG_FIELDS:
            setattr(course, name, getattr(row, name))
        report.updated_ids.append(course.id)

    for course_id, row in incoming.items():
        if course_id not in existing_ids:
            working.courses.append(row)
            report.added_ids.append(course_id)

    report.version = working.version
    return working, report


def read_catalog(path: Path) -> str:
    """Read catalog CSV text from ``path`` (BOM tolerated)."""
    return path.read_text(encoding="utf-8-sig")
