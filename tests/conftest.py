"""Pytest configuration and fixtures for test suite."""

import copy
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from progdedupe.models import Document, validate_document  # noqa: E402
from progdedupe.normalize import normalize_document  # noqa: E402

_PROGRAM: dict[str, Any] = {
    "generalInfo": {
        "programName": {"vi": "Khoa học máy tính", "en": "Computer Science"},
        "moetInfo": {
            "programStructure": {"gen": ["C1"], "fund": ["C2"], "spec": [], "grad": []},
            "specificObjectives": [
                {
                    "id": "OBJ1",
                    "description": "Apply computing",
                    "peoIds": ["PEO1"],
                    "soIds": ["SO1"],
                }
            ],
            "moetSpecificObjectives": [],
            "subBlocks": [{"id": "sb1", "name": "Electives", "courseIds": ["C2"]}],
            "courseObjectiveMap": ["C1|OBJ1", "C2|OBJ1"],
        },
    },
    "library": [
        {"id": "lib-1", "title": "Introduction to Algorithms", "author": "Thomas H. Cormen"},
        {"id": "lib-2", "title": "Introduction to Algorithms, 3rd Ed.", "author": "T. H. Cormen"},
        {"id": "lib-3", "title": "Database Systems", "author": "Ramez Elmasri"},
    ],
    "faculties": [
        {
            "id": "fac-1",
            "name": {"vi": "Nguyễn Văn An", "en": "Nguyen Van An"},
            "email": "an@uni.edu",
        },
        {
            "id": "fac-2",
            "name": {"vi": "Nguyễn Văn An", "en": "Nguyen Van An"},
            "email": "an@uni.edu",
        },
        {
            "id": "fac-3",
            "name": {"vi": "Trần Thị Bình", "en": "Tran Thi Binh"},
            "email": "binh@uni.edu",
        },
    ],
    "courses": [
        {
            "id": "C1",
            "code": "CS101",
            "name": {"vi": "Nhập môn lập trình", "en": "Programming Fundamentals"},
            "credits": 3,
            "semester": 1,
            "type": "REQUIRED",
            "isEssential": True,
            "knowledgeAreaId": "KA1",
            "textbooks": [
                {"resourceId": "lib-1", "title": "Introduction to Algorithms"},
                {"resourceId": "lib-2", "title": "Introduction to Algorithms, 3rd Ed."},
            ],
            "topics": [
                {
                    "id": "t1",
                    "no": "1",
                    "topic": {"vi": "Giới thiệu", "en": "Introduction"},
                    "activities": [{"methodId": "TM1", "hours": 2}],
                    "readingRefs": [{"resourceId": "lib-2", "pageRange": "1-10"}],
                }
            ],
            "assessmentPlan": [{"id": "a1", "methodId": "AM1", "percentile": 40}],
            "instructorIds": ["fac-1", "fac-2"],
            "instructorDetails": {
                "fac-1": {"classId": "CS101.1"},
                "fac-2": {"classId": "CS101.2"},
            },
            "cloMap": [
                {
                    "cloIndex": 0,
                    "teachingMethodIds": ["TM1"],
                    "assessmentMethodIds": ["AM1"],
                    "soIds": ["SO1"],
                    "piIds": ["PI1.1"],
                }
            ],
        },
        {
            "id": "C2",
            "code": "CS201",
            "name": {"vi": "Cấu trúc dữ liệu", "en": "Data Structures"},
            "credits": 4,
            "semester": 2,
            "prerequisites": ["CS101"],
            "textbooks": [{"resourceId": "lib-2"}],
            "instructorIds": ["fac-2"],
        },
    ],
    "knowledgeAreas": [{"id": "KA1", "name": {"vi": "Cơ sở", "en": "Core"}}],
    "teachingMethods": [{"id": "TM1", "name": {"vi": "Giảng", "en": "Lecture"}}],
    "assessmentMethods": [{"id": "AM1", "name": {"vi": "Thi", "en": "Exam"}}],
    "peos": [{"id": "PEO1", "title": {"vi": "Mục tiêu 1", "en": "Objective 1"}}],
    "sos": [{"id": "SO1", "number": 1, "pis": [{"id": "PI1.1", "code": "1.1"}]}],
    "courseSoMap": [{"courseId": "C1", "soId": "SO1", "level": "H"}],
    "coursePiMap": [{"courseId": "C1", "piId": "PI1.1"}],
    "coursePeoMap": [{"courseId": "C1", "peoId": "PEO1"}],
    "peoSoMap": [{"peoId": "PEO1", "soId": "SO1"}],
    "peoConstituentMap": [{"peoId": "PEO1", "constituentId": "employers"}],
}


def build_document(data: dict[str, Any]) -> Document:
    """Normalize, validate and type a raw document mapping."""
    normalized = normalize_document(data)
    validate_document(normalized)
    return Document.from_dict(normalized)


@pytest.fixture
def program_data() -> dict[str, Any]:
    """Raw program document with one reference at every kind of site."""
    return copy.deepcopy(_PROGRAM)


@pytest.fixture
def program(program_data: dict[str, Any]) -> Document:
    """Typed snapshot of ``program_data``."""
    return build_document(program_data)


@pytest.fixture
def make_resource() -> Callable[..., dict[str, Any]]:
    """Factory for raw library resources."""

    def _factory(record_id: str, title: str, author: str = "", **fields: Any) -> dict[str, Any]:
        return {"id": record_id, "title": title, "author": author, **fields}

    return _factory


@pytest.fixture
def make_course() -> Callable[..., dict[str, Any]]:
    """Factory for raw courses; the Vietnamese name defaults to the English one."""

    def _factory(
        record_id: str,
        code: str,
        name: str = "",
        *,
        name_vi: str | None = None,
        **fields: Any,
    ) -> dict[str, Any]:
        return {
            "id": record_id,
            "code": code,
            "name": {"vi": name if name_vi is None else name_vi, "en": name},
            **fields,
        }

    return _factory


@pytest.fixture
def make_faculty() -> Callable[..., dict[str, Any]]:
    """Factory for raw faculty records."""

    def _factory(record_id: str, name: str, email: str = "", **fields: Any) -> dict[str, Any]:
        return {"id": record_id, "name": {"vi": name, "en": name}, "email": email, **fields}

    return _factory


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Factory for typed documents from raw collections given as keyword arguments."""

    def _factory(**collections: Any) -> Document:
        return build_document(dict(collections))

    return _factory
