"""Record data models for academic program documents.

Every collection of the program document is modelled as a dataclass with
explicit optional fields. On disk the document uses camelCase keys; the
``from_dict``/``to_dict`` pairs translate between the two. Record types that
are commonly extended by hand (courses, faculty, library resources) carry
unknown keys in ``extra`` so a load/save round trip never drops data.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

LocalizedString = dict[str, str]

LANGUAGES: tuple[str, ...] = ("vi", "en")
COURSE_TYPES: tuple[str, ...] = ("REQUIRED", "SELECTED_ELECTIVE", "ELECTIVE")


def localized(value: Any) -> LocalizedString:
    """Coerce a raw value into a localized string mapping.

    Parameters
    ----------
    value : Any
        Mapping of language code to text, a plain string, or None.

    Returns
    -------
    LocalizedString
        Mapping with at least the ``vi`` and ``en`` keys present.
    """
    if isinstance(value, dict):
        result = {lang: str(value.get(lang) or "") for lang in LANGUAGES}
        for lang, text in value.items():
            if lang not in result:
                result[lang] = "" if text is None else str(text)
        return result
    if isinstance(value, str):
        return {lang: value for lang in LANGUAGES}
    return {lang: "" for lang in LANGUAGES}


def _extra(data: dict[str, Any], known: frozenset[str]) -> dict[str, Any]:
    """Collect keys a record type does not model explicitly."""
    return {key: copy.deepcopy(value) for key, value in data.items() if key not in known}


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _optional_str_list(value: Any) -> list[str] | None:
    if value is None:
        return None
    return _str_list(value)


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------


@dataclass
class LibraryResource:
    """A book or reference held in the program library.

    Attributes
    ----------
    id : str
        Record identifier.
    title : str
        Title (primary natural key).
    author : str
        Author list as free text (secondary natural key).
    publisher : str
        Publisher.
    year : str
        Publication year as entered.
    type : str
        ``"textbook"`` or ``"reference"``.
    is_ebook : bool
        Electronic copy available.
    is_printed : bool
        Printed copy available.
    url : str | None
        Link to an online copy.
    extra : dict[str, Any]
        Keys not modelled above.
    """

    id: str
    title: str
    author: str = ""
    publisher: str = ""
    year: str = ""
    type: str = "textbook"
    is_ebook: bool = False
    is_printed: bool = True
    url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset(
        {"id", "title", "author", "publisher", "year", "type", "isEbook", "isPrinted", "url"}
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LibraryResource":
        """Build a resource from its on-disk mapping."""
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            publisher=str(data.get("publisher") or ""),
            year=str(data.get("year") or ""),
            type=data.get("type") or "textbook",
            is_ebook=bool(data.get("isEbook", False)),
            is_printed=bool(data.get("isPrinted", True)),
            url=data.get("url"),
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk mapping."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "publisher": self.publisher,
            "year": self.year,
            "type": self.type,
            "isEbook": self.is_ebook,
            "isPrinted": self.is_printed,
        }
        if self.url is not None:
            data["url"] = self.url
        data.update(copy.deepcopy(self.extra))
        return data


# ---------------------------------------------------------------------------
# Course and its nested syllabus structures
# ---------------------------------------------------------------------------


@dataclass
class Textbook:
    """Library resource cited by a course syllabus.

    ``resource_id`` links to :class:`LibraryResource`; the remaining fields
    are a denormalized copy shown in syllabus exports.
    """

    resource_id: str
    title: str = ""
    author: str = ""
    publisher: str = ""
    year: str = ""
    type: str = "textbook"
    url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Textbook":
        """Build a textbook citation from its on-disk mapping."""
        return cls(
            resource_id=str(data.get("resourceId") or ""),
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            publisher=str(data.get("publisher") or ""),
            year=str(data.get("year") or ""),
            type=data.get("type") or "textbook",
            url=data.get("url"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk mapping."""
        data: dict[str, Any] = {
            "resourceId": self.resource_id,
            "title": self.title,
            "author": self.author,
            "publisher": self.publisher,
            "year": self.year,
            "type": self.type,
        }
        if self.url is not None:
            data["url"] = self.url
        return data


@dataclass
class TopicActivity:
    """Teaching activity hours within a topic."""

    method_id: str
    hours: float = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TopicActivity":
        return cls(method_id=str(data.get("methodId") or ""), hours=data.get("hours", 0) or 0)

    def to_dict(self) -> dict[str, Any]:
        return {"methodId": self.method_id, "hours": self.hours}


@dataclass
class TopicReading:
    """Reading assignment pointing at a library resource."""

    resource_id: str
    page_range: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TopicReading":
        return cls(
            resource_id=str(data.get("resourceId") or ""),
            page_range=str(data.get("pageRange") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"resourceId": self.resource_id, "pageRange": self.page_range}


@dataclass
class CourseTopic:
    """One row of a syllabus topic schedule."""

    id: str
    no: str = ""
    topic: LocalizedString = field(default_factory=lambda: localized(None))
    activities: list[TopicActivity] = field(default_factory=list)
    reading_refs: list[TopicReading] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CourseTopic":
        return cls(
            id=str(data.get("id") or ""),
            no=str(data.get("no") or ""),
            topic=localized(data.get("topic")),
            activities=[TopicActivity.from_dict(a) for a in data.get("activities") or []],
            reading_refs=[TopicReading.from_dict(r) for r in data.get("readingRefs") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "no": self.no,
            "topic": dict(self.topic),
            "activities": [a.to_dict() for a in self.activities],
            "readingRefs": [r.to_dict() for r in self.reading_refs],
        }


@dataclass
class AssessmentItem:
    """Weighted assessment component of a course."""

    id: str
    method_id: str = ""
    type: LocalizedString = field(default_factory=lambda: localized(None))
    percentile: float = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssessmentItem":
        return cls(
            id=str(data.get("id") or ""),
            method_id=str(data.get("methodId") or ""),
            type=localized(data.get("type")),
            percentile=data.get("percentile", 0) or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "methodId": self.method_id,
            "type": dict(self.type),
            "percentile": self.percentile,
        }


@dataclass
class CloMapping:
    """Mapping of one course learning outcome to methods and outcomes."""

    clo_index: int
    topic_ids: list[str] = field(default_factory=list)
    teaching_method_ids: list[str] = field(default_factory=list)
    assessment_method_ids: list[str] = field(default_factory=list)
    coverage_level: str = ""
    so_ids: list[str] = field(default_factory=list)
    pi_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CloMapping":
        return cls(
            clo_index=int(data.get("cloIndex", 0) or 0),
            topic_ids=_str_list(data.get("topicIds")),
            teaching_method_ids=_str_list(data.get("teachingMethodIds")),
            assessment_method_ids=_str_list(data.get("assessmentMethodIds")),
            coverage_level=str(data.get("coverageLevel") or ""),
            so_ids=_str_list(data.get("soIds")),
            pi_ids=_str_list(data.get("piIds")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "cloIndex": self.clo_index,
            "topicIds": list(self.topic_ids),
            "teachingMethodIds": list(self.teaching_method_ids),
            "assessmentMethodIds": list(self.assessment_method_ids),
            "coverageLevel": self.coverage_level,
            "soIds": list(self.so_ids),
            "piIds": list(self.pi_ids),
        }


@dataclass
class Course:
    """Catalog entry and syllabus of one course.

    The catalog fields (code, name, credits, semester, type, requisites,
    essential/ABET flags, knowledge area) describe the course within the
    program; the remaining fields hold syllabus content.

    Attributes
    ----------
    id : str
        Record identifier.
    code : str
        Catalog code (natural key, also used by requisite lists).
    name : LocalizedString
        Course name per language.
    credits : float
        Credit count.
    is_essential : bool
        Essential course flag.
    is_abet : bool | None
        ABET scope flag, None when the document predates it.
    type : str
        One of ``COURSE_TYPES``.
    knowledge_area_id : str
        Reference to a knowledge area.
    semester : int
        Planned semester.
    col_index : int
        Column position in the curriculum map.
    prerequisites : list[str]
        Prerequisite course *codes*.
    co_requisites : list[str]
        Co-requisite course *codes*.
    description : LocalizedString
        Course description.
    textbooks : list[Textbook]
        Cited library resources.
    clos : dict[str, list[str]]
        Course learning outcomes per language.
    topics : list[CourseTopic]
        Topic schedule.
    assessment_plan : list[AssessmentItem]
        Assessment components.
    instructor_ids : list[str]
        Faculty teaching the course.
    instructor_details : dict[str, dict[str, Any]]
        Per-instructor class details keyed by faculty id.
    clo_map : list[CloMapping]
        Outcome mappings of each learning outcome.
    extra : dict[str, Any]
        Keys not modelled above.
    """

    id: str
    code: str
    name: LocalizedString = field(default_factory=lambda: localized(None))
    credits: float = 0
    is_essential: bool = False
    is_abet: bool | None = None
    type: str = "REQUIRED"
    knowledge_area_id: str = ""
    semester: int = 1
    col_index: int = 0
    prerequisites: list[str] = field(default_factory=list)
    co_requisites: list[str] = field(default_factory=list)
    description: LocalizedString = field(default_factory=lambda: localized(None))
    textbooks: list[Textbook] = field(default_factory=list)
    clos: dict[str, list[str]] = field(default_factory=lambda: {"vi": [], "en": []})
    topics: list[CourseTopic] = field(default_factory=list)
    assessment_plan: list[AssessmentItem] = field(default_factory=list)
    instructor_ids: list[str] = field(default_factory=list)
    instructor_details: dict[str, dict[str, Any]] = field(default_factory=dict)
    clo_map: list[CloMapping] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset(
        {
            "id",
            "code",
            "name",
            "credits",
            "isEssential",
            "isAbet",
            "type",
            "knowledgeAreaId",
            "semester",
            "colIndex",
            "prerequisites",
            "coRequisites",
            "description",
            "textbooks",
            "clos",
            "topics",
            "assessmentPlan",
            "instructorIds",
            "instructorDetails",
            "cloMap",
        }
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Course":
        """Build a course from its on-disk mapping."""
        raw_clos = data.get("clos") or {}
        clos = {lang: _str_list(raw_clos.get(lang)) for lang in LANGUAGES}
        is_abet = data.get("isAbet")
        return cls(
            id=str(data.get("id") or ""),
            code=str(data.get("code") or ""),
            name=localized(data.get("name")),
            credits=data.get("credits", 0) or 0,
            is_essential=bool(data.get("isEssential", False)),
            is_abet=None if is_abet is None else bool(is_abet),
            type=data.get("type") or "REQUIRED",
            knowledge_area_id=str(data.get("knowledgeAreaId") or ""),
            semester=int(data.get("semester", 1) or 1),
            col_index=int(data.get("colIndex", 0) or 0),
            prerequisites=_str_list(data.get("prerequisites")),
            co_requisites=_str_list(data.get("coRequisites")),
            description=localized(data.get("description")),
            textbooks=[Textbook.from_dict(t) for t in data.get("textbooks") or []],
            clos=clos,
            topics=[CourseTopic.from_dict(t) for t in data.get("topics") or []],
            assessment_plan=[AssessmentItem.from_dict(a) for a in data.get("assessmentPlan") or []],
            instructor_ids=_str_list(data.get("instructorIds")),
            instructor_details={
                str(fid): copy.deepcopy(details)
                for fid, details in (data.get("instructorDetails") or {}).items()
            },
            clo_map=[CloMapping.from_dict(m) for m in data.get("cloMap") or []],
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk mapping."""
        data: dict[str, Any] = {
            "id": self.id,
            "code": self.code,
            "name": dict(self.name),
            "credits": self.credits,
            "isEssential": self.is_essential,
            "type": self.type,
            "knowledgeAreaId": self.knowledge_area_id,
            "semester": self.semester,
            "colIndex": self.col_index,
            "prerequisites": list(self.prerequisites),
            "coRequisites": list(self.co_requisites),
            "description": dict(self.description),
            "textbooks": [t.to_dict() for t in self.textbooks],
            "clos": {lang: list(items) for lang, items in self.clos.items()},
            "topics": [t.to_dict() for t in self.topics],
            "assessmentPlan": [a.to_dict() for a in self.assessment_plan],
            "instructorIds": list(self.instructor_ids),
            "instructorDetails": copy.deepcopy(self.instructor_details),
            "cloMap": [m.to_dict() for m in self.clo_map],
        }
        if self.is_abet is not None:
            data["isAbet"] = self.is_abet
        data.update(copy.deepcopy(self.extra))
        return data


# ---------------------------------------------------------------------------
# Faculty
# ---------------------------------------------------------------------------


@dataclass
class Faculty:
    """Faculty member CV.

    Only the identifying fields are modelled; the CV body (rank, degrees,
    experience and publication lists) travels in ``extra`` untouched.
    """

    id: str
    name: LocalizedString = field(default_factory=lambda: localized(None))
    email: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset({"id", "name", "email"})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Faculty":
        """Build a faculty record from its on-disk mapping."""
        return cls(
            id=str(data.get("id") or ""),
            name=localized(data.get("name")),
            email=str(data.get("email") or ""),
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk mapping."""
        data: dict[str, Any] = {"id": self.id, "name": dict(self.name), "email": self.email}
        data.update(copy.deepcopy(self.extra))
        return data


# ---------------------------------------------------------------------------
# Program-level catalogs and outcome definitions
# ---------------------------------------------------------------------------


@dataclass
class KnowledgeArea:
    id: str
    name: LocalizedString = field(default_factory=lambda: localized(None))
    color: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KnowledgeArea":
        return cls(
            id=str(data.get("id") or ""),
            name=localized(data.get("name")),
            color=str(data.get("color") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": dict(self.name), "color": self.color}


@dataclass
class TeachingMethod:
    id: str
    code: str = ""
    name: LocalizedString = field(default_factory=lambda: localized(None))
    hours_per_credit: float = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeachingMethod":
        return cls(
            id=str(data.get("id") or ""),
            code=str(data.get("code") or ""),
            name=localized(data.get("name")),
            hours_per_credit=data.get("hoursPerCredit", 0) or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "name": dict(self.name),
            "hoursPerCredit": self.hours_per_credit,
        }


@dataclass
class AssessmentMethod:
    id: str
    name: LocalizedString = field(default_factory=lambda: localized(None))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssessmentMethod":
        return cls(id=str(data.get("id") or ""), name=localized(data.get("name")))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": dict(self.name)}


@dataclass
class ProgramEducationalObjective:
    """Program educational objective (PEO)."""

    id: str
    code: str = ""
    title: LocalizedString = field(default_factory=lambda: localized(None))
    description: LocalizedString = field(default_factory=lambda: localized(None))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProgramEducationalObjective":
        return cls(
            id=str(data.get("id") or ""),
            code=str(data.get("code") or ""),
            title=localized(data.get("title")),
            description=localized(data.get("description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "title": dict(self.title),
            "description": dict(self.description),
        }


@dataclass
class PerformanceIndicator:
    """Performance indicator (PI) nested under a student outcome."""

    id: str
    code: str = ""
    description: LocalizedString = field(default_factory=lambda: localized(None))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PerformanceIndicator":
        return cls(
            id=str(data.get("id") or ""),
            code=str(data.get("code") or ""),
            description=localized(data.get("description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "code": self.code, "description": dict(self.description)}


@dataclass
class StudentOutcome:
    """Student outcome (SO) with its performance indicators."""

    id: str
    number: int = 0
    code: str = ""
    description: LocalizedString = field(default_factory=lambda: localized(None))
    pis: list[PerformanceIndicator] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StudentOutcome":
        return cls(
            id=str(data.get("id") or ""),
            number=int(data.get("number", 0) or 0),
            code=str(data.get("code") or ""),
            description=localized(data.get("description")),
            pis=[PerformanceIndicator.from_dict(p) for p in data.get("pis") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "code": self.code,
            "description": dict(self.description),
            "pis": [p.to_dict() for p in self.pis],
        }


@dataclass
class Objective:
    """Program learning objective, optionally linked to PEOs and SOs.

    ``peo_ids``/``so_ids`` are None when the source document omits them;
    they are then also omitted on output.
    """

    id: str
    description: LocalizedString = field(default_factory=lambda: localized(None))
    category: str | None = None
    peo_ids: list[str] | None = None
    so_ids: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Objective":
        return cls(
            id=str(data.get("id") or ""),
            description=localized(data.get("description")),
            category=data.get("category"),
            peo_ids=_optional_str_list(data.get("peoIds")),
            so_ids=_optional_str_list(data.get("soIds")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "description": dict(self.description)}
        if self.category is not None:
            data["category"] = self.category
        if self.peo_ids is not None:
            data["peoIds"] = list(self.peo_ids)
        if self.so_ids is not None:
            data["soIds"] = list(self.so_ids)
        return data


@dataclass
class SubBlock:
    """Elective sub-block of the program structure."""

    id: str
    name: LocalizedString = field(default_factory=lambda: localized(None))
    parent_block_id: str = "spec"
    min_credits: float = 0
    course_ids: list[str] = field(default_factory=list)
    note: LocalizedString | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubBlock":
        note = data.get("note")
        return cls(
            id=str(data.get("id") or ""),
            name=localized(data.get("name")),
            parent_block_id=str(data.get("parentBlockId") or "spec"),
            min_credits=data.get("minCredits", 0) or 0,
            course_ids=_str_list(data.get("courseIds")),
            note=None if note is None else localized(note),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": dict(self.name),
            "parentBlockId": self.parent_block_id,
            "minCredits": self.min_credits,
            "courseIds": list(self.course_ids),
        }
        if self.note is not None:
            data["note"] = dict(self.note)
        return data


# ---------------------------------------------------------------------------
# Join-table rows
# ---------------------------------------------------------------------------


@dataclass
class CourseSoLink:
    course_id: str
    so_id: str
    level: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CourseSoLink":
        return cls(
            course_id=str(data.get("courseId") or ""),
            so_id=str(data.get("soId") or ""),
            level=str(data.get("level") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"courseId": self.course_id, "soId": self.so_id, "level": self.level}


@dataclass
class CoursePiLink:
    course_id: str
    pi_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CoursePiLink":
        return cls(course_id=str(data.get("courseId") or ""), pi_id=str(data.get("piId") or ""))

    def to_dict(self) -> dict[str, Any]:
        return {"courseId": self.course_id, "piId": self.pi_id}


@dataclass
class CoursePeoLink:
    course_id: str
    peo_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CoursePeoLink":
        return cls(course_id=str(data.get("courseId") or ""), peo_id=str(data.get("peoId") or ""))

    def to_dict(self) -> dict[str, Any]:
        return {"courseId": self.course_id, "peoId": self.peo_id}


@dataclass
class PeoSoLink:
    peo_id: str
    so_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PeoSoLink":
        return cls(peo_id=str(data.get("peoId") or ""), so_id=str(data.get("soId") or ""))

    def to_dict(self) -> dict[str, Any]:
        return {"peoId": self.peo_id, "soId": self.so_id}


@dataclass
class PeoConstituentLink:
    peo_id: str
    constituent_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PeoConstituentLink":
        return cls(
            peo_id=str(data.get("peoId") or ""),
            constituent_id=str(data.get("constituentId") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"peoId": self.peo_id, "constituentId": self.constituent_id}
