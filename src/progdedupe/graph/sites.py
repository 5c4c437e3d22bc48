"""Reference sites: every place one record stores another record's key.

The registry is a static list of :class:`ReferenceSite` descriptors. Each
descriptor names the target collection, the storage shape and which target
field the stored value dereferences (``id`` for almost every site, ``code``
for course requisite lists). The rewrite engine and the integrity checks
walk this list instead of knowing the document layout themselves.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from progdedupe.models import Document

__all__ = [
    "SiteShape",
    "ListKind",
    "Slot",
    "ReferenceSite",
    "build_reference_sites",
    "REFERENCE_SITES",
    "sites_targeting",
    "read_slot",
    "write_slot",
]


class SiteShape(StrEnum):
    """Storage shape of a reference site.

    Attributes
    ----------
    SCALAR : str
        One field holding one key; empty string means no reference.
    LIST : str
        A collection of keys (plain list, list of rows, or mapping keys).
    COMPOUND : str
        List of separator-joined key pairs used as set-membership markers.
    """

    SCALAR = "scalar"
    LIST = "list"
    COMPOUND = "compound"


class ListKind(StrEnum):
    """Container variant of a LIST site.

    Attributes
    ----------
    KEYS : str
        ``list[str]`` of keys.
    ROWS : str
        List of objects whose ``element_field`` holds the key.
    MAPPING_KEYS : str
        ``dict`` keyed by the referenced key.
    """

    KEYS = "keys"
    ROWS = "rows"
    MAPPING_KEYS = "mapping_keys"


# A (holder, field) pair; holder is a record object or a plain dict.
Slot = tuple[Any, str]


def read_slot(slot: Slot) -> Any:
    """Read the value stored at a slot."""
    holder, name = slot
    if isinstance(holder, dict):
        return holder.get(name)
    return getattr(holder, name)


def write_slot(slot: Slot, value: Any) -> None:
    """Store a value at a slot."""
    holder, name = slot
    if isinstance(holder, dict):
        holder[name] = value
    else:
        setattr(holder, name, value)


@dataclass(frozen=True)
class ReferenceSite:
    """Descriptor of one reference site.

    Attributes
    ----------
    name : str
        Human-readable site path (``"course.textbooks[].resourceId"``).
    target : str
        Referenced collection.
    shape : SiteShape
        Storage shape.
    locate : Callable[[Document], Iterator[Slot]]
        Yields every slot of this site in a document.
    key_field : str
        Target field the stored value dereferences, ``"id"`` or ``"code"``.
    list_kind : ListKind
        Container variant for LIST sites.
    element_field : str | None
        Key attribute of each row for ``ListKind.ROWS``.
    dedupe_fields : tuple[str, ...] | None
        Row attributes forming the uniqueness key for ``ListKind.ROWS``;
        None deduplicates on ``element_field`` alone.
    component : int
        Component index of a COMPOUND key.
    separator : str
        Separator of COMPOUND keys.
    owner : str | None
        Collection whose records hold the slots, or None for document-level
        tables and lists.
    """

    name: str
    target: str
    shape: SiteShape
    locate: Callable[[Document], Iterator[Slot]]
    key_field: str = "id"
    list_kind: ListKind = ListKind.KEYS
    element_field: str | None = None
    dedupe_fields: tuple[str, ...] | None = None
    component: int = 0
    separator: str = "|"
    owner: str | None = None


# ---------------------------------------------------------------------------
# Slot locators
# ---------------------------------------------------------------------------


def _document_field(name: str) -> Callable[[Document], Iterator[Slot]]:
    def locate(document: Document) -> Iterator[Slot]:
        yield (document, name)

    return locate


def _course_field(name: str) -> Callable[[Document], Iterator[Slot]]:
    def locate(document: Document) -> Iterator[Slot]:
        for course in document.courses:
            yield (course, name)

    return locate


def _structure_blocks(document: Document) -> Iterator[Slot]:
    for block in document.program_structure:
        yield (document.program_structure, block)


def _sub_block_courses(document: Document) -> Iterator[Slot]:
    for sub_block in document.sub_blocks:
        yield (sub_block, "course_ids")


def _reading_refs(document: Document) -> Iterator[Slot]:
    for course in document.courses:
        for topic in course.topics:
            for reading in topic.reading_refs:
                yield (reading, "resource_id")


def _topic_activities(document: Document) -> Iterator[Slot]:
    for course in document.courses:
        for topic in course.topics:
            for activity in topic.activities:
                yield (activity, "method_id")


def _assessment_items(document: Document) -> Iterator[Slot]:
    for course in document.courses:
        for item in course.assessment_plan:
            yield (item, "method_id")


def _clo_map_field(name: str) -> Callable[[Document], Iterator[Slot]]:
    def locate(document: Document) -> Iterator[Slot]:
        for course in document.courses:
            for mapping in course.clo_map:
                yield (mapping, name)

    return locate


def _objective_field(collection: str, name: str) -> Callable[[Document], Iterator[Slot]]:
    def locate(document: Document) -> Iterator[Slot]:
        for objective in getattr(document, collection):
            yield (objective, name)

    return locate


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def _rows(
    name: str,
    target: str,
    table: str,
    element_field: str,
    dedupe_fields: tuple[str, ...],
) -> ReferenceSite:
    return ReferenceSite(
        name=name,
        target=target,
        shape=SiteShape.LIST,
        locate=_document_field(table),
        list_kind=ListKind.ROWS,
        element_field=element_field,
        dedupe_fields=dedupe_fields,
    )


def build_reference_sites(separator: str = "|") -> tuple[ReferenceSite, ...]:
    """Build the full reference-site registry.

    Parameters
    ----------
    separator : str, optional
        Separator of compound keys, by default "|".

    Returns
    -------
    tuple[ReferenceSite, ...]
        Every reference site of the program document.
    """
    list_site = SiteShape.LIST
    scalar = SiteShape.SCALAR

    return (
        # courses, by id
        ReferenceSite("programStructure.*[]", "courses", list_site, _structure_blocks),
        ReferenceSite("subBlocks[].courseIds", "courses", list_site, _sub_block_courses),
        _rows(
            "courseSoMap[].courseId",
            "courses",
            "course_so_map",
            "course_id",
            ("course_id", "so_id", "level"),
        ),
        _rows(
            "coursePiMap[].courseId",
            "courses",
            "course_pi_map",
            "course_id",
            ("course_id", "pi_id"),
        ),
        _rows(
            "coursePeoMap[].courseId",
            "courses",
            "course_peo_map",
            "course_id",
            ("course_id", "peo_id"),
        ),
        ReferenceSite(
            "courseObjectiveMap[]#0",
            "courses",
            SiteShape.COMPOUND,
            _document_field("course_objective_map"),
            component=0,
            separator=separator,
        ),
        # courses, by code
        ReferenceSite(
            "course.prerequisites",
            "courses",
            list_site,
            _course_field("prerequisites"),
            key_field="code",
            owner="courses",
        ),
        ReferenceSite(
            "course.coRequisites",
            "courses",
            list_site,
            _course_field("co_requisites"),
            key_field="code",
            owner="courses",
        ),
        # faculties
        ReferenceSite(
            "course.instructorIds",
            "faculties",
            list_site,
            _course_field("instructor_ids"),
            owner="courses",
        ),
        ReferenceSite(
            "course.instructorDetails{}",
            "faculties",
            list_site,
            _course_field("instructor_details"),
            list_kind=ListKind.MAPPING_KEYS,
            owner="courses",
        ),
        # library
        ReferenceSite(
            "course.textbooks[].resourceId",
            "library",
            list_site,
            _course_field("textbooks"),
            list_kind=ListKind.ROWS,
            element_field="resource_id",
            owner="courses",
        ),
        ReferenceSite(
            "course.topics[].readingRefs[].resourceId",
            "library",
            scalar,
            _reading_refs,
            owner="courses",
        ),
        # objectives
        ReferenceSite(
            "courseObjectiveMap[]#1",
            "objectives",
            SiteShape.COMPOUND,
            _document_field("course_objective_map"),
            component=1,
            separator=separator,
        ),
        # student outcomes
        _rows(
            "courseSoMap[].soId", "sos", "course_so_map", "so_id", ("course_id", "so_id", "level")
        ),
        _rows("peoSoMap[].soId", "sos", "peo_so_map", "so_id", ("peo_id", "so_id")),
        ReferenceSite(
            "objectives[].soIds", "sos", list_site, _objective_field("objectives", "so_ids")
        ),
        ReferenceSite(
            "moetObjectives[].soIds",
            "sos",
            list_site,
            _objective_field("moet_objectives", "so_ids"),
        ),
        ReferenceSite(
            "course.cloMap[].soIds", "sos", list_site, _clo_map_field("so_ids"), owner="courses"
        ),
        # performance indicators
        _rows("coursePiMap[].piId", "pis", "course_pi_map", "pi_id", ("course_id", "pi_id")),
        ReferenceSite(
            "course.cloMap[].piIds", "pis", list_site, _clo_map_field("pi_ids"), owner="courses"
        ),
        # program educational objectives
        _rows("coursePeoMap[].peoId", "peos", "course_peo_map", "peo_id", ("course_id", "peo_id")),
        _rows("peoSoMap[].peoId", "peos", "peo_so_map", "peo_id", ("peo_id", "so_id")),
        _rows(
            "peoConstituentMap[].peoId",
            "peos",
            "peo_constituent_map",
            "peo_id",
            ("peo_id", "constituent_id"),
        ),
        ReferenceSite(
            "objectives[].peoIds", "peos", list_site, _objective_field("objectives", "peo_ids")
        ),
        ReferenceSite(
            "moetObjectives[].peoIds",
            "peos",
            list_site,
            _objective_field("moet_objectives", "peo_ids"),
        ),
        # teaching and assessment methods
        ReferenceSite(
            "course.topics[].activities[].methodId",
            "teaching_methods",
            scalar,
            _topic_activities,
            owner="courses",
        ),
        ReferenceSite(
            "course.cloMap[].teachingMethodIds",
            "teaching_methods",
            list_site,
            _clo_map_field("teaching_method_ids"),
            owner="courses",
        ),
        ReferenceSite(
            "course.assessmentPlan[].methodId",
            "assessment_methods",
            scalar,
            _assessment_items,
            owner="courses",
        ),
        ReferenceSite(
            "course.cloMap[].assessmentMethodIds",
            "assessment_methods",
            list_site,
            _clo_map_field("assessment_method_ids"),
            owner="courses",
        ),
        # knowledge areas
        ReferenceSite(
            "course.knowledgeAreaId",
            "knowledge_areas",
            scalar,
            _course_field("knowledge_area_id"),
            owner="courses",
        ),
    )


REFERENCE_SITES: tuple[ReferenceSite, ...] = build_reference_sites()


def sites_targeting(
    collection: str,
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> list[ReferenceSite]:
    """Return the sites referencing a collection, in registry order."""
    return [site for site in sites if site.target == collection]
