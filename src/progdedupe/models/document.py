"""Program document: the single in-memory snapshot every operation works on.

A :class:`Document` owns the typed collections and the document-level
reference structures (program structure lists, join tables and the
course/objective compound map). Everything else in the source file is kept
verbatim in ``template`` and written back unchanged.

Operations never mutate a document they receive. They work on
:meth:`Document.next_version` and hand the new snapshot back to the caller.
"""

import copy
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from progdedupe.models.records import (
    AssessmentMethod,
    Course,
    CoursePeoLink,
    CoursePiLink,
    CourseSoLink,
    Faculty,
    KnowledgeArea,
    LibraryResource,
    Objective,
    PeoConstituentLink,
    PeoSoLink,
    ProgramEducationalObjective,
    StudentOutcome,
    SubBlock,
    TeachingMethod,
)

STRUCTURE_BLOCKS: tuple[str, ...] = ("gen", "fund", "spec", "grad")

# On-disk location of every list the document models explicitly.
_PATHS: dict[str, tuple[str, ...]] = {
    "library": ("library",),
    "courses": ("courses",),
    "faculties": ("faculties",),
    "knowledge_areas": ("knowledgeAreas",),
    "teaching_methods": ("teachingMethods",),
    "assessment_methods": ("assessmentMethods",),
    "peos": ("peos",),
    "sos": ("sos",),
    "objectives": ("generalInfo", "moetInfo", "specificObjectives"),
    "moet_objectives": ("generalInfo", "moetInfo", "moetSpecificObjectives"),
    "sub_blocks": ("generalInfo", "moetInfo", "subBlocks"),
    "course_so_map": ("courseSoMap",),
    "course_pi_map": ("coursePiMap",),
    "course_peo_map": ("coursePeoMap",),
    "peo_so_map": ("peoSoMap",),
    "peo_constituent_map": ("peoConstituentMap",),
    "course_objective_map": ("generalInfo", "moetInfo", "courseObjectiveMap"),
    "program_structure": ("generalInfo", "moetInfo", "programStructure"),
}

_ROW_TYPES: dict[str, Any] = {
    "library": LibraryResource,
    "courses": Course,
    "faculties": Faculty,
    "knowledge_areas": KnowledgeArea,
    "teaching_methods": TeachingMethod,
    "assessment_methods": AssessmentMethod,
    "peos": ProgramEducationalObjective,
    "sos": StudentOutcome,
    "objectives": Objective,
    "moet_objectives": Objective,
    "sub_blocks": SubBlock,
    "course_so_map": CourseSoLink,
    "course_pi_map": CoursePiLink,
    "course_peo_map": CoursePeoLink,
    "peo_so_map": PeoSoLink,
    "peo_constituent_map": PeoConstituentLink,
}


def _get_path(data: dict[str, Any], path: tuple[str, ...]) -> Any:
    node: Any = data
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _pop_path(data: dict[str, Any], path: tuple[str, ...]) -> None:
    node: Any = data
    for key in path[:-1]:
        node = node.get(key) if isinstance(node, dict) else None
    if isinstance(node, dict):
        node.pop(path[-1], None)


def _set_path(data: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    node = data
    for key in path[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[path[-1]] = value


@dataclass
class Document:
    """Typed snapshot of a program document.

    Attributes
    ----------
    version : int
        Snapshot counter, incremented by every committed operation.
    library, courses, faculties : list
        Primary record collections.
    knowledge_areas, teaching_methods, assessment_methods : list
        Program catalogs referenced from courses.
    peos, sos, objectives, moet_objectives : list
        Outcome definitions.
    sub_blocks : list[SubBlock]
        Elective sub-blocks of the program structure.
    program_structure : dict[str, list[str]]
        Course ids per structure block (gen/fund/spec/grad).
    course_objective_map : list[str]
        Compound ``"<courseId>|<objectiveId>"`` membership keys.
    course_so_map, course_pi_map, course_peo_map, peo_so_map, peo_constituent_map : list
        Join-table rows.
    template : dict[str, Any]
        The source document with every modelled path removed.
    """

    version: int = 0
    library: list[LibraryResource] = field(default_factory=list)
    courses: list[Course] = field(default_factory=list)
    faculties: list[Faculty] = field(default_factory=list)
    knowledge_areas: list[KnowledgeArea] = field(default_factory=list)
    teaching_methods: list[TeachingMethod] = field(default_factory=list)
    assessment_methods: list[AssessmentMethod] = field(default_factory=list)
    peos: list[ProgramEducationalObjective] = field(default_factory=list)
    sos: list[StudentOutcome] = field(default_factory=list)
    objectives: list[Objective] = field(default_factory=list)
    moet_objectives: list[Objective] = field(default_factory=list)
    sub_blocks: list[SubBlock] = field(default_factory=list)
    program_structure: dict[str, list[str]] = field(
        default_factory=lambda: {block: [] for block in STRUCTURE_BLOCKS}
    )
    course_objective_map: list[str] = field(default_factory=list)
    course_so_map: list[CourseSoLink] = field(default_factory=list)
    course_pi_map: list[CoursePiLink] = field(default_factory=list)
    course_peo_map: list[CoursePeoLink] = field(default_factory=list)
    peo_so_map: list[PeoSoLink] = field(default_factory=list)
    peo_constituent_map: list[PeoConstituentLink] = field(default_factory=list)
    template: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, version: int = 0) -> "Document":
        """Build a document from a shape-normalized mapping.

        Parameters
        ----------
        data : dict[str, Any]
            Parsed JSON document (see ``normalize_document``).
        version : int, optional
            Initial snapshot version, by default 0.

        Returns
        -------
        Document
            Typed snapshot.
        """
        template = copy.deepcopy(data)
        for path in _PATHS.values():
            _pop_path(template, path)

        kwargs: dict[str, Any] = {}
        for attr, row_type in _ROW_TYPES.items():
            rows = _get_path(data, _PATHS[attr])
            kwargs[attr] = [row_type.from_dict(row) for row in rows or [] if isinstance(row, dict)]

        raw_structure = _get_path(data, _PATHS["program_structure"]) or {}
        structure = {
            block: [str(cid) for cid in raw_structure.get(block) or []]
            for block in STRUCTURE_BLOCKS
        }
        for block, ids in raw_structure.items():
            if block not in structure:
                structure[block] = [str(cid) for cid in ids or []]

        raw_map = _get_path(data, _PATHS["course_objective_map"]) or []

        return cls(
            version=version,
            program_structure=structure,
            course_objective_map=[str(key) for key in raw_map],
            template=template,
            **kwargs,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the on-disk mapping."""
        data = copy.deepcopy(self.template)
        for attr in _ROW_TYPES:
            _set_path(data, _PATHS[attr], [row.to_dict() for row in getattr(self, attr)])
        _set_path(
            data,
            _PATHS["program_structure"],
            {block: list(ids) for block, ids in self.program_structure.items()},
        )
        _set_path(data, _PATHS["course_objective_map"], list(self.course_objective_map))
        return data

    def next_version(self) -> "Document":
        """Return a deep copy with the version counter advanced.

        The copy is the working value of a mutating operation; the receiver
        stays untouched until the caller swaps in the returned snapshot.
        """
        working = copy.deepcopy(self)
        working.version = self.version + 1
        return working

    # -- collection access -------------------------------------------------

    def records(self, collection: str) -> list[Any]:
        """Return the records of a collection in document order.

        For every collection except ``pis`` this is the live list. ``pis`` is
        a flattened view over the indicators nested in each student outcome.
        """
        if collection == "pis":
            return [pi for so in self.sos for pi in so.pis]
        if collection not in _ROW_TYPES or collection.endswith("_map"):
            raise KeyError(f"Unknown collection: {collection}")
        records: list[Any] = getattr(self, collection)
        return records

    def ids(self, collection: str) -> list[str]:
        """Return record ids of a collection in document order."""
        return [record.id for record in self.records(collection)]

    def find(self, collection: str, record_id: str) -> Any | None:
        """Return the record with ``record_id`` or None."""
        for record in self.records(collection):
            if record.id == record_id:
                return record
        return None

    def add_record(self, collection: str, record: Any) -> None:
        """Append a record to a collection (in place)."""
        if collection == "pis":
            raise KeyError("Performance indicators are added through their student outcome")
        self.records(collection).append(record)

    def replace_record(self, collection: str, record_id: str, record: Any) -> None:
        """Swap the record stored under ``record_id`` (in place)."""
        if collection == "pis":
            for so in self.sos:
                so.pis = [record if pi.id == record_id else pi for pi in so.pis]
            return
        records = self.records(collection)
        records[:] = [record if r.id == record_id else r for r in records]

    def remove_records(self, collection: str, record_ids: Iterable[str]) -> int:
        """Remove records by id (in place).

        Returns
        -------
        int
            Number of records removed.
        """
        doomed = set(record_ids)
        if collection == "pis":
            removed = 0
            for so in self.sos:
                kept = [pi for pi in so.pis if pi.id not in doomed]
                removed += len(so.pis) - len(kept)
                so.pis = kept
            return removed
        records = self.records(collection)
        before = len(records)
        records[:] = [r for r in records if r.id not in doomed]
        return before - len(records)


__all__ = ["Document", "STRUCTURE_BLOCKS"]
