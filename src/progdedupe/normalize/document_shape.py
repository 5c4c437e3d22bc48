"""Shape normalization for incoming program documents.

Older or hand-edited documents omit arrays, carry credits as strings and
predate the ABET flag. ``normalize_document`` fills those gaps so the typed
models can be built without duck-typing at every read site.
"""

import copy
from typing import Any

from progdedupe.models.document import STRUCTURE_BLOCKS
from progdedupe.normalize.text import leading_int

__all__ = ["normalize_document", "normalize_course"]

_TOP_LEVEL_LISTS = (
    "library",
    "courses",
    "faculties",
    "knowledgeAreas",
    "teachingMethods",
    "assessmentMethods",
    "peos",
    "sos",
    "courseSoMap",
    "coursePiMap",
    "coursePeoMap",
    "peoSoMap",
    "peoConstituentMap",
)

_COURSE_LISTS = (
    "prerequisites",
    "coRequisites",
    "textbooks",
    "topics",
    "assessmentPlan",
    "instructorIds",
)


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value or default
    return leading_int(value if isinstance(value, str) else "", default)


def normalize_course(course: dict[str, Any]) -> dict[str, Any]:
    """Fill defaults on one raw course mapping (returns a new mapping).

    Semesters written as text (``"HK1"``, ``"2 (spring)"``) keep their
    leading number or fall back to 1.
    """
    result = dict(course)
    credits = course.get("credits")
    numeric = isinstance(credits, int | float) and not isinstance(credits, bool)
    result["credits"] = credits if numeric else 0
    result["semester"] = _as_int(course.get("semester"), 1)
    result["colIndex"] = _as_int(course.get("colIndex"), 0)
    if not isinstance(course.get("clos"), dict):
        result["clos"] = {}
    result["isEssential"] = bool(course.get("isEssential"))
    # Documents written before the ABET flag existed treat essential courses as in scope.
    if course.get("isAbet") is None:
        result["isAbet"] = result["isEssential"]
    if not isinstance(course.get("instructorDetails"), dict):
        result["instructorDetails"] = {}
    for key in _COURSE_LISTS:
        result[key] = _as_list(course.get(key))
    result["cloMap"] = [
        {**mapping, "piIds": _as_list(mapping.get("piIds"))}
        for mapping in _as_list(course.get("cloMap"))
        if isinstance(mapping, dict)
    ]
    return result


def normalize_document(data: dict[str, Any]) -> dict[str, Any]:
    """Fill missing arrays and defaults on a parsed program document.

    Parameters
    ----------
    data : dict[str, Any]
        Parsed JSON document. Not modified.

    Returns
    -------
    dict[str, Any]
        Normalized copy. Keys the engine does not model are kept as-is.

    Notes
    -----
    Course defaults: numeric ``credits`` (0 when missing or non-numeric),
    integer ``semester`` (leading number, else 1), a ``clos`` mapping,
    boolean ``isEssential``, ``isAbet`` derived from ``isEssential`` when
    absent, an ``instructorDetails`` mapping and a ``piIds`` list on every
    ``cloMap`` entry.
    """
    result = copy.deepcopy(data)

    for key in _TOP_LEVEL_LISTS:
        result[key] = _as_list(result.get(key))

    result["courses"] = [normalize_course(c) for c in result["courses"] if isinstance(c, dict)]

    general = result.get("generalInfo")
    if not isinstance(general, dict):
        general = {}
    moet = general.get("moetInfo")
    if not isinstance(moet, dict):
        moet = {}
    structure = moet.get("programStructure")
    if not isinstance(structure, dict):
        structure = {}
    for block in STRUCTURE_BLOCKS:
        structure[block] = _as_list(structure.get(block))
    moet["programStructure"] = structure
    for key in ("specificObjectives", "moetSpecificObjectives", "subBlocks", "courseObjectiveMap"):
        moet[key] = _as_list(moet.get(key))
    general["moetInfo"] = moet
    result["generalInfo"] = general

    return result
