"""Tests for reference sites, identifier mappings and the rewrite engine."""

from collections.abc import Callable
from typing import Any

import pytest

from progdedupe.graph import (
    REFERENCE_SITES,
    IdentifierMapping,
    RewriteStats,
    build_reference_sites,
    count_references,
    derive_code_mapping,
    find_dangling_references,
    prune_dangling,
    rewrite_references,
    sites_targeting,
)
from progdedupe.models import Course, Document

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_every_site_targets_a_managed_collection(program: Document) -> None:
    for site in REFERENCE_SITES:
        program.records(site.target)


@pytest.mark.unit
def test_requisite_sites_are_keyed_by_code() -> None:
    by_code = [site.name for site in REFERENCE_SITES if site.key_field == "code"]

    assert by_code == ["course.prerequisites", "course.coRequisites"]


@pytest.mark.unit
def test_sites_targeting_library() -> None:
    names = [site.name for site in sites_targeting("library")]

    assert names == ["course.textbooks[].resourceId", "course.topics[].readingRefs[].resourceId"]


# ---------------------------------------------------------------------------
# derive_code_mapping
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_code_mapping_follows_replacement_record() -> None:
    records = [Course(id="C1", code="CS101"), Course(id="C2", code="CS101B")]

    assert derive_code_mapping(records, {"C2": "C1"}) == {"CS101B": "CS101"}


@pytest.mark.unit
def test_code_mapping_skips_codes_still_in_use() -> None:
    records = [Course(id="C1", code="CS101"), Course(id="C2", code="CS101")]

    assert derive_code_mapping(records, {"C2": "C1"}) == {}


@pytest.mark.unit
def test_code_mapping_for_deletion_is_none() -> None:
    records = [Course(id="C1", code="CS101"), Course(id="C2", code="CS201")]

    assert derive_code_mapping(records, {"C1": None}) == {"CS101": None}


# ---------------------------------------------------------------------------
# rewrite_references
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_merge_mapping_rewrites_and_collapses_textbooks(program: Document) -> None:
    mapping = IdentifierMapping.merge(program, "library", ["lib-2"], "lib-1")

    stats = rewrite_references(program, mapping)

    c1, c2 = program.courses
    assert [t.resource_id for t in c1.textbooks] == ["lib-1"]
    assert c1.topics[0].reading_refs[0].resource_id == "lib-1"
    assert c1.topics[0].reading_refs[0].page_range == "1-10"
    assert [t.resource_id for t in c2.textbooks] == ["lib-1"]
    assert stats.rewritten == 3
    assert stats.deduplicated == 1
    assert stats.removed == 0


@pytest.mark.unit
def test_first_occurrence_wins_on_collapse(program: Document) -> None:
    """The surviving textbook row keeps its original position and fields."""
    mapping = IdentifierMapping.merge(program, "library", ["lib-1"], "lib-2")

    rewrite_references(program, mapping)

    textbooks = program.courses[0].textbooks
    assert len(textbooks) == 1
    assert textbooks[0].resource_id == "lib-2"
    assert textbooks[0].title == "Introduction to Algorithms"


@pytest.mark.unit
def test_deletion_clears_lists_and_mapping_keys(program: Document) -> None:
    mapping = IdentifierMapping.deletion(program, "faculties", ["fac-2"])

    stats = rewrite_references(program, mapping)

    c1, c2 = program.courses
    assert c1.instructor_ids == ["fac-1"]
    assert list(c1.instructor_details) == ["fac-1"]
    assert c2.instructor_ids == []
    assert stats.removed == 3


@pytest.mark.unit
def test_deletion_clears_scalars(program: Document) -> None:
    mapping = IdentifierMapping.deletion(program, "teaching_methods", ["TM1"])

    rewrite_references(program, mapping)

    course = program.courses[0]
    assert course.topics[0].activities[0].method_id == ""
    assert course.topics[0].activities[0].hours == 2
    assert course.clo_map[0].teaching_method_ids == []


@pytest.mark.unit
def test_course_merge_rewrites_every_course_site(program: Document) -> None:
    mapping = IdentifierMapping.merge(program, "courses", ["C2"], "C1")

    rewrite_references(program, mapping)

    assert program.program_structure["gen"] == ["C1"]
    assert program.program_structure["fund"] == ["C1"]
    assert program.sub_blocks[0].course_ids == ["C1"]
    assert program.course_objective_map == ["C1|OBJ1"]


@pytest.mark.unit
def test_course_merge_rewrites_requisite_codes(
    program_data: dict[str, Any], make_document: Callable[..., Document]
) -> None:
    program_data["courses"].append(
        {"id": "C3", "code": "CS301", "name": "Algorithms", "prerequisites": ["CS201", "CS101"]}
    )
    document = make_document(**program_data)
    mapping = IdentifierMapping.merge(document, "courses", ["C2"], "C1")

    rewrite_references(document, mapping)

    assert mapping.codes == {"CS201": "CS101"}
    assert document.courses[2].prerequisites == ["CS101"]


@pytest.mark.unit
def test_join_rows_deduplicate_on_full_key(
    program_data: dict[str, Any], make_document: Callable[..., Document]
) -> None:
    program_data["courseSoMap"] = [
        {"courseId": "C1", "soId": "SO1", "level": "H"},
        {"courseId": "C2", "soId": "SO1", "level": "H"},
        {"courseId": "C2", "soId": "SO1", "level": "M"},
    ]
    document = make_document(**program_data)
    mapping = IdentifierMapping.merge(document, "courses", ["C2"], "C1")

    rewrite_references(document, mapping)

    rows = [(r.course_id, r.so_id, r.level) for r in document.course_so_map]
    assert rows == [("C1", "SO1", "H"), ("C1", "SO1", "M")]


@pytest.mark.unit
def test_compound_separator_is_configurable(
    program_data: dict[str, Any], make_document: Callable[..., Document]
) -> None:
    program_data["generalInfo"]["moetInfo"]["courseObjectiveMap"] = ["C2;OBJ1"]
    document = make_document(**program_data)
    sites = build_reference_sites(";")
    mapping = IdentifierMapping.merge(document, "courses", ["C2"], "C1", sites)

    rewrite_references(document, mapping, sites)

    assert document.course_objective_map == ["C1;OBJ1"]


@pytest.mark.unit
def test_performance_indicators_are_rewritten(program: Document) -> None:
    mapping = IdentifierMapping.deletion(program, "pis", ["PI1.1"])

    rewrite_references(program, mapping)

    assert program.course_pi_map == []
    assert program.courses[0].clo_map[0].pi_ids == []


@pytest.mark.unit
def test_rewrite_stats_merge() -> None:
    total = RewriteStats(rewritten=1, by_site={"a": 1})
    total.merge(RewriteStats(removed=2, by_site={"a": 1, "b": 1}))

    assert total.changed == 3
    assert total.by_site == {"a": 2, "b": 1}


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_clean_document_has_no_dangling_references(program: Document) -> None:
    assert find_dangling_references(program) == []


@pytest.mark.unit
def test_dangling_references_are_reported(
    program_data: dict[str, Any], make_document: Callable[..., Document]
) -> None:
    program_data["courses"][1]["prerequisites"] = ["CS999"]
    program_data["courses"][1]["knowledgeAreaId"] = "KA9"
    document = make_document(**program_data)

    dangling = {(ref.site, ref.value, ref.key_field) for ref in find_dangling_references(document)}

    assert dangling == {
        ("course.prerequisites", "CS999", "code"),
        ("course.knowledgeAreaId", "KA9", "id"),
    }


@pytest.mark.unit
def test_empty_scalar_is_not_dangling(
    program_data: dict[str, Any], make_document: Callable[..., Document]
) -> None:
    program_data["courses"][0]["knowledgeAreaId"] = ""

    assert find_dangling_references(make_document(**program_data)) == []


@pytest.mark.unit
def test_count_references(program: Document) -> None:
    assert count_references(program, "library", "lib-2") == 3
    assert count_references(program, "library", "lib-1") == 1
    assert count_references(program, "library", "lib-3") == 0
    assert count_references(program, "library", "missing") == 0


@pytest.mark.unit
def test_count_references_includes_codes(program: Document) -> None:
    # gen block, courseSoMap, coursePiMap, coursePeoMap, objective map, C2 prerequisite
    assert count_references(program, "courses", "C1") == 6


@pytest.mark.unit
def test_prune_dangling(
    program_data: dict[str, Any], make_document: Callable[..., Document]
) -> None:
    program_data["courses"][0]["instructorIds"] = ["fac-1", "ghost"]
    program_data["courses"][0]["instructorDetails"]["ghost"] = {}
    program_data["courses"][0]["assessmentPlan"][0]["methodId"] = "AM9"
    document = make_document(**program_data)

    stats = prune_dangling(document)

    course = document.courses[0]
    assert course.instructor_ids == ["fac-1"]
    assert "ghost" not in course.instructor_details
    assert course.assessment_plan[0].method_id == ""
    assert stats.removed == 3
    assert find_dangling_references(document) == []
