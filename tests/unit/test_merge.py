"""Tests for cluster merge, cascading deletion and survivor suggestion."""

from collections.abc import Callable
from typing import Any

import pytest

from progdedupe.graph import find_dangling_references
from progdedupe.merge import (
    MergeError,
    compute_completeness_score,
    delete_records,
    merge_cluster,
    suggest_survivor,
)
from progdedupe.models import Document, LibraryResource

# ---------------------------------------------------------------------------
# merge_cluster
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_merge_removes_members_and_redirects_references(program: Document) -> None:
    merged, report = merge_cluster(program, "library", ["lib-1", "lib-2"], "lib-1")

    assert merged.ids("library") == ["lib-1", "lib-3"]
    assert report.survivor_id == "lib-1"
    assert report.removed_ids == ["lib-2"]
    assert [t.resource_id for t in merged.courses[0].textbooks] == ["lib-1"]
    assert [t.resource_id for t in merged.courses[1].textbooks] == ["lib-1"]
    assert find_dangling_references(merged) == []


@pytest.mark.unit
def test_merge_does_not_modify_input(program: Document) -> None:
    before = program.to_dict()

    merged, report = merge_cluster(program, "library", ["lib-1", "lib-2"], "lib-2")

    assert program.to_dict() == before
    assert program.version == 0
    assert merged.version == 1
    assert report.version == 1


@pytest.mark.unit
def test_merge_survivor_keeps_its_own_content(program: Document) -> None:
    merged, _ = merge_cluster(program, "library", ["lib-1", "lib-2"], "lib-2")

    survivor = merged.find("library", "lib-2")
    assert survivor is not None
    assert survivor.title == "Introduction to Algorithms, 3rd Ed."
    assert survivor.author == "T. H. Cormen"


@pytest.mark.unit
def test_merge_faculty_collapses_instructor_details(program: Document) -> None:
    merged, report = merge_cluster(program, "faculties", ["fac-1", "fac-2"], "fac-1")

    c1, c2 = merged.courses
    assert c1.instructor_ids == ["fac-1"]
    assert c1.instructor_details == {"fac-1": {"classId": "CS101.1"}}
    assert c2.instructor_ids == ["fac-1"]
    assert report.rewrite.deduplicated == 2


@pytest.mark.unit
def test_merge_keeps_survivor_instructor_details_when_listed_later(
    program_data: dict[str, Any],
    make_document: Callable[..., Document],
) -> None:
    """The survivor's own class details win over a redirected member's."""
    program_data["courses"][0]["instructorDetails"] = {
        "fac-2": {"classId": "CS101.2"},
        "fac-1": {"classId": "CS101.1"},
    }
    document = make_document(**program_data)

    merged, _ = merge_cluster(document, "faculties", ["fac-1", "fac-2"], "fac-1")

    assert merged.courses[0].instructor_details == {"fac-1": {"classId": "CS101.1"}}


@pytest.mark.unit
def test_merge_into_later_member_keeps_its_details(program: Document) -> None:
    merged, _ = merge_cluster(program, "faculties", ["fac-1", "fac-2"], "fac-2")

    assert merged.courses[0].instructor_details == {"fac-2": {"classId": "CS101.2"}}
    assert merged.courses[0].instructor_ids == ["fac-2"]


@pytest.mark.unit
def test_merge_courses_rewrites_structure_and_codes(
    program_data: dict[str, Any],
    make_document: Callable[..., Document],
    make_course: Callable[..., dict[str, Any]],
) -> None:
    program_data["courses"].append(
        make_course("C3", "CS301", "Algorithms", prerequisites=["CS201"])
    )
    document = make_document(**program_data)

    merged, _ = merge_cluster(document, "courses", ["C2", "C1"], "C1")

    assert merged.ids("courses") == ["C1", "C3"]
    assert merged.program_structure["fund"] == ["C1"]
    assert merged.sub_blocks[0].course_ids == ["C1"]
    assert merged.course_objective_map == ["C1|OBJ1"]
    assert merged.courses[1].prerequisites == ["CS101"]
    assert find_dangling_references(merged) == []


@pytest.mark.unit
def test_merge_single_member_is_noop(program: Document) -> None:
    merged, report = merge_cluster(program, "library", ["lib-1"], "lib-1")

    assert merged is program
    assert report.noop
    assert report.version == 0


@pytest.mark.unit
def test_merge_duplicate_member_ids_are_ignored(program: Document) -> None:
    merged, report = merge_cluster(program, "library", ["lib-2", "lib-2", "lib-1"], "lib-1")

    assert report.removed_ids == ["lib-2"]
    assert merged.ids("library") == ["lib-1", "lib-3"]


@pytest.mark.unit
def test_merge_survivor_outside_cluster_is_rejected(program: Document) -> None:
    with pytest.raises(MergeError, match="not a member"):
        merge_cluster(program, "library", ["lib-1", "lib-2"], "lib-3")


@pytest.mark.unit
def test_merge_missing_member_is_rejected(program: Document) -> None:
    with pytest.raises(MergeError, match="not found"):
        merge_cluster(program, "library", ["lib-1", "lib-9"], "lib-1")


@pytest.mark.unit
def test_merge_unknown_collection_is_rejected(program: Document) -> None:
    with pytest.raises(MergeError, match="Unknown collection"):
        merge_cluster(program, "journals", ["a", "b"], "a")


@pytest.mark.unit
def test_merge_error_is_value_error() -> None:
    assert issubclass(MergeError, ValueError)


@pytest.mark.unit
def test_merge_report_to_dict(program: Document) -> None:
    _, report = merge_cluster(program, "library", ["lib-1", "lib-2"], "lib-1")

    data = report.to_dict()

    assert data["collection"] == "library"
    assert data["removed_ids"] == ["lib-2"]
    assert data["rewrite"]["rewritten"] == 3


# ---------------------------------------------------------------------------
# delete_records
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_delete_cascades(program: Document) -> None:
    remaining, report = delete_records(program, "library", ["lib-2"])

    assert remaining.ids("library") == ["lib-1", "lib-3"]
    assert [t.resource_id for t in remaining.courses[0].textbooks] == ["lib-1"]
    assert remaining.courses[0].topics[0].reading_refs[0].resource_id == ""
    assert remaining.courses[1].textbooks == []
    assert report.deleted_ids == ["lib-2"]
    assert report.rewrite.removed == 3


@pytest.mark.unit
def test_delete_course_drops_requisite_codes(program: Document) -> None:
    remaining, _ = delete_records(program, "courses", ["C1"])

    assert remaining.courses[0].prerequisites == []
    assert remaining.program_structure["gen"] == []
    assert remaining.course_so_map == []
    assert remaining.course_objective_map == ["C2|OBJ1"]
    assert find_dangling_references(remaining) == []


@pytest.mark.unit
def test_delete_missing_record_is_rejected(program: Document) -> None:
    with pytest.raises(MergeError, match="not found"):
        delete_records(program, "library", ["lib-9"])


# ---------------------------------------------------------------------------
# Survivor suggestion
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_completeness_counts_populated_fields() -> None:
    sparse = LibraryResource(id="a", title="T")
    rich = LibraryResource(id="b", title="T", author="A", publisher="P", year="2009")

    assert compute_completeness_score(rich) > compute_completeness_score(sparse)


@pytest.mark.unit
def test_suggest_survivor_prefers_most_referenced(program: Document) -> None:
    assert suggest_survivor(program, "library", ["lib-1", "lib-2"]) == "lib-2"


@pytest.mark.unit
def test_suggest_survivor_prefers_complete_record(
    make_document: Callable[..., Document], make_resource: Callable[..., dict[str, Any]]
) -> None:
    document = make_document(
        library=[
            make_resource("a", "Compilers"),
            make_resource("b", "Compilers", "Alfred Aho", publisher="Pearson"),
        ]
    )

    assert suggest_survivor(document, "library", ["a", "b"]) == "b"


@pytest.mark.unit
def test_suggest_survivor_tie_breaks_on_id(
    make_document: Callable[..., Document], make_resource: Callable[..., dict[str, Any]]
) -> None:
    document = make_document(
        library=[make_resource("b", "Compilers"), make_resource("a", "Compilers")]
    )

    assert suggest_survivor(document, "library", ["b", "a"]) == "a"


@pytest.mark.unit
def test_suggest_survivor_empty_cluster(program: Document) -> None:
    with pytest.raises(ValueError, match="empty"):
        suggest_survivor(program, "library", [])
