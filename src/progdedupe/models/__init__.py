"""Shared data types for progdedupe.

This package contains the record dataclasses, the document snapshot, the
collection registry and document validation consumed across the engine.

Domain-specific types live closer to their consumers:
- Reference sites → progdedupe.graph.sites
- Merge reports → progdedupe.merge.models
"""

from progdedupe.models.collections import (
    COLLECTIONS,
    RECORD_KINDS,
    CollectionSpec,
    collection_for_kind,
    get_collection,
)
from progdedupe.models.document import STRUCTURE_BLOCKS, Document
from progdedupe.models.identifiers import mint_id, now_ms
from progdedupe.models.records import (
    COURSE_TYPES,
    LANGUAGES,
    AssessmentItem,
    AssessmentMethod,
    CloMapping,
    Course,
    CoursePeoLink,
    CoursePiLink,
    CourseSoLink,
    CourseTopic,
    Faculty,
    KnowledgeArea,
    LibraryResource,
    LocalizedString,
    Objective,
    PeoConstituentLink,
    PeoSoLink,
    PerformanceIndicator,
    ProgramEducationalObjective,
    StudentOutcome,
    SubBlock,
    TeachingMethod,
    Textbook,
    TopicActivity,
    TopicReading,
    localized,
)
from progdedupe.models.validation import DocumentError, validate_document, validate_record

__all__ = [
    # Records
    "LocalizedString",
    "LANGUAGES",
    "COURSE_TYPES",
    "localized",
    "LibraryResource",
    "Course",
    "Textbook",
    "TopicActivity",
    "TopicReading",
    "CourseTopic",
    "AssessmentItem",
    "CloMapping",
    "Faculty",
    "KnowledgeArea",
    "TeachingMethod",
    "AssessmentMethod",
    "ProgramEducationalObjective",
    "PerformanceIndicator",
    "StudentOutcome",
    "Objective",
    "SubBlock",
    "CourseSoLink",
    "CoursePiLink",
    "CoursePeoLink",
    "PeoSoLink",
    "PeoConstituentLink",
    # Document
    "Document",
    "STRUCTURE_BLOCKS",
    # Collections
    "COLLECTIONS",
    "RECORD_KINDS",
    "CollectionSpec",
    "get_collection",
    "collection_for_kind",
    # Identifiers
    "mint_id",
    "now_ms",
    # Validation
    "DocumentError",
    "validate_document",
    "validate_record",
]
