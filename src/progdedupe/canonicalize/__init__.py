"""Canonical identifier assignment."""

from progdedupe.canonicalize.runner import (
    CanonicalizationNotConfirmed,
    CanonicalizationReport,
    canonicalize_ids,
    plan_canonical_ids,
)
from progdedupe.canonicalize.slugs import (
    SLUG_RULES,
    course_slug,
    disambiguate,
    faculty_slug,
    library_slug,
)

__all__ = [
    "canonicalize_ids",
    "plan_canonical_ids",
    "CanonicalizationNotConfirmed",
    "CanonicalizationReport",
    "SLUG_RULES",
    "course_slug",
    "faculty_slug",
    "library_slug",
    "disambiguate",
]
