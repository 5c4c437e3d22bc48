"""Slug rules for canonical identifiers.

Each rule derives a readable id from a record's natural key and falls back
to ``<prefix>-<index>`` when the slug comes out empty or too short.
"""

import re
from collections.abc import Callable
from typing import Any

from progdedupe.normalize.text import compact_alnum, normalize_text, strip_accents

_COURSE_INVALID_RE = re.compile(r"[^A-Z0-9-]")
_WHITESPACE_RE = re.compile(r"\s+")

FACULTY_NAME_CHARS = 10
LIBRARY_TITLE_CHARS = 40

SlugRule = Callable[[Any, int, str, int], str]


def course_slug(record: Any, index: int, language: str = "en", min_length: int = 2) -> str:
    """Course id from its catalog code.

    Examples
    --------
    ``" cs 101 "`` -> ``"CS-101"``; a code reducing to fewer than
    ``min_length`` characters -> ``"CID-<index>"``.
    """
    code = strip_accents(record.code.strip()).upper()
    slug = _COURSE_INVALID_RE.sub("", _WHITESPACE_RE.sub("-", code))
    if len(slug) < min_length:
        return f"CID-{index}"
    return slug


def faculty_slug(record: Any, index: int, language: str = "en", min_length: int = 2) -> str:
    """Faculty id from the first characters of the name in ``language``.

    Examples
    --------
    ``"Nguyễn Văn An"`` -> ``"fac-nguyenvana"``.
    """
    name = record.name.get(language) or next((v for v in record.name.values() if v), "")
    safe = compact_alnum(name)[:FACULTY_NAME_CHARS]
    if len(safe) < min_length:
        return f"fac-{index}"
    return f"fac-{safe}"


def library_slug(record: Any, index: int, language: str = "en", min_length: int = 2) -> str:
    """Library id from the title words joined by dashes.

    Examples
    --------
    ``"Introduction to Algorithms"`` -> ``"lib-introduction-to-algorithms"``.
    """
    words = normalize_text(record.title).split()
    slug = "-".join(words)[:LIBRARY_TITLE_CHARS].rstrip("-")
    if len(slug) < min_length:
        return f"lib-{index}"
    return f"lib-{slug}"


# Collections renamed by canonicalization, independent collections first.
SLUG_RULES: dict[str, SlugRule] = {
    "faculties": faculty_slug,
    "library": library_slug,
    "courses": course_slug,
}


def disambiguate(base: str, index: int, taken: set[str]) -> str:
    """Make ``base`` unique against ``taken`` with a positional suffix.

    Parameters
    ----------
    base : str
        Derived slug.
    index : int
        Position of the record in its collection.
    taken : set[str]
        Ids already assigned in this pass.

    Returns
    -------
    str
        ``base`` if free, else ``base_<index>``, else ``base_<index>_<n>``
        with the smallest free ``n >= 2``.
    """
    if base not in taken:
        return base
    candidate = f"{base}_{index}"
    counter = 1
    while candidate in taken:
        counter += 1
        candidate = f"{base}_{index}_{counter}"
    return candidate
