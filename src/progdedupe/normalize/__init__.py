"""Text and document-shape normalization.

Main Components
---------------
- normalize_text: canonical comparison form of free text
- normalize_document: fills defaults on an incoming program document
"""

from progdedupe.normalize.document_shape import normalize_course, normalize_document
from progdedupe.normalize.text import compact_alnum, leading_int, normalize_text, strip_accents

__all__ = [
    "normalize_text",
    "strip_accents",
    "compact_alnum",
    "leading_int",
    "normalize_document",
    "normalize_course",
]
