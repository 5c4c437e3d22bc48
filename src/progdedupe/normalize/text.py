"""Text canonicalization for comparison and slug derivation.

This module provides reusable helpers and pre-compiled regex patterns
shared by the similarity scorer, the conflict matcher and the slug rules.
"""

import re
import unicodedata

# Pre-compiled regex patterns
NON_ALNUM_SPACE_RE = re.compile(r"[^a-z0-9\s]")
NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
WHITESPACE_RE = re.compile(r"\s+")
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

__all__ = [
    "strip_accents",
    "normalize_text",
    "compact_alnum",
    "leading_int",
]


def strip_accents(text: str) -> str:
    """Remove combining marks after Unicode decomposition.

    Parameters
    ----------
    text : str
        Input text.

    Returns
    -------
    str
        Text with diacritics removed (``"Nguyễn Văn"`` -> ``"Nguyen Van"``).
    """
    nfd = unicodedata.normalize("NFD", text)
    return "".join(c for c in nfd if unicodedata.category(c) != "Mn")


def normalize_text(text: str | None) -> str:
    """Canonicalize free text for comparison.

    Lower-cases, strips diacritics, removes everything outside
    ``[a-z0-9\\s]`` and trims surrounding whitespace. Inner whitespace is
    kept as-is.

    Parameters
    ----------
    text : str | None
        Raw text. None is treated as empty.

    Returns
    -------
    str
        Normalized text.

    Examples
    --------
    >>> normalize_text("  Giải Tích, Tập 1! ")
    'giai tich tap 1'
    """
    if not text:
        return ""
    folded = strip_accents(text.lower())
    return NON_ALNUM_SPACE_RE.sub("", folded).strip()


def compact_alnum(text: str | None) -> str:
    """Lower-case ASCII letters and digits only, with all separators removed."""
    if not text:
        return ""
    return NON_ALNUM_RE.sub("", strip_accents(text.lower()))


def leading_int(text: str | None, default: int) -> int:
    """Parse the integer a text starts with (``"3 (2+1)"`` -> 3).

    Returns ``default`` when the text has no leading integer or it is zero.
    """
    match = LEADING_INT_RE.match(text or "")
    if match is None:
        return default
    return int(match.group(1)) or default
