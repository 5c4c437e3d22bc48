"""Edit-distance similarity between free-text fields.

The score is ``(L - d) / L`` where ``d`` is the Levenshtein distance of the
normalized strings and ``L`` the length of the longer one. Scores are
bounded to ``[0, 1]`` and symmetric in their arguments.
"""

from rapidfuzz.distance import Levenshtein

from progdedupe.normalize.text import normalize_text

__all__ = ["similarity", "normalized_similarity"]


def normalized_similarity(a: str, b: str) -> float:
    """Score two strings that are already normalized.

    Parameters
    ----------
    a : str
        First normalized string.
    b : str
        Second normalized string.

    Returns
    -------
    float
        1.0 if both are empty or equal, 0.0 if exactly one is empty,
        otherwise the length-scaled Levenshtein similarity.
    """
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    longest = max(len(a), len(b))
    distance = Levenshtein.distance(a, b)
    return (longest - distance) / longest


def similarity(a: str | None, b: str | None) -> float:
    """Normalize two raw strings and score them.

    Parameters
    ----------
    a : str | None
        First raw string.
    b : str | None
        Second raw string.

    Returns
    -------
    float
        Similarity in ``[0, 1]``.

    Examples
    --------
    >>> similarity("Giải tích", "giai tich")
    1.0
    >>> similarity("", "")
    1.0
    """
    return normalized_similarity(normalize_text(a), normalize_text(b))
