"""Registry of managed record collections.

Each :class:`CollectionSpec` names a collection of the program document and
how its records are identified: the prefix for freshly minted ids, the
text fields used for duplicate scanning, and the localized name fields used
for import-time matching.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from progdedupe.models.records import LANGUAGES


def _localized_texts(attr: str) -> Callable[[Any], list[str]]:
    def texts(record: Any) -> list[str]:
        value = getattr(record, attr)
        return [value.get(lang, "") for lang in LANGUAGES]

    return texts


def _localized_text(attr: str) -> Callable[[Any, str], str]:
    def text(record: Any, language: str) -> str:
        value = getattr(record, attr)
        return value.get(language) or next((v for v in value.values() if v), "")

    return text


@dataclass(frozen=True)
class CollectionSpec:
    """Identification rules for one collection.

    Attributes
    ----------
    name : str
        Collection name as used by :class:`~progdedupe.models.document.Document`.
    id_prefix : str | None
        Prefix of freshly minted ids, None when ids are never minted.
    primary_text : Callable[[Any, str], str] | None
        Primary comparison field for duplicate scanning, given the record
        and the display language. None when the collection is not scanned.
    secondary_text : Callable[[Any, str], str] | None
        Secondary (gate) comparison field.
    match_texts : Callable[[Any], list[str]]
        Natural-name fields compared by normalized equality on import.
    """

    name: str
    id_prefix: str | None = None
    primary_text: Callable[[Any, str], str] | None = None
    secondary_text: Callable[[Any, str], str] | None = None
    match_texts: Callable[[Any], list[str]] = lambda record: []

    @property
    def scannable(self) -> bool:
        return self.primary_text is not None


COLLECTIONS: dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec(
            name="library",
            id_prefix="lib",
            primary_text=lambda r, _lang: r.title,
            secondary_text=lambda r, _lang: r.author,
            match_texts=lambda r: [r.title],
        ),
        CollectionSpec(
            name="courses",
            id_prefix="CID",
            primary_text=_localized_text("name"),
            secondary_text=lambda r, _lang: r.code,
            match_texts=_localized_texts("name"),
        ),
        CollectionSpec(
            name="faculties",
            id_prefix="fac",
            primary_text=_localized_text("name"),
            secondary_text=lambda r, _lang: r.email,
            match_texts=_localized_texts("name"),
        ),
        CollectionSpec(
            name="knowledge_areas", id_prefix="KA", match_texts=_localized_texts("name")
        ),
        CollectionSpec(name="teaching_methods", match_texts=_localized_texts("name")),
        CollectionSpec(name="assessment_methods", match_texts=_localized_texts("name")),
        CollectionSpec(name="peos", match_texts=_localized_texts("title")),
        CollectionSpec(name="sos"),
        CollectionSpec(name="pis"),
        CollectionSpec(name="objectives"),
        CollectionSpec(name="moet_objectives"),
        CollectionSpec(name="sub_blocks", id_prefix="sb", match_texts=_localized_texts("name")),
    )
}

# Record kinds accepted by single-record import, mapped to their collection.
RECORD_KINDS: dict[str, str] = {
    "course": "courses",
    "faculty": "faculties",
    "library": "library",
}


def get_collection(name: str) -> CollectionSpec:
    """Look up a collection by name.

    Raises
    ------
    KeyError
        If the collection is not managed.
    """
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise KeyError(f"Unknown collection: {name}") from None


def collection_for_kind(kind: str) -> str:
    """Map an import record kind (``course``, ``faculty``, ``library``) to its collection."""
    try:
        return RECORD_KINDS[kind]
    except KeyError:
        raise KeyError(f"Unknown record kind: {kind}") from None
