"""Identifier mappings handed to the rewrite engine.

A mapping is keyed by the *old* key of every record being retired and
gives its replacement key, or None when the record is deleted outright.
Merges produce many-to-one mappings, canonicalization one-to-one renames
and deletions map everything to None.

Course requisite lists store course *codes*, not ids. For collections that
are referenced by code, :meth:`IdentifierMapping.build` derives the matching
code mapping from the records before they change.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from progdedupe.graph.sites import REFERENCE_SITES, ReferenceSite, sites_targeting
from progdedupe.models import Document

__all__ = ["IdentifierMapping", "derive_code_mapping"]


def derive_code_mapping(
    records: Iterable[Any],
    ids: Mapping[str, str | None],
) -> dict[str, str | None]:
    """Translate an id mapping into a code mapping.

    Parameters
    ----------
    records : Iterable[Any]
        Records of the collection *before* the mutation; replacement ids
        are looked up among them.
    ids : Mapping[str, str | None]
        Old id to replacement id (None for deletion).

    Returns
    -------
    dict[str, str | None]
        Old code to replacement code. Codes still carried by a record that
        is not being retired are left out, as are codes that do not change.
    """
    records = list(records)
    by_id = {record.id: record for record in records}
    surviving_codes = {record.code for record in records if record.id not in ids and record.code}

    codes: dict[str, str | None] = {}
    for old_id, new_id in ids.items():
        old = by_id.get(old_id)
        if old is None or not old.code or old.code in surviving_codes:
            continue
        replacement = by_id.get(new_id) if new_id is not None else None
        new_code = replacement.code if replacement is not None and replacement.code else None
        if new_code == old.code:
            continue
        codes.setdefault(old.code, new_code)
    return codes


@dataclass
class IdentifierMapping:
    """Old-to-new key mapping for one collection.

    Attributes
    ----------
    collection : str
        Collection whose records are retired.
    ids : dict[str, str | None]
        Old id to new id; None marks a deletion.
    codes : dict[str, str | None]
        Old code to new code for sites keyed by ``code``.
    """

    collection: str
    ids: dict[str, str | None]
    codes: dict[str, str | None] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        document: Document,
        collection: str,
        ids: Mapping[str, str | None],
        sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
    ) -> "IdentifierMapping":
        """Build a mapping, deriving codes from ``document`` where needed.

        Parameters
        ----------
        document : Document
            Snapshot *before* the retired records change.
        collection : str
            Collection whose records are retired.
        ids : Mapping[str, str | None]
            Old id to new id.
        sites : tuple[ReferenceSite, ...], optional
            Site registry.

        Returns
        -------
        IdentifierMapping
            Mapping ready for :func:`~progdedupe.graph.rewrite.rewrite_references`.
        """
        codes: dict[str, str | None] = {}
        if any(site.key_field == "code" for site in sites_targeting(collection, sites)):
            codes = derive_code_mapping(document.records(collection), ids)
        return cls(collection=collection, ids=dict(ids), codes=codes)

    @classmethod
    def merge(
        cls,
        document: Document,
        collection: str,
        retired: Iterable[str],
        survivor: str,
        sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
    ) -> "IdentifierMapping":
        """Many-to-one mapping sending every retired id to ``survivor``."""
        return cls.build(document, collection, {old: survivor for old in retired}, sites)

    @classmethod
    def deletion(
        cls,
        document: Document,
        collection: str,
        deleted: Iterable[str],
        sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
    ) -> "IdentifierMapping":
        """Mapping that clears every reference to the deleted ids."""
        return cls.build(document, collection, {old: None for old in deleted}, sites)

    @property
    def retired(self) -> frozenset[str]:
        return frozenset(self.ids)

    def for_site(self, site: ReferenceSite) -> dict[str, str | None]:
        """Key mapping applicable to a site."""
        return self.codes if site.key_field == "code" else self.ids

    def __bool__(self) -> bool:
        return bool(self.ids or self.codes)
