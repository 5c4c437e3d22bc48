"""Read-only reference checks and dangling-reference pruning."""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from progdedupe.graph.rewrite import RewriteStats, rewrite_site
from progdedupe.graph.sites import (
    REFERENCE_SITES,
    ListKind,
    ReferenceSite,
    SiteShape,
    read_slot,
    sites_targeting,
)
from progdedupe.models import Document

__all__ = [
    "DanglingReference",
    "iter_site_keys",
    "target_keys",
    "find_dangling_references",
    "count_references",
    "prune_dangling",
    "prune_record_references",
]


@dataclass(frozen=True)
class DanglingReference:
    """A stored key with no matching record.

    Attributes
    ----------
    site : str
        Site name.
    target : str
        Referenced collection.
    key_field : str
        Target field the key dereferences.
    value : str
        The unresolved key.
    """

    site: str
    target: str
    key_field: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "site": self.site,
            "target": self.target,
            "key_field": self.key_field,
            "value": self.value,
        }


def iter_site_keys(document: Document, site: ReferenceSite) -> Iterator[str]:
    """Yield every key stored at a site, in document order.

    Empty scalar values mean "no reference" and are skipped.
    """
    for slot in site.locate(document):
        value = read_slot(slot)
        if value is None:
            continue
        if site.shape is SiteShape.SCALAR:
            if value:
                yield value
        elif site.shape is SiteShape.COMPOUND:
            for entry in value:
                parts = entry.split(site.separator)
                if len(parts) > site.component:
                    yield parts[site.component]
        elif site.list_kind is ListKind.ROWS:
            for row in value:
                yield getattr(row, site.element_field or "id")
        else:
            # Plain key lists and mappings keyed by id iterate the same way.
            yield from value


def target_keys(document: Document, collection: str, key_field: str = "id") -> set[str]:
    """Keys (ids or codes) currently carried by a collection's records."""
    return {getattr(record, key_field) for record in document.records(collection)}


def find_dangling_references(
    document: Document,
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> list[DanglingReference]:
    """List every stored key that does not resolve in its target collection.

    Parameters
    ----------
    document : Document
        Snapshot to check (not modified).
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    list[DanglingReference]
        Unresolved keys in registry then document order.
    """
    valid_cache: dict[tuple[str, str], set[str]] = {}
    dangling: list[DanglingReference] = []
    for site in sites:
        cache_key = (site.target, site.key_field)
        if cache_key not in valid_cache:
            valid_cache[cache_key] = target_keys(document, site.target, site.key_field)
        valid = valid_cache[cache_key]
        for value in iter_site_keys(document, site):
            if value not in valid:
                dangling.append(DanglingReference(site.name, site.target, site.key_field, value))
    return dangling


def count_references(
    document: Document,
    collection: str,
    record_id: str,
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> int:
    """Count the site entries pointing at one record.

    Parameters
    ----------
    document : Document
        Snapshot to inspect.
    collection : str
        Collection of the record.
    record_id : str
        Record id.
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    int
        Number of entries, over every site targeting the collection. Sites
        keyed by code count entries holding the record's code. Zero if the
        record does not exist.
    """
    record = document.find(collection, record_id)
    if record is None:
        return 0
    total = 0
    for site in sites_targeting(collection, sites):
        key = getattr(record, site.key_field)
        if not key:
            continue
        total += sum(1 for value in iter_site_keys(document, site) if value == key)
    return total


def prune_dangling(
    document: Document,
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> RewriteStats:
    """Drop or clear every unresolvable key (in place).

    Parameters
    ----------
    document : Document
        Working document.
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    RewriteStats
        ``removed`` counts pruned entries.
    """
    stats = RewriteStats()
    for site in sites:
        valid = target_keys(document, site.target, site.key_field)
        dangling = {value for value in iter_site_keys(document, site) if value not in valid}
        if dangling:
            rewrite_site(document, site, dict.fromkeys(dangling), stats)
    return stats


def prune_record_references(
    document: Document,
    collection: str,
    record_id: str,
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> RewriteStats:
    """Drop or clear the unresolvable keys held by one record (in place).

    Only sites owned by ``collection`` are visited, and only their slots on
    the given record; references elsewhere in the document are left alone.

    Parameters
    ----------
    document : Document
        Working document containing the record.
    collection : str
        Collection of the record.
    record_id : str
        Record whose references are checked.
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    RewriteStats
        ``removed`` counts pruned entries.
    """
    stats = RewriteStats()
    record = document.find(collection, record_id)
    if record is None:
        return stats
    scope = Document(**{collection: [record]})
    for site in sites:
        if site.owner != collection:
            continue
        valid = target_keys(document, site.target, site.key_field)
        dangling = {value for value in iter_site_keys(scope, site) if value not in valid}
        if dangling:
            rewrite_site(scope, site, dict.fromkeys(dangling), stats)
    return stats
