"""Rewrite engine: apply an identifier mapping to every reference site.

Per site shape:

- SCALAR: a retired value is replaced by its mapped value, or cleared to
  the empty string when it maps to None.
- LIST: every element is mapped (unmapped elements pass through), elements
  mapping to None are dropped, then the list is deduplicated keeping the
  first occurrence. Mappings keyed by id are the exception: when a
  redirected key lands on a key already present, the existing entry wins.
- COMPOUND: the configured component of each key is mapped; keys whose
  component maps to None are dropped; the key list is then deduplicated.

The engine mutates the document it is given. Callers pass a working copy
(:meth:`Document.next_version`) so a half-applied rewrite is never visible.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from progdedupe.graph.mapping import IdentifierMapping
from progdedupe.graph.sites import (
    REFERENCE_SITES,
    ListKind,
    ReferenceSite,
    SiteShape,
    Slot,
    read_slot,
    sites_targeting,
    write_slot,
)
from progdedupe.models import Document

__all__ = ["RewriteStats", "rewrite_references", "rewrite_site"]

KeyMap = Mapping[str, str | None]


@dataclass
class RewriteStats:
    """Counters of one rewrite.

    Attributes
    ----------
    rewritten : int
        Entries whose key was replaced.
    removed : int
        Entries dropped or cleared because their key maps to None.
    deduplicated : int
        Entries dropped as duplicates after mapping.
    by_site : dict[str, int]
        Changed entries (all three kinds) per site name.
    """

    rewritten: int = 0
    removed: int = 0
    deduplicated: int = 0
    by_site: dict[str, int] = field(default_factory=dict)

    @property
    def changed(self) -> int:
        return self.rewritten + self.removed + self.deduplicated

    def merge(self, other: "RewriteStats") -> None:
        """Accumulate another set of counters into this one."""
        self.rewritten += other.rewritten
        self.removed += other.removed
        self.deduplicated += other.deduplicated
        for name, count in other.by_site.items():
            self.by_site[name] = self.by_site.get(name, 0) + count

    def to_dict(self) -> dict[str, object]:
        return {
            "rewritten": self.rewritten,
            "removed": self.removed,
            "deduplicated": self.deduplicated,
            "by_site": dict(self.by_site),
        }


class _Tracker:
    """Per-site counters feeding a :class:`RewriteStats`."""

    def __init__(self, stats: RewriteStats, site: ReferenceSite) -> None:
        self.stats = stats
        self.site = site

    def _bump(self) -> None:
        self.stats.by_site[self.site.name] = self.stats.by_site.get(self.site.name, 0) + 1

    def rewritten(self) -> None:
        self.stats.rewritten += 1
        self._bump()

    def removed(self) -> None:
        self.stats.removed += 1
        self._bump()

    def deduplicated(self) -> None:
        self.stats.deduplicated += 1
        self._bump()


def _map_key(value: str, key_map: KeyMap, tracker: _Tracker) -> str | None:
    """Map one key; None means the entry must go."""
    if value not in key_map:
        return value
    replacement = key_map[value]
    if replacement is None:
        tracker.removed()
        return None
    if replacement != value:
        tracker.rewritten()
    return replacement


def _rewrite_scalar(slot: Slot, key_map: KeyMap, tracker: _Tracker) -> None:
    value = read_slot(slot)
    if not value or value not in key_map:
        return
    replacement = _map_key(value, key_map, tracker)
    write_slot(slot, "" if replacement is None else replacement)


def _rewrite_keys(slot: Slot, key_map: KeyMap, tracker: _Tracker) -> None:
    values = read_slot(slot)
    if values is None:
        return
    result: list[str] = []
    seen: set[str] = set()
    for value in values:
        mapped = _map_key(value, key_map, tracker)
        if mapped is None:
            continue
        if mapped in seen:
            tracker.deduplicated()
            continue
        seen.add(mapped)
        result.append(mapped)
    write_slot(slot, result)


def _rewrite_rows(site: ReferenceSite, slot: Slot, key_map: KeyMap, tracker: _Tracker) -> None:
    rows = read_slot(slot)
    if rows is None:
        return
    element_field = site.element_field or "id"
    dedupe_fields = site.dedupe_fields or (element_field,)
    result = []
    seen: set[tuple[object, ...]] = set()
    for row in rows:
        mapped = _map_key(getattr(row, element_field), key_map, tracker)
        if mapped is None:
            continue
        setattr(row, element_field, mapped)
        row_key = tuple(getattr(row, name) for name in dedupe_fields)
        if row_key in seen:
            tracker.deduplicated()
            continue
        seen.add(row_key)
        result.append(row)
    write_slot(slot, result)


def _rewrite_mapping_keys(slot: Slot, key_map: KeyMap, tracker: _Tracker) -> None:
    entries = read_slot(slot)
    if entries is None:
        return
    result = {}
    # Keys present under their own name; their value beats a redirected one.
    own: set[str] = set()
    for key, value in entries.items():
        mapped = _map_key(key, key_map, tracker)
        if mapped is None:
            continue
        if mapped in result:
            tracker.deduplicated()
            if mapped == key and mapped not in own:
                result[mapped] = value
                own.add(mapped)
            continue
        result[mapped] = value
        if mapped == key:
            own.add(mapped)
    write_slot(slot, result)


def _rewrite_compound(site: ReferenceSite, slot: Slot, key_map: KeyMap, tracker: _Tracker) -> None:
    entries = read_slot(slot)
    if entries is None:
        return
    result: list[str] = []
    seen: set[str] = set()
    for entry in entries:
        parts = entry.split(site.separator)
        if len(parts) > site.component:
            mapped = _map_key(parts[site.component], key_map, tracker)
            if mapped is None:
                continue
            parts[site.component] = mapped
            entry = site.separator.join(parts)
        if entry in seen:
            tracker.deduplicated()
            continue
        seen.add(entry)
        result.append(entry)
    write_slot(slot, result)


def rewrite_site(
    document: Document,
    site: ReferenceSite,
    key_map: KeyMap,
    stats: RewriteStats | None = None,
) -> RewriteStats:
    """Apply a key mapping to every slot of one site (in place).

    Parameters
    ----------
    document : Document
        Working document.
    site : ReferenceSite
        Site to rewrite.
    key_map : Mapping[str, str | None]
        Old key to new key; None drops or clears the entry.
    stats : RewriteStats | None, optional
        Counters to accumulate into.

    Returns
    -------
    RewriteStats
        The (possibly shared) counters.
    """
    if stats is None:
        stats = RewriteStats()
    tracker = _Tracker(stats, site)

    for slot in list(site.locate(document)):
        if site.shape is SiteShape.SCALAR:
            _rewrite_scalar(slot, key_map, tracker)
        elif site.shape is SiteShape.COMPOUND:
            _rewrite_compound(site, slot, key_map, tracker)
        elif site.list_kind is ListKind.ROWS:
            _rewrite_rows(site, slot, key_map, tracker)
        elif site.list_kind is ListKind.MAPPING_KEYS:
            _rewrite_mapping_keys(slot, key_map, tracker)
        else:
            _rewrite_keys(slot, key_map, tracker)
    return stats


def rewrite_references(
    document: Document,
    mapping: IdentifierMapping,
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> RewriteStats:
    """Rewrite every site that targets the mapping's collection (in place).

    Parameters
    ----------
    document : Document
        Working document.
    mapping : IdentifierMapping
        Keys being retired and their replacements.
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    RewriteStats
        Counters over all visited sites.
    """
    stats = RewriteStats()
    for site in sites_targeting(mapping.collection, sites):
        key_map = mapping.for_site(site)
        if key_map:
            rewrite_site(document, site, key_map, stats)
    return stats
