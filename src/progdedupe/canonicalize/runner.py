"""Canonicalization pass: readable ids for faculty, library and courses.

For every renamed collection, in dependency order, each record receives a
slug derived from its natural key. Once all collections are slugged the
rewrite engine runs once per collection with its full rename mapping, and a
final sweep prunes every reference that still does not resolve, including
references left dangling by earlier unrelated edits. The sweep is
destructive, which is why the pass refuses to run without confirmation.
"""

from dataclasses import dataclass, field
from typing import Any

from progdedupe.canonicalize.slugs import SLUG_RULES, disambiguate
from progdedupe.graph.integrity import prune_dangling
from progdedupe.graph.mapping import IdentifierMapping
from progdedupe.graph.rewrite import RewriteStats, rewrite_references
from progdedupe.graph.sites import REFERENCE_SITES, ReferenceSite
from progdedupe.models import Document

__all__ = [
    "CanonicalizationNotConfirmed",
    "CanonicalizationReport",
    "plan_canonical_ids",
    "canonicalize_ids",
]


class CanonicalizationNotConfirmed(Exception):
    """Raised when canonicalization is requested without confirmation."""


@dataclass
class CanonicalizationReport:
    """Outcome of a canonicalization pass.

    Attributes
    ----------
    mappings : dict[str, dict[str, str]]
        Old id to new id per collection, for every record of the renamed
        collections (unchanged ids map to themselves).
    renamed : int
        Records whose id changed.
    pruned : int
        Dangling references dropped or cleared by the final sweep.
    version : int
        Version of the resulting document.
    rewrite : RewriteStats
        Counters of the rename rewrite (pruning excluded).
    """

    mappings: dict[str, dict[str, str]] = field(default_factory=dict)
    renamed: int = 0
    pruned: int = 0
    version: int = 0
    rewrite: RewriteStats = field(default_factory=RewriteStats)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "mappings": {name: dict(ids) for name, ids in self.mappings.items()},
            "renamed": self.renamed,
            "pruned": self.pruned,
            "version": self.version,
            "rewrite": self.rewrite.to_dict(),
        }


def plan_canonical_ids(
    document: Document,
    language: str = "en",
    min_slug_length: int = 2,
) -> dict[str, list[tuple[str, str]]]:
    """Compute the new id of every record without changing anything.

    Parameters
    ----------
    document : Document
        Snapshot to plan for.
    language : str, optional
        Language of the faculty name used for slugs, by default "en".
    min_slug_length : int, optional
        Shorter slugs fall back to ``<prefix>-<index>``, by default 2.

    Returns
    -------
    dict[str, list[tuple[str, str]]]
        Per collection, ``(old_id, new_id)`` pairs in record order.
    """
    plan: dict[str, list[tuple[str, str]]] = {}
    for collection, rule in SLUG_RULES.items():
        taken: set[str] = set()
        pairs: list[tuple[str, str]] = []
        for index, record in enumerate(document.records(collection)):
            new_id = disambiguate(rule(record, index, language, min_slug_length), index, taken)
            taken.add(new_id)
            pairs.append((record.id, new_id))
        plan[collection] = pairs
    return plan


def canonicalize_ids(
    document: Document,
    *,
    confirm: bool = False,
    language: str = "en",
    min_slug_length: int = 2,
    sites: tuple[ReferenceSite, ...] = REFERENCE_SITES,
) -> tuple[Document, CanonicalizationReport]:
    """Assign canonical ids and prune dangling references.

    Parameters
    ----------
    document : Document
        Current snapshot (not modified).
    confirm : bool, optional
        Must be True; the pass drops unresolvable references irreversibly.
    language : str, optional
        Language of the faculty name used for slugs, by default "en".
    min_slug_length : int, optional
        Minimum slug length before the positional fallback, by default 2.
    sites : tuple[ReferenceSite, ...], optional
        Site registry.

    Returns
    -------
    tuple[Document, CanonicalizationReport]
        New snapshot and report.

    Raises
    ------
    CanonicalizationNotConfirmed
        If ``confirm`` is not True.
    """
    if confirm is not True:
        raise CanonicalizationNotConfirmed(
            "Canonicalization rewrites ids and drops dangling references; pass confirm=True"
        )

    plan = plan_canonical_ids(document, language, min_slug_length)

    working = document.next_version()
    report = CanonicalizationReport()

    for collection, pairs in plan.items():
        for record, (_, new_id) in zip(working.records(collection), pairs, strict=True):
            record.id = new_id
        # A duplicated old id keeps the rename of its first record.
        renames: dict[str, str] = {}
        for old_id, new_id in pairs:
            renames.setdefault(old_id, new_id)
        report.mappings[collection] = renames
        report.renamed += sum(1 for old_id, new_id in pairs if old_id != new_id)

    # Ids are renamed in place, codes are untouched: only id-keyed sites change.
    for collection in plan:
        changed: dict[str, str | None] = {
            old: new for old, new in report.mappings[collection].items() if old != new
        }
        if changed:
            mapping = IdentifierMapping(collection=collection, ids=changed)
            report.rewrite.merge(rewrite_references(working, mapping, sites))

    report.pruned = prune_dangling(working, sites).removed
    report.version = working.version
    return working, report
