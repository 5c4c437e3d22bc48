"""Reference graph: site registry, identifier mappings and the rewrite engine.

Main Components
---------------
- REFERENCE_SITES: every place a record stores another record's key
- IdentifierMapping: old-to-new keys for one collection
- rewrite_references: applies a mapping to every site of a collection
- find_dangling_references / prune_dangling: integrity checks
"""

from progdedupe.graph.integrity import (
    DanglingReference,
    count_references,
    find_dangling_references,
    iter_site_keys,
    prune_dangling,
    prune_record_references,
    target_keys,
)
from progdedupe.graph.mapping import IdentifierMapping, derive_code_mapping
from progdedupe.graph.rewrite import RewriteStats, rewrite_references, rewrite_site
from progdedupe.graph.sites import (
    REFERENCE_SITES,
    ListKind,
    ReferenceSite,
    SiteShape,
    build_reference_sites,
    sites_targeting,
)

__all__ = [
    "REFERENCE_SITES",
    "ReferenceSite",
    "SiteShape",
    "ListKind",
    "build_reference_sites",
    "sites_targeting",
    "IdentifierMapping",
    "derive_code_mapping",
    "RewriteStats",
    "rewrite_references",
    "rewrite_site",
    "DanglingReference",
    "iter_site_keys",
    "target_keys",
    "find_dangling_references",
    "count_references",
    "prune_dangling",
    "prune_record_references",
]
