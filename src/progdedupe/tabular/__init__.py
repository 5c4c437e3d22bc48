"""Tabular interchange of the course catalog."""

from progdedupe.tabular.catalog import (
    CATALOG_HEADER,
    CatalogImportReport,
    export_catalog,
    import_catalog,
    parse_catalog,
    read_catalog,
    write_catalog,
)

__all__ = [
    "CATALOG_HEADER",
    "CatalogImportReport",
    "export_catalog",
    "write_catalog",
    "read_catalog",
    "parse_catalog",
    "import_catalog",
]
