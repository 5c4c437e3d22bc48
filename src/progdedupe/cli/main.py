"""Command-line interface for progdedupe.

Provides CLI commands for scanning, merging, canonicalizing and importing
records of a program document.
"""

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

import click

from progdedupe.audit import get_package_version

if TYPE_CHECKING:
    from progdedupe.engine import Workspace

__all__ = ["cli"]

__version__ = get_package_version()

_SCANNABLE = ("library", "courses", "faculties")
_KINDS = ("course", "faculty", "library")
_RESOLUTIONS = {"overwrite": "overwrite", "new": "create_new", "cancel": "cancel"}

document_argument = click.argument("document", type=click.Path(exists=True, dir_okay=False))
output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the result here instead of overwriting DOCUMENT",
)
events_option = click.option(
    "--events",
    type=click.Path(dir_okay=False),
    default=None,
    help="Append audit events to this JSONL file",
)


def _open(document: str, events: str | None = None, **settings: Any) -> "Workspace":
    from progdedupe.engine import EngineConfig, Workspace

    config = EngineConfig(events_path=Path(events) if events else None, **settings)
    return Workspace.open(document, config=config)


def _fail(e: Exception) -> NoReturn:
    click.secho(f"Error: {e}", fg="red", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="progdedupe")
def cli() -> None:
    """Reference integrity and deduplication for academic program documents.

    Use 'progdedupe COMMAND --help' for command-specific help.
    """


@cli.command()
@document_argument
@click.option(
    "--collection",
    "-c",
    type=click.Choice(_SCANNABLE),
    default="library",
    show_default=True,
    help="Collection to scan",
)
@click.option(
    "--threshold",
    type=float,
    default=0.7,
    show_default=True,
    help="Primary similarity a candidate must exceed",
)
@click.option(
    "--gate-threshold",
    type=float,
    default=0.5,
    show_default=True,
    help="Minimum secondary-field similarity",
)
@click.option(
    "--gate-policy",
    type=click.Choice(["lenient", "strict"]),
    default="lenient",
    show_default=True,
    help="Treatment of an empty secondary field",
)
@click.option("--language", default="en", show_default=True, help="Language of localized names")
@click.option("--json", "as_json", is_flag=True, help="Print clusters as JSON")
@events_option
def scan(
    document: str,
    collection: str,
    threshold: float,
    gate_threshold: float,
    gate_policy: str,
    language: str,
    as_json: bool,
    events: str | None,
) -> None:
    """Scan a collection of DOCUMENT for near-duplicate records.

    Examples
    --------
        progdedupe scan program.json
        progdedupe scan program.json -c faculties --gate-policy strict
    """
    try:
        with _open(
            document,
            events,
            similarity_threshold=threshold,
            gate_threshold=gate_threshold,
            gate_policy=gate_policy,
            language=language,
        ) as workspace:
            clusters = workspace.scan(collection)
            suggestions = {
                cluster.cluster_id: workspace.suggest_survivor(collection, cluster.record_ids)
                for cluster in clusters
            }
    except Exception as e:
        _fail(e)

    if as_json:
        payload = [
            cluster.to_dict() | {"suggested_survivor": suggestions[cluster.cluster_id]}
            for cluster in clusters
        ]
        click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not clusters:
        click.secho(f"✓ No duplicates found in {collection}", fg="green")
        return

    click.echo(f"Found {len(clusters)} duplicate cluster(s) in {collection}:")
    for cluster in clusters:
        suggested = suggestions[cluster.cluster_id]
        click.echo(f"\n{cluster.cluster_id} ({len(cluster)} records)")
        for member in cluster.members:
            marker = "*" if member.record_id == suggested else " "
            click.echo(f"  {marker} {member.record_id}  {member.primary}  [{member.score:.2f}]")
    click.echo("\n* suggested survivor")


@cli.command()
@document_argument
@click.argument("members", nargs=-1, required=True)
@click.option("--collection", "-c", required=True, help="Collection of the cluster")
@click.option("--survivor", "-s", required=True, help="Id of the record to keep")
@output_option
@events_option
def merge(
    document: str,
    members: tuple[str, ...],
    collection: str,
    survivor: str,
    output: str | None,
    events: str | None,
) -> None:
    """Merge duplicate MEMBERS of DOCUMENT into one survivor.

    Every reference to a removed member is redirected to the survivor.

    Examples
    --------
        progdedupe merge program.json -c library -s lib-1 lib-1 lib-7
    """
    try:
        with _open(document, events) as workspace:
            report = workspace.merge(collection, list(members), survivor)
            workspace.save(output or document)
    except Exception as e:
        _fail(e)

    if report.noop:
        click.echo("Nothing to merge")
        return
    click.secho(
        f"✓ Merged {len(report.removed_ids)} record(s) into {report.survivor_id} "
        f"({report.rewrite.rewritten} reference(s) rewritten, "
        f"{report.rewrite.deduplicated} duplicate(s) collapsed)",
        fg="green",
    )


@cli.command()
@document_argument
@click.argument("record_ids", nargs=-1, required=True)
@click.option("--collection", "-c", required=True, help="Collection to delete from")
@output_option
@events_option
def delete(
    document: str,
    record_ids: tuple[str, ...],
    collection: str,
    output: str | None,
    events: str | None,
) -> None:
    """Delete RECORD_IDS from DOCUMENT and clear every reference to them."""
    try:
        with _open(document, events) as workspace:
            report = workspace.delete(collection, list(record_ids))
            workspace.save(output or document)
    except Exception as e:
        _fail(e)

    click.secho(
        f"✓ Deleted {len(report.deleted_ids)} record(s) "
        f"({report.rewrite.removed} reference(s) removed)",
        fg="green",
    )


@cli.command()
@document_argument
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.option("--min-slug-length", type=int, default=2, show_default=True)
@click.option("--language", default="en", show_default=True, help="Language of faculty names")
@output_option
@events_option
def canonicalize(
    document: str,
    yes: bool,
    min_slug_length: int,
    language: str,
    output: str | None,
    events: str | None,
) -> None:
    """Rename faculty, library and course ids to readable slugs.

    Every reference is rewritten and dangling references are dropped. The
    pass rewrites most ids of the document, so it asks for confirmation
    unless --yes is given.
    """
    from progdedupe.canonicalize import plan_canonical_ids

    try:
        workspace = _open(
            document, events, min_slug_length=min_slug_length, language=language
        )
    except Exception as e:
        _fail(e)

    with workspace:
        plan = plan_canonical_ids(workspace.document, language, min_slug_length)
        changes = sum(1 for pairs in plan.values() for old, new in pairs if old != new)
        click.echo(f"{changes} record id(s) will change:")
        for collection, pairs in plan.items():
            renamed = sum(1 for old, new in pairs if old != new)
            click.echo(f"  {collection}: {renamed}/{len(pairs)}")
        if not yes:
            click.confirm("Rewrite all ids and references?", abort=True)
        try:
            report = workspace.canonicalize(confirm=True)
            workspace.save(output or document)
        except Exception as e:
            _fail(e)

    click.secho(
        f"✓ Renamed {report.renamed} record(s), pruned {report.pruned} dangling reference(s)",
        fg="green",
    )


@cli.command("import-record")
@document_argument
@click.argument("record_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--kind", "-k", type=click.Choice(_KINDS), required=True, help="Record kind")
@click.option(
    "--resolution",
    type=click.Choice(["overwrite", "new"]),
    default=None,
    help="Answer to a conflict; prompts when omitted",
)
@output_option
@events_option
def import_record(
    document: str,
    record_json: str,
    kind: str,
    resolution: str | None,
    output: str | None,
    events: str | None,
) -> None:
    """Import the record in RECORD_JSON into DOCUMENT.

    An incoming record that matches an existing one by id or by name is a
    conflict: it is either overwritten (keeping the existing id and
    protected fields), inserted under a new id, or cancelled.
    """
    from progdedupe.conflicts import ImportStatus

    try:
        data = json.loads(Path(record_json).read_text(encoding="utf-8-sig"))
        workspace = _open(document, events)
    except Exception as e:
        _fail(e)

    with workspace:
        try:
            result = workspace.import_record(kind, data)
        except Exception as e:
            _fail(e)

        if result.conflict is not None:
            conflict = result.conflict
            click.echo(
                f"Conflict: incoming {kind} matches {conflict.existing.id} "
                f"(by {conflict.match_reason.value})"
            )
            answer = resolution or click.prompt(
                "Resolve",
                type=click.Choice(list(_RESOLUTIONS)),
                default="cancel",
            )
            try:
                result = workspace.resolve(conflict, _RESOLUTIONS[answer])
            except Exception as e:
                _fail(e)

        if result.status is ImportStatus.CANCELLED:
            click.echo("Import cancelled, document unchanged")
            return

        try:
            workspace.save(output or document)
        except Exception as e:
            _fail(e)

    click.secho(f"✓ {result.status.value.capitalize()} {kind} {result.record_id}", fg="green")
    if result.pruned:
        click.echo(f"  {result.pruned} reference(s) to missing records dropped")


@cli.command()
@document_argument
@click.option("--json", "as_json", is_flag=True, help="Print findings as JSON")
def check(document: str, as_json: bool) -> None:
    """Report references in DOCUMENT that do not resolve.

    Exits with status 1 when any dangling reference is found.
    """
    try:
        with _open(document) as workspace:
            dangling = workspace.check()
    except Exception as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([ref.to_dict() for ref in dangling], ensure_ascii=False, indent=2))
    elif not dangling:
        click.secho("✓ All references resolve", fg="green")
    else:
        for ref in dangling:
            click.echo(f"{ref.site}: {ref.value!r} not found in {ref.target} ({ref.key_field})")
        click.secho(f"✗ {len(dangling)} dangling reference(s)", fg="red", err=True)

    if dangling:
        sys.exit(1)


@cli.command("export-catalog")
@document_argument
@click.option("--output", "-o", type=click.Path(dir_okay=False), required=True, help="CSV path")
def export_catalog(document: str, output: str) -> None:
    """Export the course catalog of DOCUMENT as CSV."""
    from progdedupe.tabular import write_catalog

    try:
        with _open(document) as workspace:
            count = write_catalog(workspace.document, Path(output))
    except Exception as e:
        _fail(e)

    click.secho(f"✓ Exported {count} course(s) to {output}", fg="green")


@cli.command("import-catalog")
@document_argument
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@output_option
@events_option
def import_catalog(document: str, csv_path: str, output: str | None, events: str | None) -> None:
    """Apply the course catalog in CSV_PATH to DOCUMENT.

    Existing courses get their catalog fields replaced by id; rows with a
    new id are appended. Syllabus content is kept.
    """
    from progdedupe.tabular import read_catalog

    try:
        text = read_catalog(Path(csv_path))
        with _open(document, events) as workspace:
            report = workspace.import_catalog(text)
            workspace.save(output or document)
    except Exception as e:
        _fail(e)

    click.secho(
        f"✓ Updated {len(report.updated_ids)} course(s), added {len(report.added_ids)}",
        fg="green",
    )
    if report.legacy_rows:
        click.echo(f"  {report.legacy_rows} row(s) read in the layout without a Type column")


if __name__ == "__main__":
    cli()
