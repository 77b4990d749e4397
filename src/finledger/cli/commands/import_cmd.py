"""Inbox import command."""

import json
from dataclasses import asdict

import click

from finledger.cli.context import get_config
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.entities import ImportResult
from finledger.domain.errors import DomainError
from finledger.domain.inbox_import import DEFAULT_ARCHIVE_DIR, DEFAULT_INBOX_DIR, InboxImportService

UNMAPPED_SHOWN = 10


def print_import_result(result: ImportResult) -> None:
    click.echo("\nImport complete:")
    click.echo(f"  Processed: {len(result.processed_files)} file(s)")
    click.echo(f"  Skipped: {len(result.skipped_files)} file(s)")
    for skipped in result.skipped_files:
        click.echo(f"    {skipped.path}: {skipped.reason}")

    click.echo(
        f"  Transactions: {result.total_transactions} total, "
        f"{result.unique_transactions} new, {result.duplicate_transactions} duplicates"
    )
    click.echo(
        f"  Journal entries: {result.journal_entries_created}/{result.journal_entries_attempted} created "
        f"({result.transfer_pairs_created} transfers)"
    )
    if result.accounts_touched:
        click.echo(f"  Accounts touched: {', '.join(result.accounts_touched)}")

    if result.entry_errors:
        click.echo(f"  Errors: {len(result.entry_errors)}")
        for error in result.entry_errors:
            click.echo(f"    {error}", err=True)

    if result.unmapped_descriptions:
        click.echo(f"\nUnmapped descriptions ({len(result.unmapped_descriptions)}):")
        for description in result.unmapped_descriptions[:UNMAPPED_SHOWN]:
            click.echo(f"  {description}")
        remaining = len(result.unmapped_descriptions) - UNMAPPED_SHOWN
        if remaining > 0:
            click.echo(f"  ... and {remaining} more")

    if result.archived_files:
        click.echo(f"\nArchived {len(result.archived_files)} file(s)")


@click.command("import")
@click.option("--inbox", type=click.Path(file_okay=False), default=str(DEFAULT_INBOX_DIR), show_default=True)
@click.option("--archive", type=click.Path(file_okay=False), default=str(DEFAULT_ARCHIVE_DIR), show_default=True)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format",
)
@click.option("--no-migrate", is_flag=True, help="Do not migrate the database schema first")
@click.pass_context
def import_inbox(ctx, inbox: str, archive: str, output_format: str, no_migrate: bool):
    """Import bank statements from the inbox.

    Each folder under the inbox is mapped to an account by its
    ``inbox_folder`` setting. Imported files are moved to a dated folder
    under the archive.

    Examples:
        fin import
        fin import --inbox ~/Downloads/statements --format json
    """
    db = ctx.obj["db"]
    config = get_config(ctx)
    service = InboxImportService(db, config)

    try:
        result = service.import_inbox(inbox, archive, migrate=not no_migrate)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if output_format == "json":
        click.echo(json.dumps(asdict(result), indent=2))
    else:
        print_import_result(result)

    if result.entry_errors:
        ctx.exit(1)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_inbox)
