"""Description sanitization commands."""

import click

from finledger.cli.context import ensure_schema, get_config
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.errors import DomainError
from finledger.sanitize.discovery import discover_descriptions, discover_unmapped_descriptions
from finledger.sanitize.migrator import (
    execute_migration,
    execute_recategorize,
    plan_migration,
    plan_recategorize,
)
from finledger.sanitize.rules_loader import RulesService


def format_minor(amount_minor: int) -> str:
    return f"£{amount_minor / 100:,.2f}"


def load_rules(ctx):
    service = RulesService(get_config(ctx))
    rules = service.load()
    if service.load_error:
        click.echo(f"Warning: {service.load_error}", err=True)
    for diagnostic in rules.diagnostics:
        click.echo(
            f"Warning: invalid pattern {diagnostic.pattern!r} for '{diagnostic.target}': {diagnostic.message}",
            err=True,
        )
    return rules


@click.group("sanitize")
def sanitize_group():
    """Inspect and apply description sanitization rules."""
    pass


@sanitize_group.command("discover")
@click.option("--unmapped", is_flag=True, help="Only show descriptions no rule matches")
@click.option("--min", "min_occurrences", type=int, default=1, show_default=True, help="Minimum occurrences")
@click.option("--account", help="Only entries posting to this chart account")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice(["occurrences", "amount", "recent"]),
    default="occurrences",
    show_default=True,
)
@click.option("--limit", type=int, default=500, show_default=True)
@click.pass_context
def discover(ctx, unmapped: bool, min_occurrences: int, account: str | None, sort_by: str, limit: int):
    """List raw descriptions in the ledger, most frequent first.

    Examples:
        fin sanitize discover --unmapped --min 3
        fin sanitize discover --account Assets:Personal:Monzo --sort amount
    """
    db = ctx.obj["db"]
    ensure_schema(ctx)

    try:
        if unmapped:
            summaries = discover_unmapped_descriptions(
                db, load_rules(ctx), min_occurrences, account, limit, sort_by
            )
        else:
            summaries = discover_descriptions(db, min_occurrences, account, limit, sort_by)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not summaries:
        click.echo("No descriptions found.")
        return

    click.echo(f"\n{'COUNT':>5} {'TOTAL':>12}  {'LAST SEEN':<10}  DESCRIPTION")
    click.echo("-" * 80)
    for summary in summaries:
        click.echo(
            f"{summary.occurrences:>5} {format_minor(summary.total_amount_minor):>12}  "
            f"{summary.last_seen[:10]:<10}  {summary.raw_description}"
        )


@sanitize_group.command("migrate")
@click.option("--dry-run", is_flag=True, help="Show changes without writing them")
@click.option("--verbose", "show_changes", is_flag=True, help="List every change")
@click.pass_context
def migrate(ctx, dry_run: bool, show_changes: bool):
    """Apply the current rules to descriptions of existing entries.

    Entries whose description was edited by hand are left alone.
    """
    db = ctx.obj["db"]
    ensure_schema(ctx)
    plan = plan_migration(db, load_rules(ctx))

    if show_changes:
        for candidate in plan.to_update:
            click.echo(f"  {candidate.raw_description} -> {candidate.proposed_clean}")

    result = execute_migration(db, plan, dry_run=dry_run)
    verb = "Would update" if dry_run else "Updated"
    click.echo(f"{verb} {result.updated} entries ({plan.already_clean} already clean, {plan.no_match} unmatched)")
    for entry_id, message in result.errors:
        click.echo(f"  {entry_id}: {message}", err=True)
    if result.errors:
        ctx.exit(1)


@sanitize_group.command("recategorize")
@click.option("--dry-run", is_flag=True, help="Show changes without writing them")
@click.option("--verbose", "show_changes", is_flag=True, help="List every change")
@click.pass_context
def recategorize(ctx, dry_run: bool, show_changes: bool):
    """Move uncategorized expense postings to accounts the rules now imply."""
    db = ctx.obj["db"]
    ensure_schema(ctx)
    plan = plan_recategorize(db, load_rules(ctx))

    if show_changes:
        for candidate in plan.to_update:
            click.echo(
                f"  {candidate.description}: {candidate.current_account_id} -> {candidate.proposed_account_id}"
            )

    result = execute_recategorize(db, plan, dry_run=dry_run)
    verb = "Would move" if dry_run else "Moved"
    click.echo(f"{verb} {result.updated} postings ({plan.no_match} still uncategorized)")
    for posting_id, message in result.errors:
        click.echo(f"  {posting_id}: {message}", err=True)
    if result.errors:
        ctx.exit(1)


def register_commands(cli):
    """Register sanitize commands with main CLI."""
    cli.add_command(sanitize_group)
