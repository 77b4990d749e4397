"""Chart of accounts commands."""

import click

from finledger.cli.context import ensure_schema

ACCOUNT_TYPES = ["asset", "liability", "equity", "income", "expense"]


@click.command("accounts")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="Only list this account type")
@click.pass_context
def list_accounts(ctx, account_type: str | None):
    """List the chart of accounts.

    Examples:
        fin accounts
        fin accounts --type expense
    """
    db = ctx.obj["db"]
    ensure_schema(ctx)

    accounts = db.list_chart_accounts(account_type)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nChart of accounts:")
    click.echo("-" * 60)
    for acc in accounts:
        depth = acc.id.count(":")
        marker = " (placeholder)" if acc.is_placeholder else ""
        click.echo(f"{'  ' * depth}{acc.id:<{50 - 2 * depth}} {acc.account_type}{marker}")


def register_commands(cli):
    """Register accounts command with main CLI."""
    cli.add_command(list_accounts)
