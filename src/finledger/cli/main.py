"""Main CLI entry point."""

import logging

import click

from finledger.cli.commands import accounts, import_cmd, sanitize
from finledger.database.factories import create_sqlite_database


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FIN_DB_PATH environment variable)",
    envvar="FIN_DB_PATH",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    help="Path to fin.config.toml (overrides FIN_CONFIG_PATH environment variable)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, config_path: str | None, verbose: bool):
    """Fin - personal double-entry ledger.

    Import Monzo, Wise and Vanguard statements from an inbox folder into a
    SQLite ledger, and keep descriptions tidy with sanitization rules.
    """
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config_path
    ctx.obj.setdefault("config", None)

    # Only open the database when a command runs (not for --help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


accounts.register_commands(cli)
import_cmd.register_commands(cli)
sanitize.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
