"""Shared per-invocation state for CLI commands."""

import click

from finledger.cli.error_handling import handle_domain_error
from finledger.config import FinConfig, load_config
from finledger.database.seed import get_chart_of_accounts_seeds
from finledger.domain.errors import DomainError


def get_config(ctx: click.Context) -> FinConfig:
    """Load the configuration once per invocation, exiting on failure."""
    obj = ctx.find_root().obj
    if obj.get("config") is None:
        try:
            obj["config"] = load_config(obj.get("config_path"))
        except DomainError as e:
            handle_domain_error(ctx, e)
    return obj["config"]


def ensure_schema(ctx: click.Context) -> None:
    """Migrate the database and sync seed accounts from the configuration."""
    db = ctx.find_root().obj["db"]
    db.initialize_schema(get_chart_of_accounts_seeds(get_config(ctx).accounts))
