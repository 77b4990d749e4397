"""Forward-only schema migrations tracked with ``PRAGMA user_version``.

Version history:

1. Create tables and seed the chart of accounts.
2. Rebuild the provider id index as ``(provider_txn_id, account_id)`` so the
   same provider id may appear on different accounts.
3. Add the granular ``Expenses:Bills:*`` accounts.

All pending steps run in one transaction; a failure leaves the database at
its previous version.
"""

import logging
from typing import Optional

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Connection, Engine

from finledger.database.models import Base, ChartOfAccount
from finledger.database.seed import BILL_ACCOUNT_IDS, STATIC_SEEDS, ChartAccountSeed

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 3


def get_user_version(conn: Connection) -> int:
    return conn.exec_driver_sql("PRAGMA user_version").scalar() or 0


def _set_user_version(conn: Connection, version: int) -> None:
    # PRAGMA does not accept bound parameters
    conn.exec_driver_sql(f"PRAGMA user_version = {int(version)}")


def _seed_rows(seeds: list[ChartAccountSeed]) -> list[dict]:
    return [
        {
            "id": seed.id,
            "name": seed.name,
            "account_type": seed.account_type,
            "parent_id": seed.parent_id,
            "is_placeholder": seed.is_placeholder,
        }
        for seed in seeds
    ]


def insert_missing_accounts(conn: Connection, seeds: list[ChartAccountSeed]) -> None:
    """Insert seed accounts that do not exist yet, leaving others untouched."""
    if not seeds:
        return
    stmt = insert(ChartOfAccount.__table__).prefix_with("OR IGNORE")
    conn.execute(stmt, _seed_rows(seeds))


def _initialize_fresh(conn: Connection, seeds: list[ChartAccountSeed]) -> None:
    Base.metadata.create_all(conn)

    existing = conn.execute(select(func.count()).select_from(ChartOfAccount.__table__)).scalar()
    if existing:
        return
    conn.execute(insert(ChartOfAccount.__table__), _seed_rows(seeds))
    logger.info("Seeded chart of accounts with %d accounts", len(seeds))


def _rebuild_provider_index(conn: Connection) -> None:
    conn.exec_driver_sql("DROP INDEX IF EXISTS idx_postings_provider_txn")
    conn.exec_driver_sql(
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_postings_provider_txn "
        "ON postings(provider_txn_id, account_id) "
        "WHERE provider_txn_id IS NOT NULL"
    )


def _add_bill_accounts(conn: Connection) -> None:
    bills = [seed for seed in STATIC_SEEDS if seed.id in BILL_ACCOUNT_IDS]
    insert_missing_accounts(conn, bills)


def migrate_to_latest(engine: Engine, seeds: Optional[list[ChartAccountSeed]] = None) -> int:
    """Apply pending migrations.

    Args:
        engine: SQLAlchemy engine bound to the ledger database
        seeds: Chart of accounts used when creating a fresh database. Defaults
            to the static seeds (no asset accounts).

    Returns:
        Schema version before migrating
    """
    if seeds is None:
        seeds = list(STATIC_SEEDS)

    with engine.begin() as conn:
        current = get_user_version(conn)
        if current >= SCHEMA_VERSION:
            return current

        logger.info("Migrating database schema from version %d to %d", current, SCHEMA_VERSION)

        if current < 1:
            _initialize_fresh(conn, seeds)
        if current < 2:
            _rebuild_provider_index(conn)
        if current < 3:
            _add_bill_accounts(conn)

        _set_user_version(conn, SCHEMA_VERSION)

    return current
