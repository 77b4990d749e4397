"""Database layer for finledger."""

from finledger.database.base import Database
from finledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
