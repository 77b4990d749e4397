"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from finledger.database.sqlalchemy_db import SQLAlchemyDatabase

DB_ENV_VAR = "FIN_DB_PATH"
DEFAULT_DB_PATH = Path("data") / "fin.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FIN_DB_PATH
            environment variable, then defaults to data/fin.db under the
            working directory

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get(DB_ENV_VAR)

    if database_path is None:
        database_path = str(Path.cwd() / DEFAULT_DB_PATH)

    Path(database_path).parent.mkdir(parents=True, exist_ok=True)

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
