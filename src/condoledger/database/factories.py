"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from condoledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks CONDOLEDGER_DB_PATH
            environment variable, then defaults to ~/.condoledger/condoledger.db.
            ":memory:" gives a throwaway in-memory database.

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("CONDOLEDGER_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".condoledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "condoledger.db")

    if database_path == ":memory:":
        return SQLAlchemyDatabase("sqlite://")
    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
