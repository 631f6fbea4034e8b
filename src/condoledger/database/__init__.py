"""Database layer for condoledger application."""

from condoledger.database.base import Database
from condoledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
