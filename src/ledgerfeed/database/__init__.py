"""Database layer for ledgerfeed application."""

from ledgerfeed.database.base import Database
from ledgerfeed.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
