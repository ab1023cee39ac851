# -*- coding: utf-8 -*-
"""
Database facade used by repositories.

Wraps a ``DatabaseAdapter`` so repositories do not care whether SQLite or
PostgreSQL is in use. ``Database(db_path=...)`` forces SQLite, which is what
tests use.

Statements commit one by one; the submission pipeline relies on that to
keep whatever it wrote before a failing step.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from repositories.db_adapter import (
    DatabaseAdapter,
    DatabaseFactory,
    DatabaseType,
    RowProxy,
    SQLiteAdapter,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """Thin wrapper around the configured DatabaseAdapter."""

    def __init__(self, db_path: Optional[Path] = None, adapter: Optional[DatabaseAdapter] = None):
        """
        Args:
            db_path: SQLite file; forces SQLite when given
            adapter: Pre-built adapter (takes precedence over db_path)
        """
        if adapter is not None:
            self._adapter = adapter
        elif db_path is not None:
            self._adapter = SQLiteAdapter(db_path)
            self._adapter.connect()
        else:
            self._adapter = DatabaseFactory.create()

    @property
    def db_path(self) -> Optional[Path]:
        """SQLite file path, None on PostgreSQL."""
        if isinstance(self._adapter, SQLiteAdapter):
            return self._adapter.db_path
        return None

    @property
    def db_type(self) -> DatabaseType:
        return self._adapter.db_type

    def initialize(self) -> None:
        """Create tables if they do not exist."""
        self._adapter.initialize()

    def execute(self, query: str, params: Sequence = ()) -> List[RowProxy]:
        return self._adapter.execute(query, params)

    def fetch_one(self, query: str, params: Sequence = ()) -> Optional[RowProxy]:
        return self._adapter.fetch_one(query, params)

    def fetch_all(self, query: str, params: Sequence = ()) -> List[RowProxy]:
        return self._adapter.fetch_all(query, params)

    def close(self) -> None:
        self._adapter.close()

    def is_empty(self) -> bool:
        """True until the first company is recorded."""
        result = self.fetch_one("SELECT COUNT(*) AS count FROM companies")
        return result["count"] == 0 if result else True


def get_database() -> Database:
    """Database for the configured backend, with tables created."""
    db = Database()
    db.initialize()
    return db
