# -*- coding: utf-8 -*-
"""
Draft repository: synchronous key/value storage for in-progress wizard drafts.
"""

from typing import Optional
from datetime import datetime

from .database import Database
from utils.logger import get_logger

logger = get_logger(__name__)


class DraftRepository:
    """Key/value get, set and delete over the drafts table."""

    def __init__(self, db: Database):
        self.db = db

    def get(self, storage_key: str) -> Optional[str]:
        row = self.db.fetch_one("SELECT payload FROM drafts WHERE storage_key = ?", (storage_key,))
        return row["payload"] if row else None

    def get_updated_at(self, storage_key: str) -> Optional[str]:
        row = self.db.fetch_one("SELECT updated_at FROM drafts WHERE storage_key = ?", (storage_key,))
        return row["updated_at"] if row else None

    def set(self, storage_key: str, payload: str) -> None:
        query = """
            INSERT INTO drafts (storage_key, payload, updated_at) VALUES (?, ?, ?)
            ON CONFLICT (storage_key) DO UPDATE SET
                payload = excluded.payload,
                updated_at = excluded.updated_at
        """
        self.db.execute(query, (storage_key, payload, datetime.now().isoformat()))

    def delete(self, storage_key: str) -> None:
        self.db.execute("DELETE FROM drafts WHERE storage_key = ?", (storage_key,))
        logger.debug(f"Deleted draft: {storage_key}")
