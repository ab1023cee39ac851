# -*- coding: utf-8 -*-
"""
Company repository for database operations.
"""

import json
from typing import List, Optional
from datetime import datetime

from models.company import Company
from .database import Database
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = [
    name for name in Company.__dataclass_fields__
    if name not in ("created_at", "updated_at")
]


class CompanyRepository:
    """Repository for Company persistence."""

    def __init__(self, db: Database):
        self.db = db

    def upsert(self, company: Company) -> Company:
        """
        Insert a company, or update the existing row with the same slug.

        Returns the stored company (carrying the existing id on update).
        """
        now = datetime.now().isoformat()
        columns = _COLUMNS + ["created_at", "updated_at"]
        updates = ", ".join(
            f"{col} = excluded.{col}" for col in _COLUMNS
            if col not in ("company_id", "slug")
        )
        query = f"""
            INSERT INTO companies ({", ".join(columns)})
            VALUES ({", ".join("?" for _ in columns)})
            ON CONFLICT (slug) DO UPDATE SET {updates}, updated_at = excluded.updated_at
        """
        params = tuple(self._to_param(col, getattr(company, col)) for col in _COLUMNS) + (now, now)
        self.db.execute(query, params)

        stored = self.get_by_slug(company.slug)
        if stored and stored.company_id != company.company_id:
            logger.info(f"Updated existing company '{company.slug}' ({stored.company_id})")
        else:
            logger.debug(f"Created company: {company.slug}")
        return stored or company

    def get_by_id(self, company_id: str) -> Optional[Company]:
        """Get company by ID."""
        row = self.db.fetch_one("SELECT * FROM companies WHERE company_id = ?", (company_id,))
        return self._row_to_company(row) if row else None

    def get_by_slug(self, slug: str) -> Optional[Company]:
        """Get company by slug."""
        row = self.db.fetch_one("SELECT * FROM companies WHERE slug = ?", (slug,))
        return self._row_to_company(row) if row else None

    def get_all(self, limit: int = 100, offset: int = 0) -> List[Company]:
        """Get all companies, newest investment first."""
        query = "SELECT * FROM companies ORDER BY investment_date DESC, name LIMIT ? OFFSET ?"
        return [self._row_to_company(row) for row in self.db.fetch_all(query, (limit, offset))]

    @staticmethod
    def _to_param(column: str, value):
        if column in Company.TAG_FIELDS:
            return json.dumps(list(value or []))
        return value

    def _row_to_company(self, row) -> Company:
        data = row.to_dict()
        for name in Company.TAG_FIELDS:
            value = data.get(name)
            if isinstance(value, str):
                data[name] = json.loads(value) if value else []
            elif value is None:
                data[name] = []
        data["has_pro_rata_rights"] = bool(data.get("has_pro_rata_rights"))
        return Company.from_dict(data)
