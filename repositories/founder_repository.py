# -*- coding: utf-8 -*-
"""
Founder repository for database operations.
"""

from typing import List, Optional
from datetime import datetime

from models.founder import Founder
from .database import Database
from utils.logger import get_logger

logger = get_logger(__name__)


class FounderRepository:
    """Repository for founders and their company links."""

    def __init__(self, db: Database):
        self.db = db

    def upsert_by_email(self, founder: Founder) -> Founder:
        """Create the founder, or refresh the existing founder with the same email."""
        now = datetime.now().isoformat()
        query = """
            INSERT INTO founders (
                founder_id, email, first_name, last_name, title,
                linkedin_url, sex, bio, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (email) DO UPDATE SET
                first_name = excluded.first_name,
                last_name = excluded.last_name,
                title = excluded.title,
                linkedin_url = excluded.linkedin_url,
                sex = excluded.sex,
                bio = excluded.bio,
                updated_at = excluded.updated_at
        """
        params = (
            founder.founder_id, founder.email, founder.first_name, founder.last_name,
            founder.title, founder.linkedin_url, founder.sex, founder.bio, now, now,
        )
        self.db.execute(query, params)
        stored = self.get_by_email(founder.email)
        logger.debug(f"Upserted founder: {founder.email}")
        return stored or founder

    def get_by_email(self, email: str) -> Optional[Founder]:
        """Get founder by email."""
        row = self.db.fetch_one("SELECT * FROM founders WHERE email = ?", (email,))
        return Founder.from_dict(row.to_dict()) if row else None

    def link_to_company(self, company_id: str, founder_id: str,
                        role: str = "founder", is_active: bool = True) -> None:
        """Create (or refresh) the company_founders join row."""
        query = """
            INSERT INTO company_founders (company_id, founder_id, role, is_active, created_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (company_id, founder_id) DO UPDATE SET
                role = excluded.role,
                is_active = excluded.is_active
        """
        self.db.execute(query, (company_id, founder_id, role, is_active, datetime.now().isoformat()))

    def get_by_company(self, company_id: str) -> List[dict]:
        """Founders of a company with their role."""
        query = """
            SELECT f.*, cf.role, cf.is_active FROM founders f
            INNER JOIN company_founders cf ON f.founder_id = cf.founder_id
            WHERE cf.company_id = ?
            ORDER BY f.last_name, f.first_name
        """
        return [row.to_dict() for row in self.db.fetch_all(query, (company_id,))]
