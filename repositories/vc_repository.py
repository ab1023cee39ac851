# -*- coding: utf-8 -*-
"""
VC repository: the VC directory and company_vcs links.
"""

from typing import Dict, Iterable, List, Optional
from datetime import datetime

from models.vc import Vc, VcInvestment
from .database import Database
from utils.logger import get_logger

logger = get_logger(__name__)


class VcRepository:
    """Repository for VC lookups and company_vcs rows."""

    def __init__(self, db: Database):
        self.db = db

    def create(self, vc: Vc) -> Vc:
        """Create a new VC record."""
        query = """
            INSERT INTO vcs (vc_id, name, firm_name, slug, profile_image_url, linkedin_url, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        self.db.execute(query, (
            vc.vc_id, vc.name, vc.firm_name, vc.slug, vc.profile_image_url,
            vc.linkedin_url, vc.created_at.isoformat() if vc.created_at else None,
        ))
        logger.debug(f"Created VC: {vc.vc_id}")
        return vc

    def get_by_id(self, vc_id: str) -> Optional[Vc]:
        row = self.db.fetch_one("SELECT * FROM vcs WHERE vc_id = ?", (vc_id,))
        return Vc.from_dict(row.to_dict()) if row else None

    def find_existing_ids(self, vc_ids: Iterable[str]) -> List[str]:
        """Return the subset of ``vc_ids`` present in the vcs table."""
        ids = list(dict.fromkeys(vc_ids))
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        rows = self.db.fetch_all(f"SELECT vc_id FROM vcs WHERE vc_id IN ({placeholders})", tuple(ids))
        return [row["vc_id"] for row in rows]

    def search(self, text: str, limit: int = 20) -> List[Vc]:
        """Search VCs by name or firm."""
        pattern = f"%{text}%"
        query = """
            SELECT * FROM vcs WHERE name LIKE ? OR firm_name LIKE ?
            ORDER BY name LIMIT ?
        """
        return [Vc.from_dict(row.to_dict()) for row in self.db.fetch_all(query, (pattern, pattern, limit))]

    def link_to_company(self, company_id: str, investment: VcInvestment,
                        episode_url: Optional[str] = None,
                        episode_season: Optional[int] = None) -> None:
        """Create (or refresh) the company_vcs join row for one VC."""
        query = """
            INSERT INTO company_vcs (
                company_id, vc_id, episode_url, episode_season,
                is_invested, investment_amount_usd, investment_date, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (company_id, vc_id) DO UPDATE SET
                episode_url = excluded.episode_url,
                episode_season = excluded.episode_season,
                is_invested = excluded.is_invested,
                investment_amount_usd = excluded.investment_amount_usd,
                investment_date = excluded.investment_date
        """
        invested = bool(investment.is_invested)
        self.db.execute(query, (
            company_id, investment.vc_id, episode_url, episode_season,
            invested,
            investment.investment_amount if invested else None,
            investment.investment_date if invested else None,
            datetime.now().isoformat(),
        ))

    def get_company_links(self, company_id: str) -> List[Dict]:
        query = """
            SELECT cv.*, v.name, v.firm_name FROM company_vcs cv
            INNER JOIN vcs v ON v.vc_id = cv.vc_id
            WHERE cv.company_id = ?
            ORDER BY v.name
        """
        return [row.to_dict() for row in self.db.fetch_all(query, (company_id,))]
