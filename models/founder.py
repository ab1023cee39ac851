# -*- coding: utf-8 -*-
"""
Founder entity model.
"""

from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime
import uuid


@dataclass
class Founder:
    """
    Founder of a portfolio company.

    Founders are unique by email; the same person can be linked to several
    companies through ``company_founders`` rows.
    """

    founder_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    title: Optional[str] = None
    linkedin_url: Optional[str] = None
    sex: Optional[str] = None  # male, female
    bio: Optional[str] = None

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.last_name]
        return " ".join(p for p in parts if p)

    @classmethod
    def from_entry(cls, entry: dict) -> "Founder":
        """Create a Founder from one wizard ``founders`` entry."""
        return cls(
            first_name=(entry.get("first_name") or "").strip(),
            last_name=(entry.get("last_name") or "").strip(),
            email=(entry.get("email") or "").strip().lower(),
            title=(entry.get("title") or "").strip() or None,
            linkedin_url=(entry.get("linkedin_url") or "").strip() or None,
            sex=entry.get("sex") or None,
            bio=(entry.get("bio") or "").strip() or None,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Founder":
        """Create Founder from dictionary."""
        data = dict(data)
        if isinstance(data.get("created_at"), str):
            data["created_at"] = datetime.fromisoformat(data["created_at"])
        if isinstance(data.get("updated_at"), str):
            data["updated_at"] = datetime.fromisoformat(data["updated_at"])

        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
