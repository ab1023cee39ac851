# -*- coding: utf-8 -*-
"""
Venture capitalist models: the VC directory entry, a wizard selection,
and the per-VC investment tracking entry.
"""

from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime
import uuid


@dataclass
class Vc:
    """VC appearing on the pitch episodes."""

    vc_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    firm_name: Optional[str] = None
    slug: Optional[str] = None
    profile_image_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_dict(cls, data: dict) -> "Vc":
        data = dict(data)
        if isinstance(data.get("created_at"), str):
            data["created_at"] = datetime.fromisoformat(data["created_at"])
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class SelectedVc:
    """A VC picked on the marketing step. Referenced by id only."""
    id: str
    name: str = ""
    firm_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.firm_name})" if self.firm_name else self.name


@dataclass
class VcInvestment:
    """Whether a selected VC also invested in the round, and how much."""
    vc_id: str
    vc_name: str = ""
    is_invested: bool = False
    investment_amount: Optional[float] = None
    investment_date: Optional[str] = None

    @classmethod
    def for_selection(cls, vc: SelectedVc) -> "VcInvestment":
        return cls(vc_id=vc.id, vc_name=vc.name)
