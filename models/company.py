# -*- coding: utf-8 -*-
"""
Portfolio company entity model.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime
import uuid


def split_tags(value: Any) -> List[str]:
    """Split a comma separated tag string (or pass a list through) into clean tags."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


@dataclass
class Company:
    """
    Portfolio company with the investment terms recorded at entry time.

    ``conversion_cap_usd`` and ``discount_percent`` only apply to SAFE and
    convertible note instruments, ``post_money_valuation`` only to equity.
    """

    # Primary identifier
    company_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # Identity
    name: str = ""
    slug: str = ""
    legal_name: Optional[str] = None
    tagline: Optional[str] = None
    description_raw: Optional[str] = None
    status: str = "active"  # active, acquihired, exited, dead

    # Links
    website_url: Optional[str] = None
    company_linkedin_url: Optional[str] = None
    logo_url: Optional[str] = None
    svg_logo_url: Optional[str] = None

    # Classification
    industry_tags: List[str] = field(default_factory=list)
    business_model_tags: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    co_investors: List[str] = field(default_factory=list)

    # Investment terms
    fund: str = "fund_i"
    stage_at_investment: Optional[str] = None
    investment_date: Optional[str] = None
    investment_amount: Optional[float] = None
    instrument: Optional[str] = None
    conversion_cap_usd: Optional[float] = None
    discount_percent: Optional[float] = None
    post_money_valuation: Optional[float] = None
    round_size_usd: Optional[float] = None
    has_pro_rata_rights: bool = False
    reason_for_investing: Optional[str] = None

    # Incorporation and HQ
    country_of_incorp: Optional[str] = None
    incorporation_type: Optional[str] = None
    country: Optional[str] = None
    hq_address_line_1: Optional[str] = None
    hq_address_line_2: Optional[str] = None
    hq_city: Optional[str] = None
    hq_state: Optional[str] = None
    hq_zip_code: Optional[str] = None
    hq_country: Optional[str] = None
    hq_latitude: Optional[float] = None
    hq_longitude: Optional[float] = None

    # Pitch episode
    pitch_season: Optional[int] = None
    pitch_episode_url: Optional[str] = None
    pitch_transcript: Optional[str] = None
    episode_title: Optional[str] = None
    episode_season: Optional[int] = None
    episode_publish_date: Optional[str] = None
    episode_show_notes: Optional[str] = None
    youtube_url: Optional[str] = None
    apple_podcasts_url: Optional[str] = None
    spotify_url: Optional[str] = None

    notes: Optional[str] = None

    # Metadata
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    TAG_FIELDS = ("industry_tags", "business_model_tags", "keywords", "co_investors")

    @property
    def is_convertible(self) -> bool:
        return self.instrument in ("safe_post", "safe_pre", "convertible_note")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Company":
        """Build a company from a cleaned wizard record."""
        data = {k: v for k, v in record.items()
                if k in cls.__dataclass_fields__ and v is not None and v != ""}
        data.pop("company_id", None)
        data.pop("created_at", None)
        data.pop("updated_at", None)
        if record.get("conversion_cap") not in (None, ""):
            data["conversion_cap_usd"] = record["conversion_cap"]
        for name in cls.TAG_FIELDS:
            if name in data:
                data[name] = split_tags(data[name])
        company = cls(**data)
        if company.is_convertible:
            company.post_money_valuation = None
        elif company.instrument == "equity":
            company.conversion_cap_usd = None
            company.discount_percent = None
        return company

    @classmethod
    def from_dict(cls, data: dict) -> "Company":
        """Create Company from dictionary."""
        data = dict(data)
        if isinstance(data.get("created_at"), str):
            data["created_at"] = datetime.fromisoformat(data["created_at"])
        if isinstance(data.get("updated_at"), str):
            data["updated_at"] = datetime.fromisoformat(data["updated_at"])

        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
