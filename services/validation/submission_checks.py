# -*- coding: utf-8 -*-
"""
Pre-submission checks that go beyond the field schema.

- ``clean_form_data`` trims and normalizes the record handed to the pipeline.
- ``VcInvestmentStrategy`` checks the investment tracking entries of the
  final step (invested VCs need an amount and a date).
- ``collect_warnings`` reports logical inconsistencies that do not block.
"""

from typing import Any, Dict, List, Sequence

from models.vc import VcInvestment
from services.validation.validation_strategy import (
    ErrorKind,
    ValidationIssue,
    ValidationStrategy,
    is_empty_value,
    is_number,
)

TRIMMED_FIELDS = (
    "name", "slug", "tagline", "description_raw",
    "website_url", "company_linkedin_url", "logo_url",
)
TAG_FIELDS = ("industry_tags", "business_model_tags", "keywords")
INTEGER_FIELDS = ("episode_season", "pitch_season")


def normalize_tags(value: Any) -> str:
    """``" a , b,,c "`` -> ``"a, b, c"``; lists are joined the same way."""
    if isinstance(value, (list, tuple)):
        parts = [str(item) for item in value]
    else:
        parts = str(value).split(",")
    return ", ".join(part.strip() for part in parts if part.strip())


def clean_form_data(record: Dict[str, Any]) -> Dict[str, Any]:
    """Return a trimmed, normalized copy of a validated record."""
    cleaned = dict(record)

    for name in TRIMMED_FIELDS:
        if isinstance(cleaned.get(name), str):
            cleaned[name] = cleaned[name].strip()

    for name in INTEGER_FIELDS:
        value = cleaned.get(name)
        if isinstance(value, str):
            try:
                cleaned[name] = int(value.strip(), 10)
            except ValueError:
                cleaned[name] = None
        elif isinstance(value, float) and value.is_integer():
            cleaned[name] = int(value)

    for name in TAG_FIELDS:
        if isinstance(cleaned.get(name), (str, list, tuple)):
            cleaned[name] = normalize_tags(cleaned[name])

    if isinstance(cleaned.get("founders"), list):
        cleaned["founders"] = [
            {key: value.strip() if isinstance(value, str) else value
             for key, value in founder.items()}
            for founder in cleaned["founders"] if isinstance(founder, dict)
        ]
    return cleaned


class VcInvestmentStrategy(ValidationStrategy):
    """Invested VCs must carry a positive amount and an investment date."""

    LIST_NAME = "vc_investments"

    def __init__(self, investments: Sequence[VcInvestment]):
        self.investments = list(investments)

    def validate(self, record: Dict[str, Any]) -> List[ValidationIssue]:
        issues = []
        for position, investment in enumerate(self.investments):
            if not investment.is_invested:
                continue
            label = investment.vc_name or investment.vc_id
            amount = investment.investment_amount
            if not is_number(amount) or amount <= 0:
                issues.append(ValidationIssue(
                    path=(self.LIST_NAME, position, "investment_amount"),
                    message=f"{label}: Investment amount required when marked as invested",
                    kind=ErrorKind.REQUIRED,
                    discriminator="is_invested",
                ))
            if is_empty_value(investment.investment_date):
                issues.append(ValidationIssue(
                    path=(self.LIST_NAME, position, "investment_date"),
                    message=f"{label}: Investment date required when marked as invested",
                    kind=ErrorKind.REQUIRED,
                    discriminator="is_invested",
                ))
        return issues


def collect_warnings(record: Dict[str, Any], investments: Sequence[VcInvestment]) -> List[str]:
    """Non-blocking inconsistencies worth logging before submission."""
    warnings = []

    if not is_number(record.get("episode_season")):
        warnings.append("Episode season should be a number")

    amount = record.get("investment_amount")
    round_size = record.get("round_size_usd")
    if is_number(amount) and is_number(round_size) and amount > round_size:
        warnings.append("Investment amount is larger than total round size")

    total_vc = sum(
        inv.investment_amount for inv in investments
        if inv.is_invested and is_number(inv.investment_amount)
    )
    if total_vc > 0 and is_number(amount) and total_vc > amount:
        warnings.append("Total VC investments exceed our investment amount")

    return warnings
