# -*- coding: utf-8 -*-
"""
Investment wizard schema.

Four steps:
    0. Company & Investment Details
    1. Company & Founders
    2. Marketing, Pitch & VCs
    3. Investment Tracking (no record fields; VC tracking is checked at submit)
"""

from app.config import Config, Vocabularies
from services.translation_manager import tr
from services.validation.schema_registry import FieldKind, FieldSpec, SchemaRegistry, StepDefinition
from services.validation.validation_strategy import (
    Choices,
    ConditionalRule,
    ExactLength,
    HostContains,
    IsEmail,
    IsIsoDate,
    IsUrl,
    MaxLength,
    Pattern,
    Positive,
    Range,
)

STEP_COMPANY_INVESTMENT = 0
STEP_COMPANY_FOUNDERS = 1
STEP_MARKETING_PITCH = 2
STEP_INVESTMENT_TRACKING = 3

ISO_COUNTRY_RULES = (
    ExactLength(2, "Must be a valid ISO country code (2 letters)"),
    Pattern(r"^[A-Z]{2}$", "Country code must be uppercase"),
)

URL_RULE = IsUrl("Must be a valid URL")


def _url(name: str, required_message: str = "", reachable: bool = False) -> FieldSpec:
    return FieldSpec(
        name,
        required=bool(required_message),
        required_message=required_message,
        rules=(URL_RULE,),
        check_reachability=reachable,
    )


def _text(name: str, required_message: str = "", max_length: int = None,
          too_long: str = "") -> FieldSpec:
    rules = (MaxLength(max_length, too_long),) if max_length else ()
    return FieldSpec(name, required=bool(required_message),
                     required_message=required_message, rules=rules)


def _founder_fields():
    return (
        _text("first_name", "First name is required"),
        _text("last_name", "Last name is required"),
        _text("title", "Title is required", 255, "Title too long"),
        FieldSpec("email", required=True, required_message="Email is required",
                  rules=(IsEmail("Must be a valid email address"),)),
        _url("linkedin_url", "LinkedIn URL is required", reachable=True),
        FieldSpec("role", default="founder",
                  rules=(Choices(Vocabularies.codes(Vocabularies.FOUNDER_ROLES),
                                 "Please select a valid role"),)),
        FieldSpec("sex", required=True, required_message="Sex is required",
                  rules=(Choices(Vocabularies.codes(Vocabularies.SEXES),
                                 "Please select a valid option"),)),
        _text("bio", max_length=1000, too_long="Bio too long"),
    )


def _company_investment_step() -> StepDefinition:
    amount = "Investment amount is required and must be positive"
    round_size = "Round size is required and must be positive"
    return StepDefinition(
        index=STEP_COMPANY_INVESTMENT,
        title=tr("wizard.step.company_investment"),
        fields=(
            _text("name", "Company name is required", 255, "Company name too long"),
            FieldSpec("slug", required=True, required_message="Slug is required", rules=(
                MaxLength(100, "Slug too long"),
                Pattern(r"^[a-z0-9-]+$",
                        "Slug can only contain lowercase letters, numbers, and hyphens"),
            )),
            FieldSpec("investment_date", required=True,
                      required_message="Investment date is required", rules=(IsIsoDate(),)),
            FieldSpec("investment_amount", kind=FieldKind.NUMBER, required=True,
                      required_message=amount, rules=(Positive(amount),)),
            FieldSpec("instrument", required=True,
                      required_message="Investment instrument is required",
                      rules=(Choices(Vocabularies.codes(Vocabularies.INSTRUMENTS),
                                     "Invalid investment instrument"),)),
            FieldSpec("stage_at_investment", required=True,
                      required_message="Stage at investment is required",
                      rules=(Choices(Vocabularies.codes(Vocabularies.STAGES),
                                     "Stage at investment is required"),)),
            FieldSpec("round_size_usd", kind=FieldKind.NUMBER, required=True,
                      required_message=round_size, rules=(Positive(round_size),)),
            FieldSpec("fund", required=True, required_message="Fund selection is required",
                      default="fund_i",
                      rules=(Choices(Vocabularies.codes(Vocabularies.FUNDS),
                                     "Fund selection is required"),)),
            _text("reason_for_investing", "Reason for investing is required", 4000,
                  "Reason for investing is too long (max 4000 characters)"),
            FieldSpec("country_of_incorp", required=True,
                      required_message="Country of incorporation is required",
                      uppercase=True, rules=(
                          ExactLength(2, "Use ISO-3166 alpha-2 country code (e.g. US)"),
                          Pattern(r"^[A-Z]{2}$", "Country code must be uppercase"),
                      )),
            FieldSpec("incorporation_type", required=True,
                      required_message="Incorporation type is required",
                      rules=(Choices(Vocabularies.codes(Vocabularies.INCORPORATION_TYPES),
                                     "Incorporation type is required"),)),
            _text("description_raw", "Company description is required", 5000,
                  "Description too long (max 5000 characters)"),
            FieldSpec("conversion_cap", kind=FieldKind.NUMBER, rules=(Positive(),)),
            FieldSpec("discount_percent", kind=FieldKind.NUMBER, rules=(
                Range(0, 100, "Discount cannot be negative", "Discount cannot exceed 100%"),
            )),
            FieldSpec("post_money_valuation", kind=FieldKind.NUMBER, rules=(Positive(),)),
            FieldSpec("has_pro_rata_rights", kind=FieldKind.BOOLEAN, default=False),
            _text("co_investors"),
            _text("founder_name", max_length=255, too_long="Name too long"),
        ),
        conditionals=(
            ConditionalRule(
                discriminator="instrument",
                values=Vocabularies.CONVERTIBLE_INSTRUMENTS,
                required=(
                    ("conversion_cap",
                     "Conversion cap is required for SAFE and convertible note investments"),
                    ("discount_percent",
                     "Discount percentage is required for SAFE and convertible note investments"),
                ),
                cleared=("post_money_valuation",),
            ),
            ConditionalRule(
                discriminator="instrument",
                values=("equity",),
                required=(
                    ("post_money_valuation",
                     "Post-money valuation is required for equity investments"),
                ),
                cleared=("conversion_cap", "discount_percent"),
            ),
        ),
    )


def _company_founders_step(max_founders: int) -> StepDefinition:
    return StepDefinition(
        index=STEP_COMPANY_FOUNDERS,
        title=tr("wizard.step.company_founders"),
        fields=(
            FieldSpec("founders", kind=FieldKind.LIST, required=True,
                      required_message="At least one founder is required",
                      item_fields=_founder_fields(),
                      min_items=1, max_items=max_founders,
                      max_items_message=f"Maximum {max_founders} founders allowed"),
            _text("legal_name", "Legal name is required", 255, "Legal name too long"),
            _text("hq_address_line_1", "Address line 1 is required", 255,
                  "Address line 1 too long"),
            _text("hq_address_line_2", max_length=255, too_long="Address line 2 too long"),
            _text("hq_city", "City is required", 100, "City name too long"),
            _text("hq_state", "State/province is required", 100, "State/province too long"),
            _text("hq_zip_code", "ZIP/postal code is required", 20, "ZIP/postal code too long"),
            FieldSpec("hq_country", required=True, required_message="Country is required",
                      uppercase=True, rules=ISO_COUNTRY_RULES),
            FieldSpec("hq_latitude", kind=FieldKind.NUMBER, rules=(
                Range(-90, 90, "Latitude must be between -90 and 90"),
            )),
            FieldSpec("hq_longitude", kind=FieldKind.NUMBER, rules=(
                Range(-180, 180, "Longitude must be between -180 and 180"),
            )),
            _url("company_linkedin_url", "Company LinkedIn URL is required", reachable=True),
            _url("logo_url", "Company logo is required"),
            _url("svg_logo_url"),
            FieldSpec("status", default="active",
                      rules=(Choices(Vocabularies.codes(Vocabularies.COMPANY_STATUS),
                                     "Please select a valid status"),)),
            FieldSpec("country", uppercase=True, rules=ISO_COUNTRY_RULES),
            FieldSpec("pitch_season", kind=FieldKind.INTEGER,
                      rules=(Positive("Season must be greater than 0"),)),
            _text("notes", max_length=2000, too_long="Notes too long"),
        ),
    )


def _marketing_pitch_step(pitch_domain: str) -> StepDefinition:
    episode_url_message = f"Pitch episode URL must be a valid URL from {pitch_domain} domain"
    return StepDefinition(
        index=STEP_MARKETING_PITCH,
        title=tr("wizard.step.marketing_pitch"),
        fields=(
            _text("tagline", "Tagline is required", 500, "Tagline too long"),
            _url("website_url", "Website URL is required", reachable=True),
            _text("industry_tags", "Industry tags are required"),
            _text("business_model_tags", "Business model tags are required"),
            _text("keywords"),
            _text("pitch_transcript", "Pitch transcript is required", 500000,
                  "Transcript too long (max 500,000 characters)"),
            FieldSpec("pitch_episode_url", required=True,
                      required_message="Pitch episode URL is required",
                      check_reachability=True,
                      rules=(IsUrl(episode_url_message),
                             HostContains(pitch_domain, episode_url_message))),
            FieldSpec("episode_publish_date", required=True,
                      required_message="Episode publish date is required",
                      rules=(IsIsoDate(),)),
            _text("episode_title", "Episode title is required"),
            FieldSpec("episode_season", kind=FieldKind.INTEGER, required=True,
                      required_message="Episode season is required", rules=(
                          Range(1, 50, "Season must be at least 1", "Season must be 50 or less"),
                      )),
            _text("episode_show_notes", "Episode show notes are required", 10000,
                  "Show notes too long (max 10,000 characters)"),
            _url("youtube_url", "YouTube URL is required", reachable=True),
            _url("apple_podcasts_url", "Apple Podcasts URL is required", reachable=True),
            _url("spotify_url", "Spotify URL is required", reachable=True),
        ),
    )


def build_investment_registry(max_founders: int = None,
                              pitch_domain: str = None) -> SchemaRegistry:
    """Build the registry used by the investment wizard."""
    return SchemaRegistry((
        _company_investment_step(),
        _company_founders_step(max_founders or Config.MAX_FOUNDERS),
        _marketing_pitch_step(pitch_domain or Config.PITCH_EPISODE_DOMAIN),
        StepDefinition(
            index=STEP_INVESTMENT_TRACKING,
            title=tr("wizard.step.investment_tracking"),
        ),
    ))
