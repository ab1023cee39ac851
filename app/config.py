# -*- coding: utf-8 -*-


from pathlib import Path
from dataclasses import dataclass
import os

# ============================================================================
# Load .env file for local environment configuration
# ============================================================================
from dotenv import load_dotenv

load_dotenv()  # Load from .env file in project root

# ============================================================================
# Read settings from environment variables (from .env or system)
# ============================================================================
# Database Settings
_DB_TYPE = os.getenv("PORTFOLIO_DB_TYPE", "sqlite").lower()
_POSTGRES_HOST = os.getenv("PORTFOLIO_DB_HOST", "localhost")
_POSTGRES_PORT = int(os.getenv("PORTFOLIO_DB_PORT", "5432"))
_POSTGRES_DB = os.getenv("PORTFOLIO_DB_NAME", "portfolio")
_POSTGRES_USER = os.getenv("PORTFOLIO_DB_USER", "portfolio_admin")
_POSTGRES_PASSWORD = os.getenv("PORTFOLIO_DB_PASSWORD", "")

# Draft Settings
_DRAFT_DEBOUNCE_MS = int(os.getenv("DRAFT_DEBOUNCE_MS", "700"))

# URL Reachability Settings
_URL_CHECK_TIMEOUT = int(os.getenv("URL_CHECK_TIMEOUT", "10"))
_URL_CHECK_CACHE_TTL = int(os.getenv("URL_CHECK_CACHE_TTL", "300"))
_URL_CHECK_DEBOUNCE_MS = int(os.getenv("URL_CHECK_DEBOUNCE_MS", "1000"))


@dataclass
class Config:
    """Application configuration."""

    # Application Info
    APP_NAME: str = "Pitch Fund Portfolio Admin"
    VERSION: str = "1.0.0"
    ORGANIZATION: str = "The Pitch Fund"

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # Database Configuration
    # SQLite (development/fallback)
    DB_NAME: str = "portfolio.db"
    DB_PATH: Path = DATA_DIR / DB_NAME

    # PostgreSQL (production)
    # Set PORTFOLIO_DB_TYPE=postgresql to use PostgreSQL
    DB_TYPE: str = _DB_TYPE  # "sqlite" or "postgresql"
    POSTGRES_HOST: str = _POSTGRES_HOST
    POSTGRES_PORT: int = _POSTGRES_PORT
    POSTGRES_DB: str = _POSTGRES_DB
    POSTGRES_USER: str = _POSTGRES_USER
    POSTGRES_PASSWORD: str = _POSTGRES_PASSWORD
    POSTGRES_MIN_CONN: int = 1
    POSTGRES_MAX_CONN: int = 10

    # Logging
    LOG_FILE: str = "app.log"
    LOG_PATH: Path = LOGS_DIR / LOG_FILE
    LOG_MAX_BYTES: int = 5 * 1024 * 1024  # 5MB
    LOG_BACKUP_COUNT: int = 3

    # Investment Wizard
    DRAFT_STORAGE_KEY: str = "investmentWizardDraft"
    DRAFT_DEBOUNCE_MS: int = _DRAFT_DEBOUNCE_MS
    MAX_FOUNDERS: int = 3
    PITCH_EPISODE_DOMAIN: str = "thepitch.show"

    # URL reachability checks
    URL_CHECK_TIMEOUT: int = _URL_CHECK_TIMEOUT  # seconds
    URL_CHECK_CACHE_TTL: int = _URL_CHECK_CACHE_TTL  # seconds
    URL_CHECK_DEBOUNCE_MS: int = _URL_CHECK_DEBOUNCE_MS

    # Date/Time Formats
    DATE_FORMAT: str = "%Y-%m-%d"
    DATETIME_FORMAT: str = "%Y-%m-%d %H:%M:%S"


# Controlled vocabularies
class Vocabularies:
    # Value (code), Name (English)
    INSTRUMENTS = [
        ("safe_post", "SAFE (Post-Money)"),
        ("safe_pre", "SAFE (Pre-Money)"),
        ("convertible_note", "Convertible Note"),
        ("equity", "Equity"),
    ]

    # Instruments that convert later and carry a cap and discount
    CONVERTIBLE_INSTRUMENTS = ("safe_post", "safe_pre", "convertible_note")

    STAGES = [
        ("pre_seed", "Pre-Seed"),
        ("seed", "Seed"),
    ]

    FUNDS = [
        ("fund_i", "Fund I"),
        ("fund_ii", "Fund II"),
        ("fund_iii", "Fund III"),
    ]

    INCORPORATION_TYPES = [
        ("c_corp", "C Corporation"),
        ("s_corp", "S Corporation"),
        ("llc", "LLC"),
        ("bcorp", "B Corporation"),
        ("gmbh", "GmbH"),
        ("ltd", "Ltd"),
        ("plc", "PLC"),
        ("other", "Other"),
    ]

    COMPANY_STATUS = [
        ("active", "Active"),
        ("acquihired", "Acquihired"),
        ("exited", "Exited"),
        ("dead", "Dead"),
    ]

    FOUNDER_ROLES = [
        ("founder", "Founder"),
        ("cofounder", "Co-Founder"),
    ]

    SEXES = [
        ("male", "Male"),
        ("female", "Female"),
    ]

    @staticmethod
    def codes(vocabulary) -> tuple:
        """Return the codes of a vocabulary list."""
        return tuple(code for code, _ in vocabulary)
