# -*- coding: utf-8 -*-
"""
Shared fixtures for the portfolio tests.
"""
import copy
import os
import sys
from pathlib import Path

import pytest

# Run Qt headless when no display is available
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from repositories.database import Database


VALID_RECORD = {
    # Step 0 - Company & Investment Details
    "name": "Acme Robotics",
    "slug": "acme-robotics",
    "investment_date": "2024-03-15",
    "investment_amount": 100000,
    "instrument": "safe_post",
    "stage_at_investment": "seed",
    "round_size_usd": 2000000,
    "fund": "fund_i",
    "reason_for_investing": "Repeat founders in a large market",
    "country_of_incorp": "US",
    "incorporation_type": "c_corp",
    "description_raw": "Acme builds picking robots for mid-size warehouses.",
    "conversion_cap": 10000000,
    "discount_percent": 20,
    "has_pro_rata_rights": True,

    # Step 1 - Company & Founders
    "founders": [
        {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "title": "CEO",
            "email": "ada@acme.io",
            "linkedin_url": "https://www.linkedin.com/in/ada-lovelace",
            "role": "founder",
            "sex": "female",
        },
    ],
    "legal_name": "Acme Robotics Inc.",
    "hq_address_line_1": "1 Market St",
    "hq_city": "San Francisco",
    "hq_state": "CA",
    "hq_zip_code": "94105",
    "hq_country": "US",
    "company_linkedin_url": "https://www.linkedin.com/company/acme-robotics",
    "logo_url": "https://cdn.example.com/acme.png",
    "status": "active",

    # Step 2 - Marketing, Pitch & VCs
    "tagline": "Robots that pick every order",
    "website_url": "https://acme.io",
    "industry_tags": "robotics, logistics",
    "business_model_tags": "b2b, hardware",
    "pitch_transcript": "Thanks for having us. Acme automates picking...",
    "pitch_episode_url": "https://www.thepitch.show/episodes/acme-robotics",
    "episode_publish_date": "2024-02-01",
    "episode_title": "Acme Robotics wants every warehouse",
    "episode_season": 11,
    "episode_show_notes": "Ada pitches four VCs.",
    "youtube_url": "https://www.youtube.com/watch?v=acme",
    "apple_podcasts_url": "https://podcasts.apple.com/us/podcast/acme",
    "spotify_url": "https://open.spotify.com/episode/acme",
}


@pytest.fixture
def valid_record():
    """A record that passes every step and the full schema."""
    return copy.deepcopy(VALID_RECORD)


@pytest.fixture
def test_db(tmp_path):
    """Create test database instance."""
    db = Database(db_path=tmp_path / "test_portfolio.db")
    db.initialize()
    yield db
    db.close()
