# -*- coding: utf-8 -*-
"""
Portfolio Data Models
"""

from .company import Company
from .founder import Founder
from .vc import Vc, SelectedVc, VcInvestment

__all__ = [
    "Company",
    "Founder",
    "Vc",
    "SelectedVc",
    "VcInvestment",
]
