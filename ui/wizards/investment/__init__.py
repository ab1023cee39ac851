# -*- coding: utf-8 -*-
"""Investment entry wizard."""

from .investment_context import InvestmentContext

__all__ = ['InvestmentContext']
