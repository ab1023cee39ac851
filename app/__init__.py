# -*- coding: utf-8 -*-
"""
Portfolio Admin Application Core Module
"""

from .config import Config, Vocabularies

__all__ = ["Config", "Vocabularies"]
