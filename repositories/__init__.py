# -*- coding: utf-8 -*-
"""
Portfolio Repository Layer
"""

# Lazy imports to avoid circular dependencies
__all__ = [
    "Database",
    "DatabaseFactory",
    "CompanyRepository",
    "FounderRepository",
    "VcRepository",
    "DraftRepository",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name == "Database":
        from .database import Database
        return Database
    elif name == "DatabaseFactory":
        from .db_adapter import DatabaseFactory
        return DatabaseFactory
    elif name == "CompanyRepository":
        from .company_repository import CompanyRepository
        return CompanyRepository
    elif name == "FounderRepository":
        from .founder_repository import FounderRepository
        return FounderRepository
    elif name == "VcRepository":
        from .vc_repository import VcRepository
        return VcRepository
    elif name == "DraftRepository":
        from .draft_repository import DraftRepository
        return DraftRepository
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
