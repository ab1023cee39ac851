# -*- coding: utf-8 -*-
"""
Portfolio Service Layer
"""

# Lazy imports to avoid circular dependencies
__all__ = [
    "InvestmentSubmissionService",
    "SubmissionResult",
    "UrlCheckService",
    "UrlCheckResult",
    "StepValidator",
    "DraftStore",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name in ("InvestmentSubmissionService", "SubmissionResult"):
        from . import investment_submission_service
        return getattr(investment_submission_service, name)
    elif name in ("UrlCheckService", "UrlCheckResult"):
        from . import url_check_service
        return getattr(url_check_service, name)
    elif name == "StepValidator":
        from .wizard.step_validator import StepValidator
        return StepValidator
    elif name == "DraftStore":
        from .wizard.draft_store import DraftStore
        return DraftStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
