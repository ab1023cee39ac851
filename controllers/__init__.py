# -*- coding: utf-8 -*-
"""
Portfolio Controllers
=====================
Controller layer between the UI and the services/repositories.

Controllers provide:
- Standardized error handling via OperationResult
- Qt signals for UI updates
- The wizard state machine and its guards

Usage:
    from controllers import InvestmentWizardController, SubmitTrigger

    controller = InvestmentWizardController(db)
    controller.set_field("name", "Acme")
    if controller.next():
        ...
    controller.submit(SubmitTrigger.SUBMIT_BUTTON)
"""

# Base controller and result types
from controllers.base_controller import (
    BaseController,
    OperationResult,
)

# Wizard controllers
from controllers.url_validation_controller import (
    UrlStatus,
    UrlValidationController,
)

from controllers.investment_wizard_controller import (
    InvestmentWizardController,
    SubmitTrigger,
)

# All public exports
__all__ = [
    # Base
    "BaseController",
    "OperationResult",

    # URL checks
    "UrlStatus",
    "UrlValidationController",

    # Investment wizard
    "InvestmentWizardController",
    "SubmitTrigger",
]
