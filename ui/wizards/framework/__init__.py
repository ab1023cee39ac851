# -*- coding: utf-8 -*-
"""
Wizard Framework - state and navigation shared by multi-step wizards.
"""

from .wizard_context import WizardContext, WizardStatus
from .step_navigator import StepNavigator

__all__ = [
    'WizardContext',
    'WizardStatus',
    'StepNavigator'
]
