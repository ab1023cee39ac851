# -*- coding: utf-8 -*-
"""
Investment Context - state of the investment entry wizard.

Extends WizardContext with what lives outside the form record:
- VCs selected on the marketing step and their tracking entries
- Reachability status of URL fields
- Fields a quick-paste import could not fill
"""

from typing import Any, Dict, List, Optional, Set, Tuple

from models.vc import SelectedVc, VcInvestment
from ui.wizards.framework import WizardContext


class InvestmentContext(WizardContext):
    """Context for the investment entry wizard."""

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        super().__init__(defaults)

        # Selection set, referenced by id at submission
        self.selected_vcs: List[SelectedVc] = []
        self.vc_investments: List[VcInvestment] = []

        # path -> (status, message)
        self.url_status: Dict[str, Tuple[str, str]] = {}

        self.fields_needing_input: Set[str] = set()

    def _get_reference_prefix(self) -> str:
        return "INV"

    def reset(self):
        super().reset()
        self.selected_vcs = []
        self.vc_investments = []
        self.url_status = {}
        self.fields_needing_input = set()

    def get_investment(self, vc_id: str) -> Optional[VcInvestment]:
        for investment in self.vc_investments:
            if investment.vc_id == vc_id:
                return investment
        return None
