# -*- coding: utf-8 -*-
"""
Wizard Context - state of one wizard session.

Holds the form record (``data``) together with the session bookkeeping the
controller needs: identity for log correlation, the current step, which
steps passed validation and the flags that gate auto-save.
"""

import copy
import uuid
from datetime import datetime
from typing import Any, Dict, Optional


class WizardStatus:
    """Lifecycle of a wizard session."""
    DRAFT = "draft"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class WizardContext:
    """
    Base class for wizard context.

    ``data`` is the form record. Values persist across step navigation;
    steps only decide which fields they validate.
    """

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        self._defaults: Dict[str, Any] = copy.deepcopy(defaults or {})
        self._start_session()

    def _start_session(self):
        now = datetime.now()
        self.wizard_id: str = str(uuid.uuid4())
        self.reference_number: str = self._generate_reference_number(now)
        self.status: str = WizardStatus.DRAFT
        self.created_at: datetime = now
        self.updated_at: datetime = now
        self.current_step_index: int = 0
        self.completed_steps: set = set()

        # Auto-save gating: no draft is written before the user touches the
        # form, nor while a bulk import fills it
        self.has_interacted: bool = False
        self.suppress_auto_save: bool = False

        self.data: Dict[str, Any] = copy.deepcopy(self._defaults)

    def _generate_reference_number(self, now: datetime) -> str:
        """
        Reference shown in logs for this session.

        Format: {PREFIX}-{YYYYMMDDHHMMSS}-{SHORT_UUID}, e.g. INV-20260118153045-A3F2
        """
        return f"{self._get_reference_prefix()}-{now:%Y%m%d%H%M%S}-{self.wizard_id[:4].upper()}"

    def _get_reference_prefix(self) -> str:
        """Override in subclasses."""
        return "WIZ"

    @property
    def log_context(self) -> Dict[str, str]:
        return {"wizard_id": self.wizard_id, "reference": self.reference_number}

    def mark_step_completed(self, step_index: int):
        self.completed_steps.add(step_index)
        self.touch()

    def is_step_completed(self, step_index: int) -> bool:
        return step_index in self.completed_steps

    def touch(self):
        self.updated_at = datetime.now()

    def set_value(self, path: str, value: Any):
        """
        Set a value by dotted path, e.g. ``founders.1.email``.

        Missing list entries and nested mappings are created on the way.
        """
        parts = path.split(".")
        current = self.data
        for position, part in enumerate(parts[:-1]):
            child = [] if parts[position + 1].isdigit() else {}
            if isinstance(current, list):
                index = int(part)
                while len(current) <= index:
                    current.append({})
                if not isinstance(current[index], (dict, list)):
                    current[index] = child
                current = current[index]
            else:
                if not isinstance(current.get(part), (dict, list)):
                    current[part] = child
                current = current[part]

        last = parts[-1]
        if isinstance(current, list):
            index = int(last)
            while len(current) <= index:
                current.append(None)
            current[index] = value
        else:
            current[last] = value
        self.touch()

    def reset(self):
        """Return to the defaults under a fresh identity."""
        self._start_session()
