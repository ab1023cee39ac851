# -*- coding: utf-8 -*-
"""
Step Navigator - Manages navigation between wizard steps.

Handles:
- Step progression (next/previous)
- Step validation before navigation
- Progress tracking
"""

from typing import Callable, Dict, List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from services.exceptions import InvalidStepError
from .wizard_context import WizardContext
from utils.logger import get_logger

logger = get_logger(__name__)

# Returns the error map of a step; empty when the step is valid
StepValidation = Callable[[int], Dict[str, List[str]]]


class StepNavigator(QObject):
    """
    Manages the current step index of a wizard.

    Steps are identified by index only; forms and pages are the UI's concern.
    """

    # Signals
    step_changed = pyqtSignal(int, int)  # old_index, new_index
    can_go_next_changed = pyqtSignal(bool)
    can_go_previous_changed = pyqtSignal(bool)
    validation_failed = pyqtSignal(int, dict)  # step index, error map

    def __init__(self, context: WizardContext, step_count: int, parent=None):
        """
        Initialize the navigator.

        Args:
            context: Wizard context
            step_count: Number of steps
        """
        super().__init__(parent)
        if step_count < 1:
            raise InvalidStepError(0, step_count)
        self.context = context
        self.step_count = step_count
        self.current_index = context.current_step_index if 0 <= context.current_step_index < step_count else 0

    def get_step_count(self) -> int:
        """Get total number of steps."""
        return self.step_count

    @property
    def is_last_step(self) -> bool:
        return self.current_index == self.step_count - 1

    def can_go_next(self) -> bool:
        """Check if we can navigate to the next step."""
        return self.current_index < self.step_count - 1

    def can_go_previous(self) -> bool:
        """Check if we can navigate to the previous step."""
        return self.current_index > 0

    def next_step(self, validate: Optional[StepValidation] = None) -> Dict[str, List[str]]:
        """
        Navigate to the next step.

        Args:
            validate: Called with the current index; navigation happens only
                when it returns an empty error map

        Returns:
            The error map that blocked navigation (empty when navigated)
        """
        if not self.can_go_next():
            logger.debug(f"Cannot go next: already at last step ({self.current_index})")
            return {}

        if validate is not None:
            errors = validate(self.current_index)
            if errors:
                logger.warning(f"Step {self.current_index} validation failed: {sorted(errors)}")
                self.validation_failed.emit(self.current_index, errors)
                return errors
            self.context.mark_step_completed(self.current_index)

        logger.info(f"Navigating: Step {self.current_index} -> {self.current_index + 1}")
        self._navigate_to(self.current_index + 1)
        return {}

    def previous_step(self) -> bool:
        """Navigate to the previous step."""
        if not self.can_go_previous():
            logger.debug(f"Cannot go previous: already at first step ({self.current_index})")
            return False

        logger.info(f"Navigating back: Step {self.current_index} -> {self.current_index - 1}")
        self._navigate_to(self.current_index - 1)
        return True

    def _navigate_to(self, new_index: int):
        old_index = self.current_index
        self.current_index = new_index
        self.context.current_step_index = new_index

        self.step_changed.emit(old_index, new_index)
        self.can_go_next_changed.emit(self.can_go_next())
        self.can_go_previous_changed.emit(self.can_go_previous())

    def reset(self):
        """Reset navigator to first step."""
        self.context.current_step_index = 0
        if self.current_index != 0:
            self._navigate_to(0)

    def get_progress_percentage(self) -> float:
        """
        Get current progress as percentage.

        Returns:
            Progress percentage (0.0 to 100.0)
        """
        if self.step_count <= 1:
            return 100.0
        return (self.current_index / (self.step_count - 1)) * 100.0

    def get_completed_steps_count(self) -> int:
        """Get number of completed steps."""
        return len(self.context.completed_steps)
