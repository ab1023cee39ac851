# -*- coding: utf-8 -*-
"""
Tests for the wizard framework and the base controller.
"""

import pytest

from controllers.base_controller import BaseController
from services.exceptions import InvalidStepError
from services.translation_manager import tr
from ui.wizards.framework import StepNavigator, WizardContext


@pytest.fixture
def context():
    return WizardContext({"fund": "fund_i", "founders": []})


@pytest.fixture
def navigator(qtbot, context):
    return StepNavigator(context, step_count=4)


class TestWizardContext:
    """Test record access and reset."""

    def test_defaults_are_copied(self, context):
        context.data["founders"].append({"email": "ada@acme.io"})
        context.reset()
        assert context.data == {"fund": "fund_i", "founders": []}

    def test_set_value_creates_list_entries(self, context):
        context.set_value("founders.2.email", "grace@acme.io")
        assert context.data["founders"] == [{}, {}, {"email": "grace@acme.io"}]

    def test_reset_gives_fresh_identity(self, context):
        old_id = context.wizard_id
        context.has_interacted = True
        context.mark_step_completed(1)

        context.reset()

        assert context.wizard_id != old_id
        assert not context.has_interacted
        assert context.completed_steps == set()
        assert context.reference_number.startswith("WIZ-")


class TestStepNavigator:
    """Test navigation between steps."""

    def test_requires_steps(self, qtbot, context):
        with pytest.raises(InvalidStepError):
            StepNavigator(context, step_count=0)

    def test_next_blocked_by_errors(self, qtbot, navigator):
        errors = {"name": ["Company name is required"]}
        with qtbot.waitSignal(navigator.validation_failed) as blocker:
            result = navigator.next_step(lambda index: errors)

        assert result == errors
        assert blocker.args == [0, errors]
        assert navigator.current_index == 0
        assert navigator.get_completed_steps_count() == 0

    def test_next_marks_step_completed(self, qtbot, navigator, context):
        with qtbot.waitSignal(navigator.step_changed) as blocker:
            assert navigator.next_step(lambda index: {}) == {}

        assert blocker.args == [0, 1]
        assert context.current_step_index == 1
        assert context.is_step_completed(0)
        assert navigator.get_completed_steps_count() == 1

    def test_boundaries(self, navigator):
        assert not navigator.previous_step()
        for _ in range(3):
            navigator.next_step()
        assert navigator.is_last_step
        assert navigator.next_step() == {}
        assert navigator.current_index == 3
        assert navigator.get_progress_percentage() == 100.0

    def test_reset(self, navigator, context):
        navigator.next_step()
        navigator.next_step()
        assert navigator.previous_step()
        navigator.reset()
        assert navigator.current_index == 0
        assert context.current_step_index == 0
        assert navigator.get_progress_percentage() == 0.0


class TestBaseController:
    """Test operation lifecycle reporting."""

    def test_overlapping_operations(self, qtbot):
        controller = BaseController()
        changes = []
        controller.loading_changed.connect(changes.append)

        controller._emit_started("url_check")
        controller._emit_started("url_check")
        controller._emit_completed("url_check", True)

        assert controller.is_loading
        assert controller.is_running("url_check")

        controller._emit_completed("url_check", False)

        assert not controller.is_loading
        assert changes == [True, False]

    def test_execute_maps_errors(self, qtbot):
        controller = BaseController()

        def fail():
            raise RuntimeError("database is locked")

        with qtbot.waitSignal(controller.operation_error) as blocker:
            result = controller.execute_with_error_handling("search", fail)

        assert not result.success
        assert result.message == tr("error.unexpected")
        assert blocker.args == ["search", tr("error.unexpected")]
        assert controller.last_error == result.message
        assert not controller.is_loading

        assert controller.execute_with_error_handling("search", lambda: [1]).data == [1]
