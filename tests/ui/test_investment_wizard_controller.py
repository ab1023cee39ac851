# -*- coding: utf-8 -*-
"""
Tests for the Investment Wizard Controller.

Tests cover:
- Step navigation and validation on Next
- Incremental error clearing
- Submit guard and double submission
- URL reachability gating
- Clear, drafts and quick paste
"""

import threading

import pytest
from PyQt5.QtCore import QTimer

from controllers import InvestmentWizardController, SubmitTrigger, UrlStatus, UrlValidationController
from models.vc import SelectedVc
from repositories.draft_repository import DraftRepository
from services.investment_submission_service import SubmissionResult
from services.translation_manager import tr
from services.url_check_service import UrlCheckResult
from services.wizard.draft_store import DraftStore
from ui.wizards.framework import WizardStatus

DEBOUNCE_MS = 20


class RecordingSubmissionService:
    """Submission pipeline stand-in that records calls."""

    def __init__(self, result=None, gate=None):
        self.calls = []
        self.result = result or SubmissionResult(
            success=True, company_id="company-1", company_slug="acme-robotics"
        )
        self.gate = gate

    def submit(self, record, selected_vcs=(), vc_investments=(), context=None):
        self.calls.append(record)
        if self.gate is not None:
            self.gate.wait(5)
        return self.result


class StaticUrlChecker:
    """URL checker answering from a fixed table."""

    def __init__(self, results):
        self.results = results

    def check(self, url):
        return self.results.get(url, UrlCheckResult(ok=True, status=200))


@pytest.fixture
def service():
    return RecordingSubmissionService()


@pytest.fixture
def draft_store(qtbot, test_db):
    return DraftStore(DraftRepository(test_db), debounce_ms=DEBOUNCE_MS)


@pytest.fixture
def controller(qtbot, test_db, draft_store, service):
    """Create wizard controller for testing."""
    controller = InvestmentWizardController(
        db=test_db, draft_store=draft_store, submission_service=service
    )
    yield controller
    controller.wait_for_submission()


def _fill_and_reach_last_step(controller, record):
    controller.set_fields(record)
    for _ in range(controller.navigator.get_step_count() - 1):
        assert controller.next(), controller.errors
    assert controller.current_step == 3


class TestNavigation:
    """Test Next and Back."""

    def test_initial_state(self, controller):
        """Test the wizard starts on the first step with defaults."""
        assert controller.current_step == 0
        assert controller.record["fund"] == "fund_i"
        assert controller.errors == {}
        assert controller.progress()["percentage"] == 0.0
        assert not controller.can_submit

    def test_next_blocked_on_empty_step(self, qtbot, controller):
        """Test Next shows step errors and points at the first field."""
        with qtbot.waitSignal(controller.scroll_to_field) as blocker:
            assert controller.next() is False

        assert controller.current_step == 0
        assert blocker.args == ["name"]
        assert controller.errors["name"] == ["Company name is required"]

    def test_next_does_not_show_later_steps(self, controller, valid_record):
        """Test advancing from step 0 does not surface step 1 errors."""
        step0 = {name: valid_record[name]
                 for name in controller.validator.get_fields_for_step(0) if name in valid_record}
        controller.set_fields(step0)

        assert controller.next() is True

        assert controller.current_step == 1
        assert controller.errors == {}
        assert controller.context.is_step_completed(0)

    def test_back_keeps_errors(self, controller, valid_record):
        """Test Back never re-validates or clears errors."""
        step0 = {name: valid_record[name]
                 for name in controller.validator.get_fields_for_step(0) if name in valid_record}
        controller.set_fields(step0)
        controller.next()
        assert controller.next() is False
        errors = controller.errors

        assert controller.back() is True

        assert controller.current_step == 0
        assert controller.errors == errors

    def test_back_on_first_step(self, controller):
        """Test Back is a no-op on the first step."""
        assert controller.back() is False
        assert controller.current_step == 0

    def test_errors_clear_while_typing(self, controller):
        """Test fixing a field removes only its error."""
        controller.next()
        assert "name" in controller.errors

        controller.set_field("name", "Acme Robotics")

        assert "name" not in controller.errors
        assert "slug" in controller.errors

    def test_format_errors_are_live(self, controller):
        """Test format errors appear while typing without an advance attempt."""
        controller.set_field("slug", "Not A Slug")

        assert "slug" in controller.format_errors
        assert controller.errors == {}

    def test_switching_instrument_drops_conditional_error(self, controller, valid_record):
        """Test the cap error goes away once equity makes it inapplicable."""
        valid_record["conversion_cap"] = None
        controller.set_fields(valid_record)
        controller.next()
        assert "conversion_cap" in controller.errors

        controller.set_field("instrument", "equity")

        assert "conversion_cap" not in controller.errors
        assert "post_money_valuation" not in controller.errors

    def test_progress(self, controller, valid_record):
        """Test progress reporting follows the steps."""
        _fill_and_reach_last_step(controller, valid_record)

        progress = controller.progress()
        assert progress["percentage"] == 100.0
        assert progress["title"] == tr("wizard.step.investment_tracking")
        assert progress["completed_steps"] == [0, 1, 2]


class TestSubmit:
    """Test the submit transition and its guard."""

    def test_submit_only_from_last_step(self, controller, service, valid_record):
        """Test submitting from an earlier step is rejected."""
        controller.set_fields(valid_record)

        result = controller.submit()

        assert not result.success
        assert service.calls == []

    def test_implicit_submit_ignored(self, controller, service, valid_record):
        """Test Enter-key and implicit submissions never reach the pipeline."""
        _fill_and_reach_last_step(controller, valid_record)

        assert not controller.submit(SubmitTrigger.ENTER_KEY).success
        assert not controller.submit(SubmitTrigger.IMPLICIT).success
        assert service.calls == []

    def test_successful_submit(self, qtbot, controller, service, valid_record):
        """Test a valid record is submitted once and the draft deleted."""
        _fill_and_reach_last_step(controller, valid_record)
        controller.draft_store.flush()

        with qtbot.waitSignal(controller.submitted, timeout=5000) as blocker:
            assert controller.submit(SubmitTrigger.SUBMIT_BUTTON).success

        assert blocker.args[0].company_id == "company-1"
        assert len(service.calls) == 1
        assert service.calls[0]["slug"] == "acme-robotics"
        assert controller.is_submitted
        assert controller.draft_store.read() is None
        assert not controller.submit().success

    def test_double_submit_single_call(self, qtbot, controller, service, valid_record):
        """Test a second click while submitting does not submit again."""
        gate = threading.Event()
        service.gate = gate
        _fill_and_reach_last_step(controller, valid_record)

        assert controller.submit().success
        second = controller.submit()

        assert not second.success
        assert controller.is_submitting
        assert not controller.can_submit
        assert controller.next() is False
        assert controller.back() is False

        with qtbot.waitSignal(controller.submitted, timeout=5000):
            gate.set()

        assert len(service.calls) == 1

    def test_full_schema_errors_block_submit(self, qtbot, controller, service, valid_record):
        """Test errors found at submit stay on the last step."""
        _fill_and_reach_last_step(controller, valid_record)
        controller.set_field("slug", "")

        with qtbot.waitSignal(controller.scroll_to_field) as blocker:
            result = controller.submit()

        assert not result.success
        assert blocker.args == ["slug"]
        assert controller.errors == {"slug": ["Slug is required"]}
        assert controller.current_step == 3
        assert service.calls == []

    def test_failure_keeps_record(self, qtbot, controller, service, valid_record):
        """Test a pipeline failure is reported apart from field errors."""
        service.result = SubmissionResult(success=False, error=tr("error.submission.failed"))
        _fill_and_reach_last_step(controller, valid_record)

        with qtbot.waitSignal(controller.submission_failed, timeout=5000) as blocker:
            controller.submit()

        assert blocker.args == [tr("error.submission.failed")]
        assert controller.submission_error == tr("error.submission.failed")
        assert controller.errors == {}
        assert controller.record["name"] == "Acme Robotics"
        assert controller.current_step == 3
        assert controller.can_submit

    def test_invested_vc_needs_amount(self, controller, service, valid_record):
        """Test investment tracking errors block submit until fixed."""
        _fill_and_reach_last_step(controller, valid_record)
        controller.set_selected_vcs([SelectedVc(id="vc-1", name="Jane Doe")])
        controller.set_vc_investment("vc-1", is_invested=True)

        assert not controller.submit().success
        assert set(controller.errors) == {
            "vc_investments.0.investment_amount",
            "vc_investments.0.investment_date",
        }

        controller.set_vc_investment("vc-1", investment_amount=25000, investment_date="2024-03-20")

        assert controller.errors == {}


class TestUrlChecks:
    """Test reachability gating."""

    def test_pending_check_blocks_next(self, controller, valid_record):
        """Test Next waits for a running URL check."""
        controller.set_fields(valid_record)
        controller.next()
        controller.next()
        assert controller.current_step == 2

        controller.set_url_status("website_url", UrlStatus.VALIDATING)

        assert controller.next() is False
        assert controller.errors == {"website_url": [tr("validation.url.pending")]}

        controller.set_url_status("website_url", UrlStatus.VALID)

        assert controller.errors == {}
        assert controller.next() is True

    def test_invalid_url_blocks_next(self, controller, valid_record):
        """Test an unreachable URL blocks with its message."""
        controller.set_fields(valid_record)
        message = tr("validation.url.unreachable", status=404)
        controller.set_url_status("founders.0.linkedin_url", UrlStatus.INVALID, message)
        controller.next()

        assert controller.next() is False
        assert controller.errors == {"founders.0.linkedin_url": [message]}

    def test_url_field_changes_are_checked(self, qtbot, controller):
        """Test editing a URL field runs a debounced reachability check."""
        checker = StaticUrlChecker({
            "https://acme.io": UrlCheckResult(ok=False, status=404),
        })
        url_validator = UrlValidationController(service=checker, debounce_ms=0)
        controller.url_validator = url_validator
        url_validator.status_changed.connect(controller.set_url_status)

        with qtbot.waitSignal(url_validator.status_changed, timeout=5000,
                              check_params_cb=lambda path, status, message:
                              status == UrlStatus.INVALID):
            controller.set_field("website_url", "https://acme.io")

        assert controller.context.url_status["website_url"][0] == UrlStatus.INVALID
        assert url_validator.status_of("website_url") == UrlStatus.INVALID
        assert controller.get_value("website_url") == "https://acme.io"
        url_validator.wait_for_workers()

    def test_one_debounce_timer_per_field(self, qtbot):
        """Test repeated edits of a field reuse its debounce timer."""
        url_validator = UrlValidationController(service=StaticUrlChecker({}), debounce_ms=60000)

        for i in range(50):
            url_validator.schedule("website_url", f"https://acme{i}.io")
        url_validator.schedule("youtube_url", "https://youtube.com/watch?v=1")

        assert len(url_validator.findChildren(QTimer)) == 2
        assert url_validator.status_of("website_url") == UrlStatus.VALIDATING

        url_validator.cancel_all()
        assert url_validator.status_of("website_url") == UrlStatus.IDLE


class TestClearAndDrafts:
    """Test Clear, draft persistence and quick paste."""

    def test_clear_twice(self, controller, valid_record):
        """Test Clear resets everything and is idempotent."""
        controller.set_fields(valid_record)
        controller.next()
        controller.draft_store.flush()

        controller.clear()
        first = (controller.record, controller.current_step, controller.draft_store.read())
        controller.clear()

        assert (controller.record, controller.current_step, controller.draft_store.read()) == first
        assert controller.record == controller.registry.defaults()
        assert controller.current_step == 0
        assert controller.draft_store.read() is None
        assert controller.errors == {}

    def test_clear_cancels_pending_write(self, qtbot, controller):
        """Test a debounced draft write never lands after Clear."""
        controller.set_field("name", "Acme Robotics")
        assert controller.draft_store.has_pending_write

        controller.clear()
        qtbot.wait(DEBOUNCE_MS * 5)

        assert controller.draft_store.read() is None

    def test_clear_during_submit(self, qtbot, controller, service, valid_record):
        """Test a submission finishing after Clear leaves the new form editable."""
        gate = threading.Event()
        service.gate = gate
        _fill_and_reach_last_step(controller, valid_record)
        assert controller.submit().success

        controller.clear()
        controller.set_field("name", "Brand new company")

        with qtbot.assertNotEmitted(controller.submitted):
            with qtbot.waitSignal(controller.operation_completed, timeout=5000):
                gate.set()

        assert not controller.is_submitting
        assert not controller.is_submitted
        assert controller.context.status == WizardStatus.DRAFT
        assert controller.draft_store.has_pending_write

        controller.set_field("slug", "new-co")

        assert controller.get_value("slug") == "new-co"
        assert controller.record["name"] == "Brand new company"

    def test_no_draft_before_interaction(self, qtbot, controller):
        """Test defaults alone are never written."""
        controller._schedule_draft_write()
        qtbot.wait(DEBOUNCE_MS * 5)
        assert controller.draft_store.read() is None

    def test_draft_restored(self, qtbot, test_db, controller, service):
        """Test a new wizard restores the saved record."""
        with qtbot.waitSignal(controller.draft_store.draft_saved, timeout=2000):
            controller.set_field("name", "Acme Robotics")

        restored = InvestmentWizardController(
            db=test_db,
            draft_store=DraftStore(DraftRepository(test_db), debounce_ms=DEBOUNCE_MS),
            submission_service=service,
        )
        with qtbot.waitSignal(restored.draft_restored) as blocker:
            assert restored.restore_draft() is True

        assert blocker.args[0]["name"] == "Acme Robotics"
        assert restored.record["fund"] == "fund_i"

    def test_empty_draft_not_restored(self, controller):
        """Test a draft with only defaults is not offered."""
        controller.draft_store.repository.set(controller.draft_store.storage_key, '{"fund": "fund_i"}')
        assert controller.restore_draft() is False

    def test_quick_paste(self, qtbot, controller):
        """Test pasted values fill the record and report the gaps."""
        result = controller.import_fields({
            "name": "Acme Robotics",
            "slug": "acme-robotics",
            "tagline": "",
        })

        assert result.success
        assert "investment_date" in result.data
        assert "name" not in result.data
        assert "tagline" in result.data
        assert controller.record["slug"] == "acme-robotics"
        assert not controller.context.suppress_auto_save

        with qtbot.waitSignal(controller.fields_needing_input_changed) as blocker:
            controller.set_field("investment_date", "2024-03-15")
        assert "investment_date" not in blocker.args[0]

    def test_bulk_set_fills_pasted_gaps(self, qtbot, controller):
        """Test setting several fields at once clears them from the gaps list."""
        needing = controller.import_fields({"name": "Acme Robotics"}).data
        assert {"slug", "investment_date"} <= set(needing)

        with qtbot.waitSignal(controller.fields_needing_input_changed) as blocker:
            controller.set_fields({"slug": "acme-robotics", "investment_date": "2024-03-15", "tagline": ""})

        assert "slug" not in blocker.args[0]
        assert "investment_date" not in blocker.args[0]
        assert "tagline" in controller.context.fields_needing_input

    def test_vc_selection_keeps_tracking(self, controller):
        """Test tracking entries survive for VCs that stay selected."""
        jane = SelectedVc(id="vc-1", name="Jane Doe")
        john = SelectedVc(id="vc-2", name="John Roe")
        controller.set_selected_vcs([jane])
        controller.set_vc_investment("vc-1", is_invested=True, investment_amount=1000)

        controller.set_selected_vcs([jane, john])

        investments = {inv.vc_id: inv for inv in controller.context.vc_investments}
        assert investments["vc-1"].investment_amount == 1000
        assert investments["vc-2"].is_invested is False

        controller.set_selected_vcs([john])
        assert [inv.vc_id for inv in controller.context.vc_investments] == ["vc-2"]
