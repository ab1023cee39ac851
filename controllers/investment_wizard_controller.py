# -*- coding: utf-8 -*-
"""
Investment Wizard Controller
============================
State machine of the investment entry wizard.

States are the step indices 0..N-1 plus a terminal "submitted" state. The
active error map is orthogonal to the step:

- Next validates the current step and advances only when it is clean.
- Back never re-validates and keeps the error map.
- Submit is accepted only from the last step, from the submit button, and
  while no other submission is in flight.
- Clear resets the record, deletes the draft and returns to step 0.

Required errors are shown pessimistically (on Next/Submit) and cleared per
field as soon as the value is fixed. Format errors are recomputed on every
change and kept separately.
"""

import copy
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from controllers.base_controller import BaseController, OperationResult
from controllers.url_validation_controller import UrlStatus, UrlValidationController
from models.vc import SelectedVc, VcInvestment
from repositories.database import Database
from repositories.draft_repository import DraftRepository
from repositories.vc_repository import VcRepository
from services.error_mapper import map_exception
from services.investment_submission_service import InvestmentSubmissionService, SubmissionResult
from services.translation_manager import tr
from services.validation.submission_checks import VcInvestmentStrategy
from services.validation.validation_strategy import is_empty_value
from services.wizard.draft_store import DraftStore, has_meaningful_data
from services.wizard.step_validator import ErrorMap, StepValidator, resolve_path
from ui.wizards.framework import StepNavigator, WizardStatus
from ui.wizards.investment import InvestmentContext
from utils.logger import format_context, get_logger

logger = get_logger(__name__)


class SubmitTrigger(Enum):
    """Where a submit attempt came from. Only the submit button may submit."""
    SUBMIT_BUTTON = "submit_button"
    ENTER_KEY = "enter_key"
    IMPLICIT = "implicit"


class SubmissionWorker(QThread):
    """Background worker for the submission pipeline."""

    completed = pyqtSignal(object)  # SubmissionResult

    def __init__(self, service: InvestmentSubmissionService, record: Dict[str, Any],
                 selected_vcs: List[SelectedVc], vc_investments: List[VcInvestment],
                 context: Dict[str, Any], wizard_id: str):
        super().__init__()
        self.wizard_id = wizard_id
        self.service = service
        self.record = record
        self.selected_vcs = selected_vcs
        self.vc_investments = vc_investments
        self.context = context

    def run(self):
        """Run the submission in background."""
        try:
            result = self.service.submit(
                self.record, self.selected_vcs, self.vc_investments, context=self.context
            )
        except Exception as e:
            logger.exception(f"Submission crashed {format_context(**self.context)}")
            result = SubmissionResult(success=False, error=map_exception(e, context="submission"))
        self.completed.emit(result)


class InvestmentWizardController(BaseController):
    """
    Controller for the investment entry wizard.

    Signals:
        step_changed(int): new step index
        errors_changed(dict): active (step/submit) error map
        format_errors_changed(dict): live format errors
        scroll_to_field(str): dotted path of the first error after a failed attempt
        submit_enabled_changed(bool): whether the submit control may be used
        submission_failed(str): pipeline failure message, never a field error
        submitted(object): SubmissionResult after a successful submission
        cleared(): after Clear
        draft_restored(dict): the record restored from the draft
        fields_needing_input_changed(list): required fields a paste left empty
    """

    step_changed = pyqtSignal(int)
    errors_changed = pyqtSignal(dict)
    format_errors_changed = pyqtSignal(dict)
    scroll_to_field = pyqtSignal(str)
    submit_enabled_changed = pyqtSignal(bool)
    submission_failed = pyqtSignal(str)
    submitted = pyqtSignal(object)
    cleared = pyqtSignal()
    draft_restored = pyqtSignal(dict)
    fields_needing_input_changed = pyqtSignal(list)

    def __init__(self, db: Optional[Database] = None,
                 validator: Optional[StepValidator] = None,
                 draft_store: Optional[DraftStore] = None,
                 submission_service: Optional[InvestmentSubmissionService] = None,
                 url_validator: Optional[UrlValidationController] = None,
                 parent=None):
        super().__init__(parent)
        if db is None and (draft_store is None or submission_service is None):
            from repositories.database import get_database
            db = get_database()
        self.db = db

        self.validator = validator or StepValidator()
        self.registry = self.validator.registry
        self.draft_store = draft_store or DraftStore(DraftRepository(db), parent=self)
        self.submission_service = submission_service or InvestmentSubmissionService(db)
        self.url_validator = url_validator
        if self.url_validator is not None:
            self.url_validator.status_changed.connect(self.set_url_status)

        self.context = InvestmentContext(self.registry.defaults())

        self.navigator = StepNavigator(self.context, self.registry.step_count, parent=self)
        self.navigator.step_changed.connect(self._on_step_changed)

        self._errors: ErrorMap = {}
        self._format_errors: ErrorMap = {}
        self.submission_error: Optional[str] = None

        self._submitting = False
        self._worker: Optional[SubmissionWorker] = None
        self._submit_enabled = self.can_submit

    # =========================================================================
    # State
    # =========================================================================

    @property
    def current_step(self) -> int:
        return self.navigator.current_index

    @property
    def record(self) -> Dict[str, Any]:
        """Copy of the form record."""
        return copy.deepcopy(self.context.data)

    @property
    def errors(self) -> ErrorMap:
        return dict(self._errors)

    @property
    def format_errors(self) -> ErrorMap:
        return dict(self._format_errors)

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def is_submitted(self) -> bool:
        return self.context.status == WizardStatus.SUBMITTED

    @property
    def can_submit(self) -> bool:
        return self.navigator.is_last_step and not self._submitting and not self.is_submitted

    def get_value(self, path: str) -> Any:
        return resolve_path(self.context.data, path)

    def progress(self) -> Dict[str, Any]:
        """Step title, position and completion for the progress indicator."""
        return {
            "step": self.current_step,
            "step_count": self.navigator.get_step_count(),
            "title": self.validator.get_step_name(self.current_step),
            "percentage": self.navigator.get_progress_percentage(),
            "completed_steps": sorted(self.context.completed_steps),
        }

    # =========================================================================
    # Record mutation
    # =========================================================================

    def set_field(self, path: str, value: Any):
        """
        Set a field by dotted path after user input.

        Resolved errors are cleared, format errors recomputed, URL checks
        scheduled and a draft write debounced.
        """
        if self.is_submitted:
            logger.debug(f"Ignoring change of {path}: wizard already submitted")
            return

        self.context.set_value(path, value)
        self.context.has_interacted = True

        if path in self.context.fields_needing_input and not is_empty_value(value):
            self.context.fields_needing_input.discard(path)
            self.fields_needing_input_changed.emit(sorted(self.context.fields_needing_input))

        self._on_record_changed([path])

    def set_fields(self, values: Dict[str, Any]):
        """Set several fields as one change."""
        if self.is_submitted:
            logger.debug(f"Ignoring change of {sorted(values)}: wizard already submitted")
            return

        filled = set()
        for path, value in values.items():
            self.context.set_value(path, value)
            if not is_empty_value(value):
                filled.add(path)
        self.context.has_interacted = True

        if filled & self.context.fields_needing_input:
            self.context.fields_needing_input -= filled
            self.fields_needing_input_changed.emit(sorted(self.context.fields_needing_input))

        self._on_record_changed(values.keys())

    def import_fields(self, values: Dict[str, Any]) -> OperationResult[List[str]]:
        """
        Bulk-populate the record from a quick paste.

        Auto-save is suppressed while the values are applied. Required fields
        still empty afterwards are returned (and tracked) as needing manual
        input.
        """
        self.context.suppress_auto_save = True
        try:
            applied = []
            for path, value in values.items():
                if is_empty_value(value):
                    continue
                self.context.set_value(path, value)
                applied.append(path)

            needing = [
                spec.name for spec in self.registry.field_specs()
                if spec.required and is_empty_value(self.context.data.get(spec.name))
            ]
            self.context.fields_needing_input = set(needing)
            self._on_record_changed(applied)
        finally:
            self.context.suppress_auto_save = False

        self.context.has_interacted = True
        self._schedule_draft_write()
        logger.info(f"Imported {len(applied)} fields, {len(needing)} need manual input")
        self.fields_needing_input_changed.emit(needing)
        return OperationResult.ok(data=needing)

    def set_selected_vcs(self, vcs: Iterable[SelectedVc]):
        """
        Replace the VC selection.

        Tracking entries of VCs that stay selected are kept, removed VCs lose
        theirs and newly selected VCs start as not invested.
        """
        vcs = list(vcs)
        existing = {investment.vc_id: investment for investment in self.context.vc_investments}
        self.context.selected_vcs = vcs
        self.context.vc_investments = [existing.get(vc.id) or VcInvestment.for_selection(vc) for vc in vcs]
        self.context.has_interacted = True
        self._refresh_errors()

    def set_vc_investment(self, vc_id: str, **changes) -> bool:
        """Update the tracking entry of a selected VC (is_invested, amount, date)."""
        investment = self.context.get_investment(vc_id)
        if investment is None:
            logger.warning(f"No tracking entry for VC {vc_id}")
            return False
        for name, value in changes.items():
            if name not in ("is_invested", "investment_amount", "investment_date"):
                raise ValueError(f"Unknown investment field: {name}")
            setattr(investment, name, value)
        if not investment.is_invested:
            investment.investment_amount = None
            investment.investment_date = None
        self._refresh_errors()
        return True

    def search_vcs(self, text: str, limit: int = 20) -> OperationResult:
        """Search the VC directory for the selector."""
        repository = VcRepository(self.db)
        return self.execute_with_error_handling("search_vcs", repository.search, text, limit)

    def set_url_status(self, path: str, status: str, message: str = ""):
        """Record the reachability status of a URL field."""
        if status == UrlStatus.IDLE:
            self.context.url_status.pop(path, None)
        else:
            self.context.url_status[path] = (status, message)

        if path in self._errors:
            self._refresh_errors()

    # =========================================================================
    # Transitions
    # =========================================================================

    def next(self) -> bool:
        """Validate the current step and advance when it is clean."""
        if self._reject_while_busy("next"):
            return False
        if not self.navigator.can_go_next():
            return False

        errors = self.navigator.next_step(self._validate_for_next)
        if errors:
            self._set_errors(errors)
            self.scroll_to_field.emit(next(iter(errors)))
            return False

        self._set_errors({})
        return True

    def back(self) -> bool:
        """Return to the previous step. Errors are kept as they are."""
        if self._reject_while_busy("back"):
            return False
        return self.navigator.previous_step()

    def submit(self, trigger: SubmitTrigger = SubmitTrigger.SUBMIT_BUTTON) -> OperationResult:
        """
        Validate the whole record and hand it to the submission pipeline.

        Only the submit button on the last step starts a submission; every
        other trigger and any attempt while a submission is running is a no-op.
        """
        if trigger is not SubmitTrigger.SUBMIT_BUTTON:
            logger.debug(f"Ignoring submit from {trigger.value}")
            return OperationResult.fail("Submission must be triggered from the submit button")
        if self._submitting:
            logger.debug("Ignoring submit: submission already in progress")
            return OperationResult.fail("Submission already in progress")
        if self.is_submitted:
            return OperationResult.fail("Investment already submitted")
        if not self.navigator.is_last_step:
            logger.warning(f"Ignoring submit from step {self.current_step}")
            return OperationResult.fail("Submission is only available on the last step")

        result = self.validator.validate_full(self.context.data, self.context.vc_investments)
        errors = result.errors
        for path, messages in self._pending_url_errors().items():
            errors.setdefault(path, []).extend(m for m in messages if m not in errors.get(path, []))
        if errors:
            logger.warning(f"Submit blocked by {len(errors)} invalid fields: {sorted(errors)}")
            self._set_errors(errors)
            self.scroll_to_field.emit(next(iter(errors)))
            return OperationResult.fail("Please fix the highlighted fields", errors=list(errors))

        self._set_errors({})
        self.submission_error = None
        self._set_submitting(True)
        self.context.status = WizardStatus.SUBMITTING
        self._emit_started("submit")

        self._worker = SubmissionWorker(
            self.submission_service,
            self.validator.coerce_record(self.context.data),
            list(self.context.selected_vcs),
            [copy.copy(investment) for investment in self.context.vc_investments],
            self.context.log_context,
            self.context.wizard_id,
        )
        self._worker.completed.connect(self._on_submission_completed)
        self._worker.start()
        return OperationResult.ok(message=tr("wizard.submit.in_progress"))

    def clear(self):
        """Reset the record, delete the draft and return to the first step."""
        self.draft_store.clear()
        if self.url_validator is not None:
            self.url_validator.cancel_all()

        self.context.reset()
        self.navigator.reset()
        self.submission_error = None
        self._set_errors({})
        self._set_format_errors({})
        self._update_submit_enabled()
        logger.info("Investment wizard cleared")
        self.cleared.emit()

    def restore_draft(self) -> bool:
        """
        Hydrate the record from the stored draft.

        Returns True when a draft with meaningful data was restored.
        """
        result = self.execute_with_error_handling("restore_draft", self.draft_store.read)
        record = result.data if result.success else None
        if not has_meaningful_data(record):
            return False

        data = self.registry.defaults()
        data.update(record)
        self.context.data = data
        self._set_format_errors(self.validator.format_errors(self.context.data))
        if self.url_validator is not None:
            for path in self._url_paths():
                self.url_validator.schedule(path, resolve_path(self.context.data, path))

        logger.info(f"Draft restored {format_context(**self.context.log_context)}")
        self.draft_restored.emit(copy.deepcopy(self.context.data))
        return True

    def wait_for_submission(self, timeout_ms: int = 10000) -> bool:
        """Block until the submission worker finishes. Used on shutdown."""
        if self._worker is None:
            return True
        return self._worker.wait(timeout_ms)

    # =========================================================================
    # Internals
    # =========================================================================

    def _validate_for_next(self, step_index: int) -> ErrorMap:
        errors = self.validator.validate_step(step_index, self.context.data)
        for path, messages in self._pending_url_errors(step_index).items():
            errors.setdefault(path, []).extend(m for m in messages if m not in errors.get(path, []))
        return errors

    def _pending_url_errors(self, step_index: Optional[int] = None) -> ErrorMap:
        """Errors for URL fields whose check is running or failed."""
        pending: ErrorMap = {}
        for path, (status, message) in self.context.url_status.items():
            if status not in UrlStatus.BLOCKING:
                continue
            if step_index is not None and self.registry.step_for_field(path) != step_index:
                continue
            if is_empty_value(resolve_path(self.context.data, path)):
                continue
            if status == UrlStatus.VALIDATING:
                pending[path] = [tr("validation.url.pending")]
            else:
                pending[path] = [message or tr("validation.url.unreachable_generic")]
        return pending

    def _url_paths(self) -> List[str]:
        paths = []
        for spec in self.registry.field_specs():
            if spec.check_reachability:
                paths.append(spec.name)
            for item_spec in spec.item_fields:
                if item_spec.check_reachability:
                    entries = self.context.data.get(spec.name) or []
                    paths.extend(f"{spec.name}.{i}.{item_spec.name}" for i in range(len(entries)))
        return paths

    def _on_record_changed(self, paths: Iterable[str]):
        self._refresh_errors()
        self._set_format_errors(self.validator.format_errors(self.context.data))

        if self.url_validator is not None:
            for path in paths:
                spec = self.registry.field_spec(path)
                if spec is not None and spec.check_reachability:
                    self.url_validator.schedule(path, resolve_path(self.context.data, path))

        self._schedule_draft_write()

    def _refresh_errors(self):
        """Drop error entries the user has fixed; keep pending URL errors in place."""
        if not self._errors:
            return
        remaining = self.validator.clear_resolved(self._errors, self.context.data)

        failing_investments = {
            issue.dotted_path
            for issue in VcInvestmentStrategy(self.context.vc_investments).validate(self.context.data)
        }
        remaining = {
            path: messages for path, messages in remaining.items()
            if not path.startswith("vc_investments.") or path in failing_investments
        }

        pending = self._pending_url_errors()
        for path in self._errors:
            if path in pending:
                remaining[path] = pending[path]

        if remaining != self._errors:
            self._set_errors(remaining)

    def _schedule_draft_write(self):
        self.draft_store.write(
            self.context.data,
            has_interacted=self.context.has_interacted,
            suppress=self.context.suppress_auto_save or self._submitting,
        )

    def _reject_while_busy(self, action: str) -> bool:
        if self._submitting:
            logger.debug(f"Ignoring {action}: submission in progress")
            return True
        if self.is_submitted:
            logger.debug(f"Ignoring {action}: wizard already submitted")
            return True
        return False

    def _on_step_changed(self, old_index: int, new_index: int):
        logger.debug(f"Step {old_index} -> {new_index}")
        self._update_submit_enabled()
        self.step_changed.emit(new_index)

    def _on_submission_completed(self, result: SubmissionResult):
        self._set_submitting(False)
        log_context = format_context(**self.context.log_context)

        # The form was cleared while the worker ran; its result belongs to the old session
        if self._worker is not None and self._worker.wizard_id != self.context.wizard_id:
            logger.info(
                f"Discarding submission result of cleared session {self._worker.wizard_id} "
                f"(success={result.success}) {log_context}"
            )
            self._emit_completed("submit", result.success)
            self._update_submit_enabled()
            self._schedule_draft_write()
            return

        if result.success:
            self.draft_store.clear()
            self.context.status = WizardStatus.SUBMITTED
            logger.info(f"Investment submitted: {result.company_slug} {log_context}")
            self._emit_completed("submit", True)
            self._update_submit_enabled()
            self.submitted.emit(result)
            return

        self.context.status = WizardStatus.DRAFT
        self.submission_error = result.error or tr("error.submission.failed")
        logger.error(
            f"Submission failed, record kept for retry: {self.submission_error} "
            f"completed={result.completed_steps} {log_context}"
        )
        self._emit_error("submit", self.submission_error)
        self._update_submit_enabled()
        self._schedule_draft_write()
        self.submission_failed.emit(self.submission_error)

    def _set_submitting(self, submitting: bool):
        self._submitting = submitting
        self._update_submit_enabled()

    def _update_submit_enabled(self):
        enabled = self.can_submit
        if enabled != self._submit_enabled:
            self._submit_enabled = enabled
            self.submit_enabled_changed.emit(enabled)

    def _set_errors(self, errors: ErrorMap):
        if errors != self._errors:
            self._errors = dict(errors)
            self.errors_changed.emit(dict(self._errors))

    def _set_format_errors(self, errors: ErrorMap):
        if errors != self._format_errors:
            self._format_errors = dict(errors)
            self.format_errors_changed.emit(dict(self._format_errors))
