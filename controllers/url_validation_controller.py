# -*- coding: utf-8 -*-
"""
URL Validation Controller
=========================
Schedules reachability checks for the URL fields of the investment wizard.

Each field has its own debounce timer. Checks run on a worker thread and
report through ``status_changed``; results for a URL that has since been
replaced are dropped.
"""

from functools import partial
from typing import Dict, List, Optional, Tuple

from PyQt5.QtCore import QThread, QTimer, pyqtSignal

from app.config import Config
from controllers.base_controller import BaseController
from services.translation_manager import tr
from services.url_check_service import UrlCheckResult, UrlCheckService
from services.validation.validation_strategy import is_valid_url
from utils.logger import get_logger

logger = get_logger(__name__)


class UrlStatus:
    """Per-field reachability status."""
    IDLE = "idle"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"

    BLOCKING = (VALIDATING, INVALID)


class UrlCheckWorker(QThread):
    """Background worker for one URL check."""

    completed = pyqtSignal(str, str, object)  # field path, url, UrlCheckResult

    def __init__(self, service: UrlCheckService, field_path: str, url: str):
        super().__init__()
        self.service = service
        self.field_path = field_path
        self.url = url

    def run(self):
        """Run the check in background."""
        try:
            result = self.service.check(self.url)
        except Exception as e:
            logger.exception(f"URL check crashed for {self.url}")
            result = UrlCheckResult(ok=False, error=str(e))
        self.completed.emit(self.field_path, self.url, result)


class UrlValidationController(BaseController):
    """
    Debounced per-field URL reachability checks.

    Signals:
        status_changed(str, str, str): field path, UrlStatus value, message
    """

    status_changed = pyqtSignal(str, str, str)

    def __init__(self, service: Optional[UrlCheckService] = None,
                 debounce_ms: int = None, parent=None):
        super().__init__(parent)
        self.service = service or UrlCheckService()
        self.debounce_ms = Config.URL_CHECK_DEBOUNCE_MS if debounce_ms is None else debounce_ms

        self._timers: Dict[str, QTimer] = {}
        self._current_urls: Dict[str, str] = {}
        # field path -> (url, status, message) of the last finished check
        self._results: Dict[str, Tuple[str, str, str]] = {}
        self._workers: List[UrlCheckWorker] = []

    def status_of(self, field_path: str) -> str:
        if field_path in self._timers and self._timers[field_path].isActive():
            return UrlStatus.VALIDATING
        url = self._current_urls.get(field_path)
        result = self._results.get(field_path)
        if not url:
            return UrlStatus.IDLE
        if result and result[0] == url:
            return result[1]
        return UrlStatus.VALIDATING

    def schedule(self, field_path: str, url: str):
        """
        Schedule a check of ``url`` for ``field_path``.

        Empty or malformed URLs reset the field to idle; a URL that was
        already checked for this field reports its previous result.
        """
        self._stop_timer(field_path)
        url = (url or "").strip() if isinstance(url, str) else ""

        if not url or not is_valid_url(url):
            self._current_urls.pop(field_path, None)
            self.status_changed.emit(field_path, UrlStatus.IDLE, "")
            return

        self._current_urls[field_path] = url
        previous = self._results.get(field_path)
        if previous and previous[0] == url:
            logger.debug(f"URL already validated for {field_path}: {url}")
            self.status_changed.emit(field_path, previous[1], previous[2])
            return

        self.status_changed.emit(field_path, UrlStatus.VALIDATING, tr("validation.url.pending"))

        self._timer_for(field_path).start(self.debounce_ms)

    def cancel(self, field_path: str):
        """Forget a field; a running check for it is ignored when it finishes."""
        self._stop_timer(field_path)
        self._current_urls.pop(field_path, None)
        self._results.pop(field_path, None)

    def cancel_all(self):
        for field_path in list(self._timers):
            self._stop_timer(field_path)
        self._current_urls.clear()
        self._results.clear()

    def wait_for_workers(self, timeout_ms: int = 10000) -> bool:
        """Block until running checks finish. Used on shutdown."""
        return all(worker.wait(timeout_ms) for worker in list(self._workers))

    def _start_check(self, field_path: str):
        url = self._current_urls.get(field_path)
        if not url:
            return

        self._workers = [worker for worker in self._workers if not worker.isFinished()]
        worker = UrlCheckWorker(self.service, field_path, url)
        worker.completed.connect(self._on_check_completed)
        self._workers.append(worker)
        self._emit_started("url_check")
        worker.start()

    def _on_check_completed(self, field_path: str, url: str, result: UrlCheckResult):
        self._emit_completed("url_check", result.ok)
        if self._current_urls.get(field_path) != url:
            logger.debug(f"Dropping stale URL check for {field_path}: {url}")
            return

        status = UrlStatus.VALID if result.ok else UrlStatus.INVALID
        message = result.message
        self._results[field_path] = (url, status, message)
        self.status_changed.emit(field_path, status, message)

    def _timer_for(self, field_path: str) -> QTimer:
        """One debounce timer per field, reused for every edit of that field."""
        timer = self._timers.get(field_path)
        if timer is None:
            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.timeout.connect(partial(self._start_check, field_path))
            self._timers[field_path] = timer
        return timer

    def _stop_timer(self, field_path: str):
        timer = self._timers.get(field_path)
        if timer and timer.isActive():
            timer.stop()
