# -*- coding: utf-8 -*-
"""
Base Controller
===============
Shared plumbing for the wizard controllers.

Controllers report the lifecycle of their operations (a submission, a URL
check, a VC search) through the same four signals. Several operations may
be in flight at once, e.g. one URL check per link field, so the loading
state stays on until the last of them finishes.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, TypeVar

from PyQt5.QtCore import QObject, pyqtSignal

from services.error_mapper import map_exception
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a controller call the UI acts on directly."""
    success: bool
    data: Optional[T] = None
    message: str = ""
    errors: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T = None, message: str = "") -> 'OperationResult[T]':
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str, errors: List[str] = None) -> 'OperationResult[T]':
        return cls(success=False, message=message, errors=list(errors or []))


class BaseController(QObject):
    """
    Base controller class.

    Signals:
        operation_started(str): operation name
        operation_completed(str, bool): operation name, success
        operation_error(str, str): operation name, user-facing message
        loading_changed(bool): any operation in flight
    """

    operation_started = pyqtSignal(str)
    operation_completed = pyqtSignal(str, bool)
    operation_error = pyqtSignal(str, str)
    loading_changed = pyqtSignal(bool)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._active = Counter()
        self._last_error = ""

    @property
    def is_loading(self) -> bool:
        return sum(self._active.values()) > 0

    @property
    def last_error(self) -> str:
        """Message of the most recent failed operation."""
        return self._last_error

    def is_running(self, operation: str) -> bool:
        return self._active[operation] > 0

    def _emit_started(self, operation: str):
        was_loading = self.is_loading
        self._active[operation] += 1
        self.operation_started.emit(operation)
        if not was_loading:
            self.loading_changed.emit(True)

    def _finish(self, operation: str):
        if self._active[operation] > 0:
            self._active[operation] -= 1
        if self._active[operation] == 0:
            del self._active[operation]
        if not self.is_loading:
            self.loading_changed.emit(False)

    def _emit_completed(self, operation: str, success: bool):
        self._finish(operation)
        self.operation_completed.emit(operation, success)

    def _emit_error(self, operation: str, error: str):
        self._last_error = error
        logger.error(f"{self.__class__.__name__}.{operation}: {error}")
        self._finish(operation)
        self.operation_error.emit(operation, error)

    def execute_with_error_handling(
        self,
        operation: str,
        func: Callable,
        *args,
        **kwargs
    ) -> OperationResult:
        """Run ``func`` as a named operation; exceptions become a failed result."""
        self._emit_started(operation)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            error_msg = map_exception(e, context=operation)
            self._emit_error(operation, error_msg)
            return OperationResult.fail(message=error_msg)
        self._emit_completed(operation, True)
        return OperationResult.ok(data=result)
