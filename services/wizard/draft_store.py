# -*- coding: utf-8 -*-
"""
Draft Store - debounced local persistence of the in-progress wizard record.

Writes are coalesced with a single-shot QTimer: every ``write()`` restarts the
timer and only the latest record is stored when it fires. Drafts live in the
local ``drafts`` table under one storage key; there is no sync.
"""

import json
import math
from typing import Any, Dict, Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from app.config import Config
from repositories.draft_repository import DraftRepository
from services.error_mapper import map_exception
from services.exceptions import DraftStorageException
from utils.logger import get_logger

logger = get_logger(__name__)

# Fields that always carry a default and say nothing about user input
SYSTEM_FIELDS = frozenset({
    "has_pro_rata_rights",
    "fund",
    "stage_at_investment",
    "instrument",
    "status",
    "founder_role",
})


def _is_meaningful(value: Any) -> bool:
    if value is None or value == "" or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple)):
        return any(_is_meaningful(item) for item in value)
    if isinstance(value, dict):
        return any(_is_meaningful(item) for item in value.values())
    return True


def has_meaningful_data(record: Optional[Dict[str, Any]]) -> bool:
    """True when any non-system field holds real user input."""
    if not record:
        return False
    return any(
        _is_meaningful(value)
        for key, value in record.items()
        if key not in SYSTEM_FIELDS
    )


def clean_for_storage(record: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None and NaN values so they are omitted from the stored JSON."""
    return {
        key: value for key, value in record.items()
        if value is not None and not (isinstance(value, float) and math.isnan(value))
    }


class DraftStore(QObject):
    """
    Debounced draft persistence.

    Signals:
        draft_saved(str): storage key, after a write reached the backend
        draft_cleared(str): storage key, after clear()
        save_failed(str): user-facing message when the backend rejected a write
    """

    draft_saved = pyqtSignal(str)
    draft_cleared = pyqtSignal(str)
    save_failed = pyqtSignal(str)

    def __init__(self, repository: DraftRepository, storage_key: str = None,
                 debounce_ms: int = None, parent=None):
        super().__init__(parent)
        self.repository = repository
        self.storage_key = storage_key or Config.DRAFT_STORAGE_KEY
        self.debounce_ms = Config.DRAFT_DEBOUNCE_MS if debounce_ms is None else debounce_ms

        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.timeout.connect(self.flush)
        self._pending_payload: Optional[str] = None
        self._last_saved_payload: Optional[str] = None

    @property
    def has_pending_write(self) -> bool:
        return self._pending_payload is not None

    def write(self, record: Dict[str, Any], has_interacted: bool = True,
              suppress: bool = False) -> bool:
        """
        Schedule a debounced write of ``record``.

        Returns True when a write was scheduled. Nothing is scheduled before
        the user has interacted, while auto-save is suppressed, or when the
        record is unchanged since the last write.
        """
        if suppress:
            logger.debug("Draft write skipped: auto-save suppressed")
            return False
        if not has_interacted:
            return False

        payload = self._serialize(record)
        if payload == self._last_saved_payload and self._pending_payload is None:
            return False
        if payload == self._pending_payload:
            return False

        self._pending_payload = payload

        self._debounce_timer.start(self.debounce_ms)
        return True

    def flush(self) -> bool:
        """Write the pending payload now. Returns True when something was stored."""
        self._stop_timer()
        payload = self._pending_payload
        self._pending_payload = None
        if payload is None or payload == self._last_saved_payload:
            return False

        try:
            self.repository.set(self.storage_key, payload)
        except Exception as e:
            # Timer slot: the error must not escape into the Qt event loop
            error = DraftStorageException(str(e), storage_key=self.storage_key, original_error=e)
            logger.error(f"Draft write failed for '{self.storage_key}': {e}")
            self.save_failed.emit(map_exception(error))
            return False

        self._last_saved_payload = payload
        logger.debug(f"Draft saved ({len(payload)} bytes)")
        self.draft_saved.emit(self.storage_key)
        return True

    def cancel_pending(self):
        """Drop a scheduled write without storing it."""
        if self._pending_payload is not None:
            logger.debug("Pending draft write cancelled")
        self._stop_timer()
        self._pending_payload = None

    def read(self) -> Optional[Dict[str, Any]]:
        """
        Read the stored draft once.

        Corrupted payloads are deleted and reported as absent.
        """
        payload = self.repository.get(self.storage_key)
        if payload is None:
            return None

        try:
            record = json.loads(payload)
        except ValueError as e:
            logger.warning(f"Discarding corrupted draft '{self.storage_key}': {e}")
            self.repository.delete(self.storage_key)
            return None

        if not isinstance(record, dict):
            logger.warning(f"Discarding draft '{self.storage_key}': not an object")
            self.repository.delete(self.storage_key)
            return None

        self._last_saved_payload = self._serialize(record)
        logger.info(f"Draft loaded from '{self.storage_key}'")
        return record

    def clear(self):
        """Delete the draft and cancel pending writes. Safe to call repeatedly."""
        self.cancel_pending()
        self.repository.delete(self.storage_key)
        self._last_saved_payload = None
        self.draft_cleared.emit(self.storage_key)

    def _stop_timer(self):
        if self._debounce_timer.isActive():
            self._debounce_timer.stop()

    @staticmethod
    def _serialize(record: Dict[str, Any]) -> str:
        return json.dumps(clean_for_storage(record or {}), sort_keys=True, default=str)
