# -*- coding: utf-8 -*-
"""Centralized error message mapper."""

from services.translation_manager import tr
from services.exceptions import (
    DraftStorageException,
    MissingRelatedEntitiesError,
    SubmissionException,
)
from utils.logger import get_logger

logger = get_logger(__name__)


def map_submission_error(error: SubmissionException) -> str:
    """Map a submission failure to a user-facing message.

    Technical details are logged only - never shown to the user.
    """
    if isinstance(error, MissingRelatedEntitiesError):
        logger.warning(f"Submission referenced missing VCs: {error.missing_ids}")
        return tr("error.submission.missing_vcs",
                  count=len(error.missing_ids),
                  names=", ".join(error.missing_names or error.missing_ids))

    if error.original_error is not None:
        logger.warning(f"Submission failed: {error} | cause: {error.original_error!r}")
    else:
        logger.warning(f"Submission failed: {error}")

    if error.completed_steps:
        return tr("error.submission.partial", steps=", ".join(error.completed_steps))
    return tr("error.submission.failed")


def map_exception(error: Exception, context: str = None) -> str:
    """Map any exception to a user-friendly message.

    Technical details are logged only - never shown to the user.
    """
    if isinstance(error, SubmissionException):
        if not error.context and context:
            error.context = context
        return map_submission_error(error)

    if isinstance(error, DraftStorageException):
        logger.warning(f"Draft storage error ({error.storage_key}): {error.original_error or error}")
        return tr("error.draft.storage")

    logger.warning(f"Unexpected error{f' in {context}' if context else ''}: {error!r}")
    return tr("error.unexpected")
