# -*- coding: utf-8 -*-
"""Custom exceptions for the application."""


class InvalidStepError(Exception):
    """Raised when a wizard step index is outside the registered range."""

    def __init__(self, step_index, step_count: int = None):
        message = f"Invalid step index: {step_index}"
        if step_count is not None:
            message += f" (valid range: 0-{step_count - 1})"
        super().__init__(message)
        self.message = message
        self.step_index = step_index
        self.step_count = step_count


class SchemaDefinitionError(Exception):
    """Raised when the field schema itself is malformed."""

    def __init__(self, message: str, fields: list = None):
        super().__init__(message)
        self.message = message
        self.fields = fields or []


class SubmissionException(Exception):
    """Exception raised when persisting an investment fails part-way."""

    def __init__(self, message: str, completed_steps: list = None,
                 original_error: Exception = None, context: str = None):
        super().__init__(message)
        self.message = message
        self.completed_steps = completed_steps or []
        self.original_error = original_error
        self.context = context

    def __str__(self):
        if self.completed_steps:
            return f"{self.message} (completed: {', '.join(self.completed_steps)})"
        return self.message


class MissingRelatedEntitiesError(SubmissionException):
    """Raised when selected VCs no longer exist in the database."""

    def __init__(self, missing_ids: list, missing_names: list = None,
                 completed_steps: list = None):
        self.missing_ids = list(missing_ids)
        self.missing_names = list(missing_names or [])
        names = ", ".join(self.missing_names or self.missing_ids)
        super().__init__(
            f"Cannot create investment: {len(self.missing_ids)} VCs not found in database: {names}",
            completed_steps=completed_steps,
        )


class DraftStorageException(Exception):
    """Exception raised when the draft backend cannot be read or written."""

    def __init__(self, message: str, storage_key: str = None,
                 original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.storage_key = storage_key
        self.original_error = original_error
