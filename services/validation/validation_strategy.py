# -*- coding: utf-8 -*-
"""
Validation Strategy Pattern - Building blocks for record validation.

Two layers live here:

- ``FieldRule`` subclasses check a single, already non-empty value and
  return an error message or ``None``.
- ``ValidationStrategy`` subclasses look at a whole record and report
  ``ValidationIssue`` objects (cross-field rules such as instrument terms).
"""

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse


class ErrorKind(Enum):
    """Category of a validation issue."""
    FORMAT = "format"
    REQUIRED = "required"
    PENDING = "pending"
    SUBMISSION = "submission"


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found at a (possibly nested) record path."""
    path: Tuple[Any, ...]
    message: str
    kind: ErrorKind = ErrorKind.FORMAT
    discriminator: Optional[str] = None  # set for conditional requirements

    @property
    def dotted_path(self) -> str:
        return ".".join(str(part) for part in self.path)


def is_empty_value(value: Any) -> bool:
    """None, NaN, blank strings and empty collections count as absent."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not (isinstance(value, float) and (math.isnan(value) or math.isinf(value)))
    return False


# =========================================================================
# Field rules
# =========================================================================

class FieldRule(ABC):
    """A format constraint on a single present value."""

    # When a terminal rule fails, later rules for the field are skipped
    terminal = False

    def __init__(self, message: str):
        self.message = message

    @abstractmethod
    def check(self, value: Any) -> Optional[str]:
        """Return an error message, or None when the value passes."""

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r})"


class IsString(FieldRule):
    terminal = True

    def __init__(self, message: str = "Must be text"):
        super().__init__(message)

    def check(self, value):
        return None if isinstance(value, str) else self.message


class IsNumber(FieldRule):
    terminal = True

    def __init__(self, message: str = "Must be a number"):
        super().__init__(message)

    def check(self, value):
        return None if is_number(value) else self.message


class IsInteger(FieldRule):
    terminal = True

    def __init__(self, message: str = "Must be a whole number"):
        super().__init__(message)

    def check(self, value):
        if not is_number(value):
            return self.message
        if isinstance(value, float) and not value.is_integer():
            return self.message
        return None


class IsBoolean(FieldRule):
    terminal = True

    def __init__(self, message: str = "Must be true or false"):
        super().__init__(message)

    def check(self, value):
        return None if isinstance(value, bool) else self.message


class MaxLength(FieldRule):

    def __init__(self, limit: int, message: str):
        super().__init__(message)
        self.limit = limit

    def check(self, value):
        return self.message if len(value) > self.limit else None


class ExactLength(FieldRule):

    def __init__(self, length: int, message: str):
        super().__init__(message)
        self.length = length

    def check(self, value):
        return self.message if len(value) != self.length else None


class Pattern(FieldRule):

    def __init__(self, pattern: str, message: str):
        super().__init__(message)
        self.pattern = re.compile(pattern)

    def check(self, value):
        return None if self.pattern.match(value) else self.message


class Choices(FieldRule):

    def __init__(self, choices: Iterable[str], message: str):
        super().__init__(message)
        self.choices = tuple(choices)

    def check(self, value):
        return None if value in self.choices else self.message


class Positive(FieldRule):

    def __init__(self, message: str = "Must be a positive number"):
        super().__init__(message)

    def check(self, value):
        return None if value > 0 else self.message


class Range(FieldRule):
    """Inclusive numeric bounds with separate messages per side."""

    def __init__(self, minimum: float = None, maximum: float = None,
                 min_message: str = "", max_message: str = ""):
        super().__init__(min_message or max_message)
        self.minimum = minimum
        self.maximum = maximum
        self.min_message = min_message or max_message
        self.max_message = max_message or min_message

    def check(self, value):
        if self.minimum is not None and value < self.minimum:
            return self.min_message
        if self.maximum is not None and value > self.maximum:
            return self.max_message
        return None


class IsUrl(FieldRule):
    terminal = True

    def __init__(self, message: str = "Must be a valid URL"):
        super().__init__(message)

    def check(self, value):
        return None if is_valid_url(value) else self.message


class HostContains(FieldRule):
    """The URL hostname must contain a domain fragment (case-insensitive)."""

    def __init__(self, domain: str, message: str):
        super().__init__(message)
        self.domain = domain.lower()

    def check(self, value):
        host = (urlparse(value.strip()).hostname or "").lower()
        return None if self.domain in host else self.message


class IsEmail(FieldRule):
    EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

    def __init__(self, message: str = "Must be a valid email address"):
        super().__init__(message)

    def check(self, value):
        return None if self.EMAIL_RE.match(value.strip()) else self.message


class IsIsoDate(FieldRule):

    def __init__(self, message: str = "Must be a valid date (YYYY-MM-DD)"):
        super().__init__(message)

    def check(self, value):
        text = value.strip()
        try:
            datetime.fromisoformat(text)
        except ValueError:
            try:
                date.fromisoformat(text)
            except ValueError:
                return self.message
        return None


def is_valid_url(value: Any) -> bool:
    """http(s) URL with a host."""
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# =========================================================================
# Record-level strategies
# =========================================================================

class ValidationStrategy(ABC):
    """
    Abstract base class for record-level validation strategies.

    Each strategy implements a cross-field rule over a whole record.
    """

    @abstractmethod
    def validate(self, record: Dict[str, Any]) -> List[ValidationIssue]:
        """
        Validate a record and return the issues found.

        Args:
            record: Dictionary containing record data to validate

        Returns:
            List of issues (empty list if valid)
        """

    def is_valid(self, record: Dict[str, Any]) -> bool:
        return len(self.validate(record)) == 0


@dataclass(frozen=True)
class ConditionalRule(ValidationStrategy):
    """
    Requirements that switch on when a discriminator takes certain values.

    ``required`` pairs a dependent field with its message. ``cleared``
    fields are not applicable for the discriminator values and are dropped
    during normalization rather than flagged.
    """
    discriminator: str
    values: Tuple[str, ...]
    required: Tuple[Tuple[str, str], ...] = ()
    cleared: Tuple[str, ...] = ()

    def applies(self, record: Dict[str, Any]) -> bool:
        return record.get(self.discriminator) in self.values

    @property
    def field_names(self) -> Tuple[str, ...]:
        return (self.discriminator,) + tuple(name for name, _ in self.required) + self.cleared

    def normalize(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of the record without fields this rule clears."""
        if not self.applies(record):
            return record
        return {key: value for key, value in record.items() if key not in self.cleared}

    def validate(self, record: Dict[str, Any]) -> List[ValidationIssue]:
        if not self.applies(record):
            return []
        return [
            ValidationIssue(
                path=(name,),
                message=message,
                kind=ErrorKind.REQUIRED,
                discriminator=self.discriminator,
            )
            for name, message in self.required
            if is_empty_value(record.get(name))
        ]

