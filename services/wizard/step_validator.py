# -*- coding: utf-8 -*-
"""
Step validation service for the Investment Wizard.

Validates the wizard record for one step without UI coupling: projects the
record onto the step's fields, coerces loosely typed input, delegates to the
schema registry and flattens nested issues to dotted paths.
"""

import math
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from models.vc import VcInvestment
from services.validation.investment_schema import (
    STEP_COMPANY_FOUNDERS,
    STEP_COMPANY_INVESTMENT,
    STEP_INVESTMENT_TRACKING,
    STEP_MARKETING_PITCH,
    build_investment_registry,
)
from services.validation.schema_registry import FieldKind, FieldSpec, SchemaRegistry, SchemaResult
from services.validation.submission_checks import VcInvestmentStrategy
from services.validation.validation_strategy import is_empty_value
from utils.logger import get_logger

logger = get_logger(__name__)

ErrorMap = Dict[str, List[str]]

_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off")


class StepValidator:
    """Validates wizard step data against the field schema registry."""

    # Step constants
    STEP_COMPANY_INVESTMENT = STEP_COMPANY_INVESTMENT
    STEP_COMPANY_FOUNDERS = STEP_COMPANY_FOUNDERS
    STEP_MARKETING_PITCH = STEP_MARKETING_PITCH
    STEP_INVESTMENT_TRACKING = STEP_INVESTMENT_TRACKING

    def __init__(self, registry: Optional[SchemaRegistry] = None):
        self.registry = registry or build_investment_registry()

    @property
    def step_count(self) -> int:
        return self.registry.step_count

    def get_fields_for_step(self, step_index: int) -> FrozenSet[str]:
        """Field names validated by a step. Raises InvalidStepError when out of range."""
        return self.registry.get_step_fields(step_index)

    def get_step_name(self, step_index: int) -> str:
        """Get display name for step."""
        if 0 <= step_index < self.registry.step_count:
            return self.registry.steps[step_index].title
        return ""

    # ------------------------------------------------------------------
    # Coercion
    # ------------------------------------------------------------------

    def coerce_record(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Return a copy of the record with ambiguous values coerced.

        - numeric strings in number fields become numbers
        - "true"/"false" strings in boolean fields become bools
        - tag lists in text fields become comma separated strings
        - country codes are upper-cased
        - NaN and blank optional values are dropped
        """
        coerced = {}
        for name, value in (record or {}).items():
            spec = self.registry.field_spec(name)
            if spec is None:
                coerced[name] = value
                continue
            value = self.coerce_value(spec, value)
            if is_empty_value(value) and not spec.required and spec.kind != FieldKind.LIST:
                continue
            coerced[name] = value
        return coerced

    def coerce_value(self, spec: FieldSpec, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, float) and math.isnan(value):
            return None

        if spec.kind in (FieldKind.NUMBER, FieldKind.INTEGER):
            if isinstance(value, str):
                text = value.strip().replace(",", "")
                if not text:
                    return None
                try:
                    value = float(text)
                except ValueError:
                    return value
                if math.isnan(value):
                    return None
            if spec.kind == FieldKind.INTEGER and isinstance(value, float) and value.is_integer():
                return int(value)
            return value

        if spec.kind == FieldKind.BOOLEAN:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE_STRINGS:
                    return True
                if lowered in _FALSE_STRINGS:
                    return False
            return value

        if spec.kind == FieldKind.LIST:
            if not isinstance(value, (list, tuple)):
                return value
            return [
                {key: self._coerce_item_value(spec, key, item_value)
                 for key, item_value in item.items()} if isinstance(item, dict) else item
                for item in value
            ]

        if isinstance(value, (list, tuple)):
            value = ", ".join(str(item).strip() for item in value if str(item).strip())
        if spec.uppercase and isinstance(value, str):
            value = value.strip().upper()
        return value

    def _coerce_item_value(self, spec: FieldSpec, key: str, value: Any) -> Any:
        item_spec = spec.item_field(key)
        return self.coerce_value(item_spec, value) if item_spec else value

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_step_result(self, step_index: int, record: Dict[str, Any]) -> SchemaResult:
        fields = self.get_fields_for_step(step_index)
        projected = {name: value for name, value in (record or {}).items() if name in fields}
        return self.registry.validate_step_schema(step_index, self.coerce_record(projected))

    def validate_step(self, step_index: int, record: Dict[str, Any]) -> ErrorMap:
        """
        Validate one step of the record.

        Args:
            step_index: Current step index
            record: Full wizard record; fields of other steps are ignored

        Returns:
            Error map keyed by dotted path (empty when the step is valid)
        """
        result = self.validate_step_result(step_index, record)
        if not result.success:
            logger.debug(f"Step {step_index} invalid: {sorted(result.errors)}")
        return result.errors

    def validate_full(self, record: Dict[str, Any],
                      investments: Sequence[VcInvestment] = ()) -> SchemaResult:
        """Whole-record validation plus investment tracking checks."""
        result = self.registry.validate_full_schema(self.coerce_record(record))
        issues = list(result.issues) + VcInvestmentStrategy(investments).validate(record)
        return SchemaResult.from_issues(issues)

    def format_errors(self, record: Dict[str, Any]) -> ErrorMap:
        """As-you-type format errors of every present value."""
        return self.registry.validate_formats(self.coerce_record(record)).errors

    def clear_resolved(self, error_map: ErrorMap, record: Dict[str, Any]) -> ErrorMap:
        """
        Drop entries whose current value is now present and well-formed.

        Entries for fields that no longer apply (e.g. a conversion cap after
        switching to equity) are dropped too. Unknown paths are kept.
        """
        inapplicable = self.registry.inapplicable_fields(record or {})
        remaining: ErrorMap = {}
        for path, messages in error_map.items():
            if path.split(".")[0] in inapplicable:
                continue
            if not self._is_resolved(path, record or {}):
                remaining[path] = messages
        return remaining

    def _is_resolved(self, path: str, record: Dict[str, Any]) -> bool:
        spec = self.registry.field_spec(path)
        if spec is None:
            return False
        value = self.coerce_value(spec, resolve_path(record, path))
        if spec.kind == FieldKind.LIST:
            if not isinstance(value, list) or len(value) < max(1, spec.min_items):
                return False
            return spec.max_items is None or len(value) <= spec.max_items
        if is_empty_value(value):
            return False
        return not self.registry.validate_value(path, value)


def resolve_path(record: Dict[str, Any], path: str) -> Any:
    """Read ``founders.1.email`` style paths; missing segments give None."""
    current: Any = record
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
    return current
