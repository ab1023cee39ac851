# -*- coding: utf-8 -*-
"""
Field Schema Registry - Declarative per-step and whole-record rules.

A registry is built once from ordered ``StepDefinition`` objects. It owns
which fields each step validates, the format rules of every field and the
conditional requirements keyed on discriminator fields. Validation is pure:
no I/O, and malformed input is always reported as issues, never raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from services.exceptions import InvalidStepError, SchemaDefinitionError
from services.validation.validation_strategy import (
    ConditionalRule,
    ErrorKind,
    FieldRule,
    IsBoolean,
    IsInteger,
    IsNumber,
    IsString,
    ValidationIssue,
    is_empty_value,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class FieldKind(Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    LIST = "list"


_TYPE_RULES = {
    FieldKind.STRING: IsString(),
    FieldKind.NUMBER: IsNumber(),
    FieldKind.INTEGER: IsInteger(),
    FieldKind.BOOLEAN: IsBoolean(),
}


@dataclass(frozen=True)
class FieldSpec:
    """Shape and constraints of one record field."""
    name: str
    label: str = ""
    kind: FieldKind = FieldKind.STRING
    required: bool = False
    required_message: str = ""
    rules: Tuple[FieldRule, ...] = ()
    default: Any = None
    # LIST fields hold sub-records described by item_fields
    item_fields: Tuple["FieldSpec", ...] = ()
    min_items: int = 0
    max_items: Optional[int] = None
    min_items_message: str = ""
    max_items_message: str = ""
    uppercase: bool = False
    check_reachability: bool = False

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace("_", " ").capitalize()

    @property
    def missing_message(self) -> str:
        return self.required_message or f"{self.display_label} is required"

    @property
    def all_rules(self) -> Tuple[FieldRule, ...]:
        type_rule = _TYPE_RULES.get(self.kind)
        return ((type_rule,) if type_rule else ()) + tuple(self.rules)

    def item_field(self, name: str) -> Optional["FieldSpec"]:
        for spec in self.item_fields:
            if spec.name == name:
                return spec
        return None


@dataclass(frozen=True)
class StepDefinition:
    """One wizard step: which fields it owns and validates."""
    index: int
    title: str
    fields: Tuple[FieldSpec, ...] = ()
    conditionals: Tuple[ConditionalRule, ...] = ()

    @property
    def field_names(self) -> FrozenSet[str]:
        return frozenset(spec.name for spec in self.fields)

    @property
    def required_names(self) -> FrozenSet[str]:
        return frozenset(spec.name for spec in self.fields if spec.required)


@dataclass
class SchemaResult:
    """Outcome of a schema pass."""
    success: bool
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> Dict[str, List[str]]:
        """Issues keyed by dotted path, messages in discovery order."""
        error_map: Dict[str, List[str]] = {}
        for issue in self.issues:
            messages = error_map.setdefault(issue.dotted_path, [])
            if issue.message not in messages:
                messages.append(issue.message)
        return error_map

    @property
    def first_path(self) -> Optional[str]:
        return self.issues[0].dotted_path if self.issues else None

    @classmethod
    def from_issues(cls, issues: List[ValidationIssue]) -> "SchemaResult":
        return cls(success=not issues, issues=issues)


class SchemaRegistry:
    """
    Registry of step definitions with pure validation functions.

    Invariants checked when the registry is built:
    - steps are indexed 0..N-1 in order
    - every field belongs to exactly one step
    - conditional rules only reference fields of their own step
    """

    def __init__(self, steps: Sequence[StepDefinition]):
        self._steps: Tuple[StepDefinition, ...] = tuple(steps)
        self._field_specs: Dict[str, FieldSpec] = {}
        self._field_steps: Dict[str, int] = {}
        self._field_order: Dict[str, int] = {}
        self._check_definition()
        logger.debug(
            f"Schema registry built: {len(self._steps)} steps, {len(self._field_specs)} fields"
        )

    # ------------------------------------------------------------------
    # Definition checks
    # ------------------------------------------------------------------

    def _check_definition(self):
        if not self._steps:
            raise SchemaDefinitionError("At least one step must be defined")

        for position, step in enumerate(self._steps):
            if step.index != position:
                raise SchemaDefinitionError(
                    f"Step '{step.title}' has index {step.index}, expected {position}"
                )
            for spec in step.fields:
                if spec.name in self._field_steps:
                    raise SchemaDefinitionError(
                        f"Field '{spec.name}' is declared in steps "
                        f"{self._field_steps[spec.name]} and {step.index}",
                        fields=[spec.name],
                    )
                if spec.kind == FieldKind.LIST and not spec.item_fields:
                    raise SchemaDefinitionError(
                        f"List field '{spec.name}' has no item fields", fields=[spec.name]
                    )
                self._field_specs[spec.name] = spec
                self._field_steps[spec.name] = step.index
                self._field_order[spec.name] = len(self._field_order)

            for rule in step.conditionals:
                stray = [name for name in rule.field_names if name not in step.field_names]
                if stray:
                    raise SchemaDefinitionError(
                        f"Conditional on '{rule.discriminator}' references fields outside "
                        f"step {step.index}: {', '.join(stray)}",
                        fields=stray,
                    )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def steps(self) -> Tuple[StepDefinition, ...]:
        return self._steps

    @property
    def step_count(self) -> int:
        return len(self._steps)

    @property
    def last_step_index(self) -> int:
        return len(self._steps) - 1

    def get_step(self, step_index: int) -> StepDefinition:
        if not isinstance(step_index, int) or isinstance(step_index, bool) \
                or not 0 <= step_index < len(self._steps):
            raise InvalidStepError(step_index, len(self._steps))
        return self._steps[step_index]

    def get_step_fields(self, step_index: int) -> FrozenSet[str]:
        return self.get_step(step_index).field_names

    def all_field_names(self) -> FrozenSet[str]:
        return frozenset(self._field_specs)

    def step_for_field(self, name: str) -> Optional[int]:
        return self._field_steps.get(name.split(".")[0])

    def field_spec(self, path: str) -> Optional[FieldSpec]:
        """Resolve ``name`` or ``list_name.N.item_name`` to its spec."""
        parts = path.split(".")
        spec = self._field_specs.get(parts[0])
        if spec is None or len(parts) == 1:
            return spec
        if spec.kind != FieldKind.LIST or len(parts) != 3 or not parts[1].isdigit():
            return None
        return spec.item_field(parts[2])

    def field_specs(self) -> List[FieldSpec]:
        return [spec for step in self._steps for spec in step.fields]

    def inapplicable_fields(self, record: Dict[str, Any]) -> FrozenSet[str]:
        """Fields cleared by the conditionals that apply to ``record``."""
        cleared = set()
        for step in self._steps:
            for rule in step.conditionals:
                if rule.applies(record):
                    cleared.update(rule.cleared)
        return frozenset(cleared)

    def defaults(self) -> Dict[str, Any]:
        return {
            spec.name: spec.default
            for spec in self.field_specs()
            if spec.default is not None
        }

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_step_schema(self, step_index: int, partial_record: Dict[str, Any]) -> SchemaResult:
        """Validate only the fields owned by one step; other keys are ignored."""
        step = self.get_step(step_index)
        record = partial_record if isinstance(partial_record, dict) else {}
        return SchemaResult.from_issues(
            self._validate_fields(step.fields, step.conditionals, record)
        )

    def validate_full_schema(self, record: Dict[str, Any]) -> SchemaResult:
        """Validate every field of every step including cross-field conditionals."""
        record = record if isinstance(record, dict) else {}
        fields = tuple(spec for step in self._steps for spec in step.fields)
        conditionals = tuple(rule for step in self._steps for rule in step.conditionals)
        return SchemaResult.from_issues(self._validate_fields(fields, conditionals, record))

    def validate_formats(self, record: Dict[str, Any]) -> SchemaResult:
        """Format checks on present values only: no required or conditional checks."""
        issues: List[ValidationIssue] = []
        record = record if isinstance(record, dict) else {}
        for spec in self.field_specs():
            issues.extend(self._check_field(spec, record.get(spec.name), (spec.name,),
                                            check_required=False))
        return SchemaResult.from_issues(issues)

    def validate_value(self, path: str, value: Any) -> List[str]:
        """Format messages for a single present value at ``path``."""
        spec = self.field_spec(path)
        if spec is None or is_empty_value(value):
            return []
        parts = tuple(int(p) if p.isdigit() else p for p in path.split("."))
        return [issue.message for issue in
                self._check_field(spec, value, parts, check_required=False)]

    def _validate_fields(self, fields: Sequence[FieldSpec],
                         conditionals: Sequence[ConditionalRule],
                         record: Dict[str, Any]) -> List[ValidationIssue]:
        normalized = self._normalize(fields, conditionals, record)

        issues: List[ValidationIssue] = []
        for spec in fields:
            issues.extend(self._check_field(spec, normalized.get(spec.name), (spec.name,)))
        for rule in conditionals:
            issues.extend(rule.validate(normalized))

        # Report in declaration order so the first issue is the topmost field
        issues.sort(key=lambda issue: self._field_order.get(issue.path[0], len(self._field_order)))
        return issues

    def _normalize(self, fields: Sequence[FieldSpec],
                   conditionals: Sequence[ConditionalRule],
                   record: Dict[str, Any]) -> Dict[str, Any]:
        normalized = {}
        for spec in fields:
            value = record.get(spec.name)
            if is_empty_value(value) and not isinstance(value, (list, dict)):
                value = spec.default
            if not is_empty_value(value) or isinstance(value, (list, dict)):
                normalized[spec.name] = value
        for rule in conditionals:
            normalized = rule.normalize(normalized)
        return normalized

    def _check_field(self, spec: FieldSpec, value: Any, path: Tuple[Any, ...],
                     check_required: bool = True) -> List[ValidationIssue]:
        if is_empty_value(value):
            if check_required and spec.required:
                return [ValidationIssue(path, spec.missing_message, ErrorKind.REQUIRED)]
            return []

        if spec.kind == FieldKind.LIST:
            return self._check_list(spec, value, path, check_required)

        issues = []
        for rule in spec.all_rules:
            message = rule.check(value)
            if message:
                issues.append(ValidationIssue(path, message, ErrorKind.FORMAT))
                if rule.terminal:
                    break
        return issues

    def _check_list(self, spec: FieldSpec, items: Any, path: Tuple[Any, ...],
                    check_required: bool) -> List[ValidationIssue]:
        if not isinstance(items, (list, tuple)):
            return [ValidationIssue(path, f"{spec.display_label} must be a list")]

        issues = []
        if check_required and len(items) < spec.min_items:
            issues.append(ValidationIssue(
                path, spec.min_items_message or spec.missing_message, ErrorKind.REQUIRED
            ))
        if spec.max_items is not None and len(items) > spec.max_items:
            issues.append(ValidationIssue(
                path, spec.max_items_message or f"At most {spec.max_items} allowed"
            ))

        for position, item in enumerate(items):
            item_path = path + (position,)
            if not isinstance(item, dict):
                issues.append(ValidationIssue(item_path, "Invalid entry"))
                continue
            for item_spec in spec.item_fields:
                value = item.get(item_spec.name)
                if is_empty_value(value):
                    value = item_spec.default
                issues.extend(self._check_field(
                    item_spec, value, item_path + (item_spec.name,), check_required
                ))
        return issues
