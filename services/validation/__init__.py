# -*- coding: utf-8 -*-
"""Validation services package."""

from .validation_strategy import ErrorKind, ValidationIssue, ValidationStrategy, ConditionalRule
from .schema_registry import FieldKind, FieldSpec, SchemaRegistry, SchemaResult, StepDefinition
from .investment_schema import build_investment_registry

__all__ = [
    'ErrorKind',
    'ValidationIssue',
    'ValidationStrategy',
    'ConditionalRule',
    'FieldKind',
    'FieldSpec',
    'SchemaRegistry',
    'SchemaResult',
    'StepDefinition',
    'build_investment_registry',
]
