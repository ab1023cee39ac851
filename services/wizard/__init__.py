# -*- coding: utf-8 -*-
"""Wizard services: step validation and draft persistence."""

from .step_validator import StepValidator, resolve_path

__all__ = ['StepValidator', 'resolve_path']
