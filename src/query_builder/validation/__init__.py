"""Validation system: ValidationResult, PydanticCaster, CompositeValidator."""

from __future__ import annotations

from .caster import TYPE_ALIASES, PydanticCaster
from .composite import CompositeValidator
from .result import CAST_CLAUSE, FieldError, ValidationResult

__all__ = [
    "CAST_CLAUSE",
    "CompositeValidator",
    "FieldError",
    "PydanticCaster",
    "TYPE_ALIASES",
    "ValidationResult",
]
