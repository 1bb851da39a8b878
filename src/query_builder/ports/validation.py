"""Validator signatures applied after the typed cast."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..validation.result import ValidationResult

ResultValidator: TypeAlias = "Callable[[ValidationResult], ValidationResult]"


def identity_validator(result: ValidationResult) -> ValidationResult:
    """Default custom validator: returns the cast result unchanged."""
    return result
