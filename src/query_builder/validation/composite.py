"""CompositeValidator — chains custom validators, collects all errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..ports.validation import ResultValidator
    from .result import ValidationResult


class CompositeValidator:
    """Runs a list of result validators in order.

    Each validator receives the result produced by the previous one, so
    errors accumulate instead of stopping at the first failing check.
    An instance is itself a ``ResultValidator`` and can be passed as the
    ``custom_validator`` of :meth:`QueryBuilder.new`.

    Usage::

        validator = CompositeValidator([search_min_length, adult_only_on_weekdays])
        qb = QueryBuilder.new(repo, query, params, types, validator)
    """

    def __init__(self, validators: list[ResultValidator] | None = None) -> None:
        self._validators: list[ResultValidator] = list(validators or [])

    def add(self, validator: ResultValidator) -> None:
        """Append a validator to the chain."""
        self._validators.append(validator)

    def __call__(self, result: ValidationResult) -> ValidationResult:
        for validator in self._validators:
            result = validator(result)
        return result
