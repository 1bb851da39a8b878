"""ValidationResult — typed changes plus structured, field-scoped errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

CAST_CLAUSE = "cast"


class FieldError(NamedTuple):
    """A single validation error attached to ``field``.

    ``context`` carries structured metadata, e.g. ``{"clause": "not_a_map",
    "index": 0}`` for sort errors or ``{"clause": "cast", ...}`` for values
    that could not be coerced to their declared type.
    """

    field: str
    message: str
    context: dict[str, Any]


def default_changes_factory() -> dict[str, Any]:
    """Factory for the mutable default of ``ValidationResult.changes``."""
    return {}


@dataclass(frozen=True)
class ValidationResult:
    """Collects typed values and field-level validation errors.

    Instances are immutable: every ``with_*`` / ``put_*`` / ``delete_*``
    method returns a new result.

    Usage::

        result = ValidationResult.success({"page": 1})
        result = result.with_error("page_size", "is required", clause="missing")
        result.is_valid  # False
    """

    changes: dict[str, Any] = field(default_factory=default_changes_factory)
    errors: tuple[FieldError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    # ── Factory methods ──────────────────────────────────────────

    @classmethod
    def success(cls, changes: dict[str, Any] | None = None) -> ValidationResult:
        return cls(changes=dict(changes or {}))

    @classmethod
    def failure(
        cls,
        errors: list[FieldError] | tuple[FieldError, ...],
        changes: dict[str, Any] | None = None,
    ) -> ValidationResult:
        return cls(changes=dict(changes or {}), errors=tuple(errors))

    # ── Merging ──────────────────────────────────────────────────

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Union of two results; ``other``'s changes win, errors are appended."""
        return ValidationResult(
            changes={**self.changes, **other.changes},
            errors=self.errors + other.errors,
        )

    # ── Errors ───────────────────────────────────────────────────

    def with_error(
        self, field_name: str, message: str, **context: Any
    ) -> ValidationResult:
        """Return a copy with one more error for *field_name*."""
        error = FieldError(field_name, message, dict(context))
        return ValidationResult(changes=self.changes, errors=(*self.errors, error))

    def without_errors(self, field_name: str) -> ValidationResult:
        """Return a copy with every error on *field_name* removed."""
        return ValidationResult(
            changes=self.changes,
            errors=tuple(e for e in self.errors if e.field != field_name),
        )

    def errors_for(self, field_name: str) -> list[FieldError]:
        return [e for e in self.errors if e.field == field_name]

    def has_error(self, field_name: str) -> bool:
        return any(e.field == field_name for e in self.errors)

    def get_error(self, field_name: str) -> FieldError | None:
        """First error recorded on *field_name*, or ``None``."""
        for error in self.errors:
            if error.field == field_name:
                return error
        return None

    def is_cast_error(self, field_name: str) -> bool:
        """True if *field_name* failed to cast to its declared type."""
        return any(
            e.field == field_name and e.context.get("clause") == CAST_CLAUSE
            for e in self.errors
        )

    # ── Changes ──────────────────────────────────────────────────

    def get_change(self, field_name: str, default: Any = None) -> Any:
        return self.changes.get(field_name, default)

    def put_change(self, field_name: str, value: Any) -> ValidationResult:
        return ValidationResult(
            changes={**self.changes, field_name: value}, errors=self.errors
        )

    def delete_change(self, field_name: str) -> ValidationResult:
        changes = {k: v for k, v in self.changes.items() if k != field_name}
        return ValidationResult(changes=changes, errors=self.errors)

    def __bool__(self) -> bool:
        return self.is_valid
