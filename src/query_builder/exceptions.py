"""Exceptions for query-builder.

Validation problems with request parameters are never raised; they are
collected on the builder's :class:`~query_builder.validation.result.ValidationResult`.
The exceptions below signal programming errors made by the library user.
"""

from __future__ import annotations


class QueryBuilderError(Exception):
    """Root exception for the query-builder package."""


class InvalidFunctionError(QueryBuilderError, TypeError):
    """Raised when a filter or sort function is not callable."""

    def __init__(self, kind: str, field_name: str, value: object) -> None:
        self.kind = kind
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"{kind} function for field {field_name!r} must be callable, "
            f"got {type(value).__name__}"
        )
