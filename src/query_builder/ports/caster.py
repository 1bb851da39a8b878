"""ITypedCaster — protocol for coercing raw params into typed values."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..validation.result import ValidationResult


@runtime_checkable
class ITypedCaster(Protocol):
    """Coerce string-keyed raw values into typed values given a schema.

    Implementations must:

    - cast keys present in ``params`` that are fields of ``param_types``
      and ignore every other key;
    - record a field error with ``context["clause"] == "cast"`` for a
      value that cannot be coerced to its declared type;
    - expose successful casts as :attr:`ValidationResult.changes`.
    """

    def cast(
        self, params: Mapping[str, Any], param_types: Mapping[str, Any]
    ) -> ValidationResult:
        """Return the cast result for *params* against *param_types*."""
        ...
