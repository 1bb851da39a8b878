"""PydanticCaster — casts raw request params through pydantic type adapters."""

from __future__ import annotations

import datetime
import decimal
import logging
import uuid
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .result import CAST_CLAUSE, FieldError, ValidationResult

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

# Form-style type names accepted in place of Python types.
TYPE_ALIASES: dict[str, Any] = {
    "string": str,
    "text": str,
    "integer": int,
    "int": int,
    "float": float,
    "decimal": decimal.Decimal,
    "boolean": bool,
    "bool": bool,
    "date": datetime.date,
    "time": datetime.time,
    "datetime": datetime.datetime,
    "naive_datetime": datetime.datetime,
    "utc_datetime": datetime.datetime,
    "uuid": uuid.UUID,
    "map": dict,
}


def type_name(type_tag: Any) -> str:
    if isinstance(type_tag, str):
        return type_tag
    return getattr(type_tag, "__name__", None) or repr(type_tag)


class PydanticCaster:
    """Casts each present schema field with a :class:`pydantic.TypeAdapter`.

    Pydantic runs in lax mode, so the usual form coercions apply
    (``"1"`` -> ``1``, ``"true"`` -> ``True``, ``"2019-01-01"`` -> ``date``).
    Values contained in ``empty_values`` are treated as "no value" and cast
    to ``None`` regardless of the declared type.

    Args:
        empty_values: Raw values that mean "blank".
        aliases: Type-name aliases resolved before building adapters.
    """

    def __init__(
        self,
        *,
        empty_values: tuple[Any, ...] = ("",),
        aliases: Mapping[str, Any] | None = None,
    ) -> None:
        self._empty_values = empty_values
        self._aliases = dict(TYPE_ALIASES if aliases is None else aliases)
        self._adapters: dict[Any, TypeAdapter[Any]] = {}

    def resolve_type(self, type_tag: Any) -> Any:
        if isinstance(type_tag, str):
            try:
                return self._aliases[type_tag]
            except KeyError:
                raise ValueError(f"Unknown param type alias: {type_tag!r}") from None
        return type_tag

    def adapter_for(self, type_tag: Any) -> TypeAdapter[Any]:
        """Adapter for *type_tag*, built once per tag and reused across casts."""
        try:
            return self._adapters[type_tag]
        except KeyError:
            adapter: TypeAdapter[Any] = TypeAdapter(self.resolve_type(type_tag))
            self._adapters[type_tag] = adapter
            return adapter

    def _is_empty(self, value: Any) -> bool:
        return isinstance(value, str) and value in self._empty_values

    def cast(
        self, params: Mapping[str, Any], param_types: Mapping[str, Any]
    ) -> ValidationResult:
        changes: dict[str, Any] = {}
        errors: list[FieldError] = []

        for key, raw in params.items():
            if key not in param_types:
                continue
            if raw is None or self._is_empty(raw):
                changes[key] = None
                continue

            type_tag = param_types[key]
            try:
                changes[key] = self.adapter_for(type_tag).validate_python(raw)
            except PydanticValidationError as exc:
                first = exc.errors()[0]
                errors.append(
                    FieldError(
                        key,
                        first.get("msg", "is invalid"),
                        {
                            "clause": CAST_CLAUSE,
                            "type": type_name(type_tag),
                            "reason": first.get("type", "value_error"),
                        },
                    )
                )

        if errors:
            logger.debug(
                "Cast failed for fields %s", ", ".join(e.field for e in errors)
            )
        return ValidationResult(changes=changes, errors=tuple(errors))
