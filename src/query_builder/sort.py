"""Sort clause grammar: wire-format parsing and programmatic validation.

Wire format is an ordered list of one-key maps ``[{"field": "direction"}]``.
Each clause becomes ``SortClause(direction, field)``; the swap matches the
``(direction, field)`` convention of ordering clauses and is intentional.

Both entry points work on a :class:`ValidationResult` and stop at the first
failing category, reporting only the first offending index (find-first, not
collect-all).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Callable

    from .validation.result import ValidationResult

SORT_KEY = "sort"


class SortDirection(str, Enum):
    """Supported ordering directions."""

    ASC = "asc"
    ASC_NULLS_FIRST = "asc_nulls_first"
    ASC_NULLS_LAST = "asc_nulls_last"
    DESC = "desc"
    DESC_NULLS_FIRST = "desc_nulls_first"
    DESC_NULLS_LAST = "desc_nulls_last"

    @property
    def is_descending(self) -> bool:
        return self.value.startswith("desc")

    @property
    def nulls_first(self) -> bool | None:
        """``True``/``False`` when explicit, ``None`` for the backend default."""
        if self.value.endswith("_nulls_first"):
            return True
        if self.value.endswith("_nulls_last"):
            return False
        return None


SORT_DIRECTIONS: tuple[str, ...] = tuple(d.value for d in SortDirection)


class SortClause(NamedTuple):
    """One ordering key: ``direction`` applied to ``field``."""

    direction: SortDirection
    field: str


class SortErrorKind(str, Enum):
    """Values of ``context["clause"]`` for sort errors."""

    NOT_A_LIST = "not_a_list"
    NOT_A_MAP = "not_a_map"
    NOT_A_ONE_KEY_MAP = "not_a_one_key_map"
    NOT_A_PAIR = "not_a_pair"
    INVALID_DIRECTION = "invalid_direction"
    INVALID_FIELD = "invalid_field"


_INVALID_DIRECTION_MSG = "sorting direction is not one of: " + ", ".join(
    SORT_DIRECTIONS
)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _find_index(items: Sequence[Any], predicate: Callable[[Any], bool]) -> int | None:
    for idx, item in enumerate(items):
        if predicate(item):
            return idx
    return None


def _not_a_list(result: ValidationResult) -> ValidationResult:
    return result.with_error(
        SORT_KEY,
        "must be a list of sort clauses",
        clause=SortErrorKind.NOT_A_LIST.value,
    )


def _clause_error(
    result: ValidationResult, idx: int, kind: SortErrorKind, msg: str
) -> ValidationResult:
    return result.with_error(
        SORT_KEY, f"clause {idx} {msg}", index=idx, clause=kind.value
    )


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------


def _wire_direction(clause: Mapping[str, Any]) -> Any:
    return next(iter(clause.values()))


_WIRE_CHECKS: tuple[tuple[SortErrorKind, str, Callable[[Any], bool]], ...] = (
    (
        SortErrorKind.NOT_A_MAP,
        "is not a map",
        lambda c: not isinstance(c, Mapping),
    ),
    (
        SortErrorKind.NOT_A_ONE_KEY_MAP,
        "is not a one-key map",
        lambda c: len(c) != 1,
    ),
    (
        SortErrorKind.INVALID_DIRECTION,
        _INVALID_DIRECTION_MSG,
        lambda c: _wire_direction(c) not in SORT_DIRECTIONS,
    ),
)


def parse_wire_clause(clause: Mapping[str, Any]) -> SortClause:
    """``{"field": "direction"}`` -> ``SortClause(direction, field)``."""
    field, direction = next(iter(clause.items()))
    return SortClause(SortDirection(direction), str(field))


def cast_sort_clauses(result: ValidationResult, raw: Any) -> ValidationResult:
    """Validate the raw ``sort`` param and record it as the ``sort`` change.

    ``None`` means no sort was requested and yields an empty sort.
    """
    if raw is None:
        return result.put_change(SORT_KEY, [])
    if not _is_list(raw):
        return _not_a_list(result)

    for kind, msg, is_invalid in _WIRE_CHECKS:
        idx = _find_index(raw, is_invalid)
        if idx is not None:
            return _clause_error(result, idx, kind, msg)

    return result.put_change(SORT_KEY, [parse_wire_clause(c) for c in raw])


def to_wire(sort: Sequence[SortClause]) -> list[dict[str, str]]:
    """Inverse of :func:`cast_sort_clauses` for a valid sort."""
    return [{clause.field: SortDirection(clause.direction).value} for clause in sort]


# ---------------------------------------------------------------------------
# Programmatic sort
# ---------------------------------------------------------------------------


def _is_pair(clause: Any) -> bool:
    return _is_list(clause) and len(clause) == 2


def _is_field_name(value: Any) -> bool:
    return isinstance(value, str) and value != ""


_PARSED_CHECKS: tuple[tuple[SortErrorKind, str, Callable[[Any], bool]], ...] = (
    (
        SortErrorKind.NOT_A_PAIR,
        "is not a (direction, field) pair",
        lambda c: not _is_pair(c),
    ),
    (
        SortErrorKind.INVALID_DIRECTION,
        _INVALID_DIRECTION_MSG,
        lambda c: c[0] not in SORT_DIRECTIONS,
    ),
    (
        SortErrorKind.INVALID_FIELD,
        "sorting field is not a non-empty string",
        lambda c: not _is_field_name(c[1]),
    ),
)


def normalise_sort(sort: Sequence[Any]) -> list[SortClause]:
    """Coerce already validated pairs into ``SortClause`` values."""
    return [SortClause(SortDirection(direction), field) for direction, field in sort]


def validate_sort(result: ValidationResult, sort: Any) -> ValidationResult:
    """Validate an already parsed sort and record it as the ``sort`` change."""
    if not _is_list(sort):
        return _not_a_list(result)

    for kind, msg, is_invalid in _PARSED_CHECKS:
        idx = _find_index(sort, is_invalid)
        if idx is not None:
            return _clause_error(result, idx, kind, msg)

    return result.put_change(SORT_KEY, normalise_sort(sort))


def sort_fields(sort: Sequence[SortClause]) -> list[str]:
    return [clause.field for clause in sort]
