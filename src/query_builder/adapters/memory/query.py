"""MemoryQuery — immutable in-memory queryable over plain records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ...sort import SortDirection

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    Predicate = Callable[[Any], bool]


def get_field(record: Any, field: str) -> Any:
    """Read *field* from a mapping or an object; missing values are ``None``."""
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def _sort_key(
    field: str, direction: SortDirection
) -> Callable[[Any], tuple[int, Any]]:
    descending = direction.is_descending
    nulls_first = direction.nulls_first
    if nulls_first is None:
        # PostgreSQL defaults: ASC -> NULLS LAST, DESC -> NULLS FIRST.
        nulls_first = descending
    # Sorting in reverse for descending flips the null rank too.
    null_rank = int(nulls_first == descending)
    value_rank = 1 - null_rank

    def key(record: Any) -> tuple[int, Any]:
        value = get_field(record, field)
        if value is None:
            return (null_rank, 0)
        return (value_rank, value)

    return key


class MemoryQuery:
    """Records plus filter predicates and ordering clauses.

    ``where`` takes callables ``record -> bool``; ``order`` takes a field and
    a :class:`SortDirection`. Nothing is evaluated until :meth:`evaluate`.
    """

    __slots__ = ("_ordering", "_predicates", "_records")

    def __init__(
        self,
        records: Iterable[Any] = (),
        predicates: tuple[Predicate, ...] = (),
        ordering: tuple[tuple[str, SortDirection], ...] = (),
    ) -> None:
        self._records = tuple(records)
        self._predicates = predicates
        self._ordering = ordering

    @property
    def ordering(self) -> tuple[tuple[str, SortDirection], ...]:
        return self._ordering

    def where(self, *criteria: Predicate) -> MemoryQuery:
        return MemoryQuery(self._records, self._predicates + criteria, self._ordering)

    filter = where

    def order(self, field: str, direction: SortDirection | str) -> MemoryQuery:
        clause = (field, SortDirection(direction))
        return MemoryQuery(self._records, self._predicates, (*self._ordering, clause))

    def evaluate(self) -> list[Any]:
        rows = [r for r in self._records if all(p(r) for p in self._predicates)]
        # Stable sorts applied from the least significant key upwards.
        for field, direction in reversed(self._ordering):
            rows.sort(
                key=_sort_key(field, direction), reverse=direction.is_descending
            )
        return rows

    def __repr__(self) -> str:
        return (
            f"MemoryQuery(records={len(self._records)}, "
            f"predicates={len(self._predicates)}, ordering={list(self._ordering)})"
        )
