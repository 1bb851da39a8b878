"""InMemoryQueryRepository — list-backed repository for tests and small data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...pagination import Page
from .query import MemoryQuery

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ...pagination import Pagination


class InMemoryQueryRepository:
    """In-memory implementation of ``IQueryRepository``.

    Executes :class:`MemoryQuery` values built from :meth:`query`.
    """

    def __init__(self, records: Iterable[Any] = ()) -> None:
        self._records: list[Any] = list(records)

    def query(self) -> MemoryQuery:
        """Base query over the records currently stored."""
        return MemoryQuery(self._records)

    async def all(self, query: MemoryQuery) -> list[Any]:
        return query.evaluate()

    async def paginate(self, query: MemoryQuery, pagination: Pagination) -> Page[Any]:
        rows = query.evaluate()
        entries = rows[pagination.offset : pagination.offset + pagination.limit]
        return Page.build(entries, pagination, total_entries=len(rows))

    # ── Test helpers ─────────────────────────────────────────────

    def add(self, record: Any) -> None:
        self._records.append(record)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)
