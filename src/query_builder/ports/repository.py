"""IQueryRepository — execution side consumed by the fetcher."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..pagination import Page, Pagination


@runtime_checkable
class IQueryRepository(Protocol):
    """Execute a composed query, either in full or one page at a time.

    Failures are the repository's own exceptions; callers receive them
    unchanged.
    """

    async def all(self, query: Any) -> list[Any]:
        """Return every record matched by *query*."""
        ...

    async def paginate(self, query: Any, pagination: Pagination) -> Page[Any]:
        """Return the requested page of records matched by *query*."""
        ...
