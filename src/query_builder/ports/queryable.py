"""IQueryable — the capability a base query must offer to the composer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..sort import SortDirection


@runtime_checkable
class IQueryable(Protocol):
    """Composable, immutable query value implemented per storage backend.

    Both methods return a **new** queryable; the receiver is never
    modified in place.
    """

    def where(self, *criteria: Any) -> IQueryable:
        """Extend the query with filter criteria."""
        ...

    def order(self, field: str, direction: SortDirection) -> IQueryable:
        """Extend the query with an ordering clause on *field*."""
        ...
