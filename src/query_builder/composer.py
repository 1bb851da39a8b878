"""Compose filter and sort functions into a single query."""

from __future__ import annotations

from functools import reduce
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .builder import QueryBuilder
    from .sort import SortClause, SortDirection


def default_sort_function(query: Any, field: str, direction: SortDirection) -> Any:
    """Order directly by the entity column ``field`` in ``direction``."""
    return query.order(field, direction)


def apply_filters(builder: QueryBuilder, query: Any) -> Any:
    """Apply every field's filter chain, in filter order.

    Fields without a registered function pass the query through unchanged.
    """
    for field, value in builder.filters.items():
        for function in builder.filter_functions.get(field, ()):
            query = function(query, value)
    return query


def _apply_sort_clause(builder: QueryBuilder, query: Any, clause: SortClause) -> Any:
    function = builder.sort_functions.get(clause.field)
    if function is None:
        return default_sort_function(query, clause.field, clause.direction)
    return function(query, clause.direction)


def apply_sort(builder: QueryBuilder, query: Any) -> Any:
    """Apply sort clauses strictly in sequence order."""
    return reduce(
        lambda acc, clause: _apply_sort_clause(builder, acc, clause),
        builder.sort,
        query,
    )


def compose(builder: QueryBuilder) -> Any:
    """Reduce filters, then sort, over ``builder.base_query``.

    Validity is not checked: an invalid builder still composes from its
    best-effort ``filters`` and ``sort``.
    """
    return apply_sort(builder, apply_filters(builder, builder.base_query))
