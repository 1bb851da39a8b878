"""SQLAlchemyQuery — immutable ``Select`` wrapper implementing ``IQueryable``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, select
from sqlalchemy.orm import QueryableAttribute

from query_builder.sort import SortDirection

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

logger = logging.getLogger(__name__)


def order_clause(column: Any, direction: SortDirection | str) -> ColumnElement[Any]:
    """``column`` ordered in ``direction``, with explicit null placement if any."""
    direction = SortDirection(direction)
    clause = column.desc() if direction.is_descending else column.asc()
    if direction.nulls_first is True:
        return clause.nulls_first()
    if direction.nulls_first is False:
        return clause.nulls_last()
    return clause


def resolve_column(entity: Any, field: str) -> Any | None:
    """Column named *field* on a mapped class or a table, else ``None``."""
    if entity is None:
        return None
    if not isinstance(entity, type) and hasattr(entity, "c"):
        return entity.c.get(field)
    attr = getattr(entity, field, None)
    return attr if isinstance(attr, QueryableAttribute) else None


def primary_entity(stmt: Select[Any]) -> Any | None:
    descriptions = stmt.column_descriptions
    return descriptions[0].get("entity") if descriptions else None


class SQLAlchemyQuery:
    """A ``Select`` statement plus the entity default orderings resolve against.

    Accepts a mapped class (``SQLAlchemyQuery(User)``) or an existing
    statement (``SQLAlchemyQuery(select(User).join(...))``). Filter functions
    receive this wrapper and extend it with :meth:`where`; anything else can
    be done on :attr:`statement` and rewrapped with :meth:`with_statement`.
    """

    __slots__ = ("entity", "statement")

    def __init__(self, source: Any, entity: Any | None = None) -> None:
        if isinstance(source, Select):
            self.statement: Select[Any] = source
            self.entity = entity if entity is not None else primary_entity(source)
        else:
            self.statement = select(source)
            self.entity = entity if entity is not None else source

    def with_statement(self, statement: Select[Any]) -> SQLAlchemyQuery:
        return SQLAlchemyQuery(statement, self.entity)

    def where(self, *criteria: Any) -> SQLAlchemyQuery:
        return self.with_statement(self.statement.where(*criteria))

    filter = where

    def order(self, field: str, direction: SortDirection | str) -> SQLAlchemyQuery:
        column = resolve_column(self.entity, field)
        if column is None:
            logger.warning(
                "Ignoring ordering on unknown column %r of %r", field, self.entity
            )
            return self
        return self.with_statement(
            self.statement.order_by(order_clause(column, direction))
        )

    def __repr__(self) -> str:
        return f"SQLAlchemyQuery({self.statement})"


def as_statement(query: Any) -> Select[Any]:
    """Unwrap a :class:`SQLAlchemyQuery`; plain statements pass through."""
    if isinstance(query, SQLAlchemyQuery):
        return query.statement
    return query  # type: ignore[no-any-return]
