"""SQLAlchemy 2.0 async backend for query-builder."""

from __future__ import annotations

from .exceptions import SessionManagementError, SQLAlchemyQueryBuilderError
from .query import SQLAlchemyQuery, as_statement, order_clause, resolve_column
from .repository import SQLAlchemyQueryRepository

__all__ = [
    "SQLAlchemyQuery",
    "SQLAlchemyQueryBuilderError",
    "SQLAlchemyQueryRepository",
    "SessionManagementError",
    "as_statement",
    "order_clause",
    "resolve_column",
]
