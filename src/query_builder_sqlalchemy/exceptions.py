"""Exceptions for the SQLAlchemy backend."""

from __future__ import annotations

from query_builder.exceptions import QueryBuilderError


class SQLAlchemyQueryBuilderError(QueryBuilderError):
    """Base exception for all SQLAlchemy-specific errors."""


class SessionManagementError(SQLAlchemyQueryBuilderError):
    """Raised when the repository is given no session source or two of them."""


__all__: list[str] = [
    "SQLAlchemyQueryBuilderError",
    "SessionManagementError",
]
