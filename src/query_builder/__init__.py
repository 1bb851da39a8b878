"""query-builder — translate request params into validated, composed queries.

Validation relies on pydantic; the core has no storage dependency. Concrete
backends live in :mod:`query_builder.adapters` and ``query_builder_sqlalchemy``.
"""

from __future__ import annotations

from .adapters.memory import InMemoryQueryRepository, MemoryQuery
from .builder import (
    RESERVED_KEYS,
    RESERVED_PARAM_TYPES,
    FilterFunction,
    QueryBuilder,
    SortFunction,
)
from .composer import compose, default_sort_function
from .exceptions import InvalidFunctionError, QueryBuilderError
from .fetcher import fetch
from .pagination import (
    DEFAULT_PAGINATION,
    PAGE_KEY,
    PAGE_SIZE_KEY,
    Page,
    Pagination,
    default_pagination,
)
from .ports import (
    IQueryable,
    IQueryRepository,
    ITypedCaster,
    ResultValidator,
    identity_validator,
)
from .sort import (
    SORT_DIRECTIONS,
    SORT_KEY,
    SortClause,
    SortDirection,
    SortErrorKind,
    cast_sort_clauses,
    to_wire,
    validate_sort,
)
from .validation import CompositeValidator, FieldError, PydanticCaster, ValidationResult

__all__ = [
    # Builder
    "QueryBuilder",
    "FilterFunction",
    "SortFunction",
    "RESERVED_KEYS",
    "RESERVED_PARAM_TYPES",
    # Composition & execution
    "compose",
    "default_sort_function",
    "fetch",
    # Sort
    "SORT_DIRECTIONS",
    "SORT_KEY",
    "SortClause",
    "SortDirection",
    "SortErrorKind",
    "cast_sort_clauses",
    "to_wire",
    "validate_sort",
    # Pagination
    "DEFAULT_PAGINATION",
    "PAGE_KEY",
    "PAGE_SIZE_KEY",
    "Page",
    "Pagination",
    "default_pagination",
    # Validation
    "CompositeValidator",
    "FieldError",
    "PydanticCaster",
    "ValidationResult",
    # Ports
    "IQueryRepository",
    "IQueryable",
    "ITypedCaster",
    "ResultValidator",
    "identity_validator",
    # Adapters
    "InMemoryQueryRepository",
    "MemoryQuery",
    # Exceptions
    "InvalidFunctionError",
    "QueryBuilderError",
]
