"""QueryBuilder — validated params, filters, sort and pagination as one value.

``QueryBuilder`` reduces the boilerplate needed to translate request
parameters into queries: it validates incoming parameters against declared
types, keeps the per-field functions that turn typed values into query
clauses, and composes and fetches the result with or without pagination::

    def filter_by_search(query, search):
        return query.where(User.name.ilike(f"%{search}%"))

    qb = (
        QueryBuilder.new(repo, SQLAlchemyQuery(User), params, {"search": str})
        .put_filter_function("search", filter_by_search)
        .put_default_sort([("asc", "name")])
    )
    if qb.is_valid:
        users = await qb.fetch()

Every mutation returns a **new** builder; the receiver is never modified, so
one builder can be branched into several variants safely.

Validation problems are never raised. They are accumulated on
``validation_result`` and must be inspected through :attr:`is_valid`,
:meth:`has_error` or :meth:`get_error` before relying on ``filters``,
``sort`` or ``pagination``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from pydantic import PositiveInt
from pydantic import ValidationError as PydanticValidationError

from .composer import compose
from .exceptions import InvalidFunctionError
from .fetcher import fetch
from .pagination import (
    PAGE_KEY,
    PAGE_SIZE_KEY,
    PAGINATION_KEYS,
    Pagination,
    pagination_to_dict,
)
from .ports.caster import ITypedCaster
from .ports.validation import ResultValidator, identity_validator
from .sort import (
    SORT_KEY,
    SortClause,
    SortDirection,
    cast_sort_clauses,
    validate_sort,
)
from .validation.caster import PydanticCaster
from .validation.result import FieldError, ValidationResult

logger = logging.getLogger(__name__)

FilterFunction = Callable[[Any, Any], Any]
SortFunction = Callable[[Any, SortDirection], Any]

RESERVED_PARAM_TYPES: dict[str, Any] = {
    PAGE_KEY: PositiveInt,
    PAGE_SIZE_KEY: PositiveInt,
    SORT_KEY: list[dict[str, str]],
}
RESERVED_KEYS = frozenset(RESERVED_PARAM_TYPES)

PARTIAL_PAGINATION_CLAUSE = "partial_pagination"
INVALID_PAGINATION_CLAUSE = "invalid_pagination"


def _default_dict() -> dict[str, Any]:
    return {}


def _default_sort() -> list[SortClause]:
    return []


def _require_callable(kind: str, field_name: str, function: Any) -> None:
    if not callable(function):
        raise InvalidFunctionError(kind, field_name, function)


def _without_reserved(values: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if k not in RESERVED_KEYS}


def _other_pagination_key(key: str) -> str:
    return PAGE_SIZE_KEY if key == PAGE_KEY else PAGE_KEY


def _check_partial_pagination(result: ValidationResult) -> ValidationResult:
    """Only one of page/page_size given is an error on the missing one."""
    if any(result.has_error(k) for k in PAGINATION_KEYS):
        return result
    present = [k for k in PAGINATION_KEYS if result.get_change(k) is not None]
    if len(present) != 1:
        return result
    given = present[0]
    return result.with_error(
        _other_pagination_key(given),
        f"is required when {given} is given",
        clause=PARTIAL_PAGINATION_CLAUSE,
    )


def _pagination_from(changes: Mapping[str, Any]) -> Pagination | None:
    page, page_size = changes.get(PAGE_KEY), changes.get(PAGE_SIZE_KEY)
    if page is None or page_size is None:
        return None
    return Pagination(page=page, page_size=page_size)


def _clause_field(clause: Any) -> Any:
    if isinstance(clause, (list, tuple)) and len(clause) == 2:
        return clause[1]
    return None


@dataclass(frozen=True)
class QueryBuilder:
    """Immutable state translating request params into a composed query.

    Attributes:
        repo: Repository executing composed queries (not owned).
        base_query: Query every composition starts from.
        params: Raw params of the latest (re)validation.
        param_types: Field types, reserved fields included.
        filters: Typed values of the non-reserved fields.
        filter_functions: Ordered chain of filter functions per field.
        pagination: ``None`` or a full :class:`Pagination`.
        sort: Ordered ``SortClause`` list.
        sort_functions: Custom ordering function per field.
        validation_result: Typed changes and accumulated errors.
    """

    repo: Any
    base_query: Any
    params: dict[str, Any] = field(default_factory=_default_dict)
    param_types: dict[str, Any] = field(default_factory=_default_dict)
    filters: dict[str, Any] = field(default_factory=_default_dict)
    filter_functions: dict[str, tuple[FilterFunction, ...]] = field(
        default_factory=_default_dict
    )
    pagination: Pagination | None = None
    sort: list[SortClause] = field(default_factory=_default_sort)
    sort_functions: dict[str, SortFunction] = field(default_factory=_default_dict)
    validation_result: ValidationResult = field(
        default_factory=ValidationResult.success
    )
    custom_validator: ResultValidator = field(default=identity_validator, repr=False)
    caster: ITypedCaster = field(default_factory=PydanticCaster, repr=False)

    # ── Construction ─────────────────────────────────────────────

    @classmethod
    def new(
        cls,
        repo: Any,
        base_query: Any,
        params: Mapping[str, Any],
        param_types: Mapping[str, Any],
        custom_validator: ResultValidator | None = None,
        *,
        caster: ITypedCaster | None = None,
    ) -> QueryBuilder:
        """Validate *params* against *param_types* and build the state.

        ``page``, ``page_size`` and ``sort`` are always part of the schema
        with fixed types. *custom_validator* receives the cast result and may
        append extra field errors; it is reapplied on every re-validation.
        """
        builder = cls(
            repo=repo,
            base_query=base_query,
            param_types={**param_types, **RESERVED_PARAM_TYPES},
            custom_validator=custom_validator or identity_validator,
            caster=caster or PydanticCaster(),
        )
        return builder.put_params(params)

    def _cast(self, params: Mapping[str, Any]) -> ValidationResult:
        # ``sort`` has its own grammar with finer grained errors.
        castable = {k: v for k, v in params.items() if k != SORT_KEY}
        result = self.caster.cast(castable, self.param_types)
        return self.custom_validator(result)

    def put_params(self, params: Mapping[str, Any]) -> QueryBuilder:
        """Replace the raw params and re-derive filters, pagination and sort."""
        params = dict(params)
        result = _check_partial_pagination(self._cast(params))

        if result.is_valid:
            filters = _without_reserved(result.changes)
            pagination = _pagination_from(result.changes)
        else:
            filters, pagination = self.filters, self.pagination

        result = cast_sort_clauses(result, params.get(SORT_KEY))
        sort = self.sort if result.has_error(SORT_KEY) else result.changes[SORT_KEY]

        if not result.is_valid:
            logger.debug(
                "Params failed validation on fields %s",
                ", ".join(dict.fromkeys(e.field for e in result.errors)),
            )
        return replace(
            self,
            params=params,
            filters=filters,
            pagination=pagination,
            sort=list(sort),
            validation_result=result,
        )

    # ── Filters ──────────────────────────────────────────────────

    def _carry_reserved(self, result: ValidationResult) -> ValidationResult:
        """Keep sort/pagination changes and errors across a filter rebuild."""
        previous = self.validation_result
        changes = {
            **result.changes,
            **{k: v for k, v in previous.changes.items() if k in RESERVED_KEYS},
        }
        errors = result.errors + tuple(
            e for e in previous.errors if e.field in RESERVED_KEYS
        )
        return ValidationResult(changes=changes, errors=errors)

    def _rebuild_filters(self, merged: Mapping[str, Any]) -> QueryBuilder:
        params = _without_reserved(merged)
        cast_result = self._cast(params)
        filters = (
            _without_reserved(cast_result.changes)
            if cast_result.is_valid
            else self.filters
        )
        return replace(
            self,
            params=params,
            filters=filters,
            validation_result=self._carry_reserved(cast_result),
        )

    def put_filters(self, filters: Mapping[str, Any]) -> QueryBuilder:
        """Overwrite filters with *filters* and re-validate the merged map."""
        return self._rebuild_filters({**self.filters, **filters})

    def put_default_filters(self, filters: Mapping[str, Any]) -> QueryBuilder:
        """Fill only the filters that are not set yet, then re-validate."""
        return self._rebuild_filters({**filters, **self.filters})

    def put_filter_function(
        self, field_name: str, function: FilterFunction
    ) -> QueryBuilder:
        """Register *function* as the only filter function for *field_name*."""
        _require_callable("filter", field_name, function)
        logger.debug("Registered filter function for %r", field_name)
        return replace(
            self,
            filter_functions={**self.filter_functions, field_name: (function,)},
        )

    def add_filter_function(
        self, field_name: str, function: FilterFunction
    ) -> QueryBuilder:
        """Append *function* to the filter chain of *field_name*."""
        _require_callable("filter", field_name, function)
        chain = self.filter_functions.get(field_name, ()) + (function,)
        logger.debug(
            "Chained filter function #%d for %r", len(chain), field_name
        )
        return replace(
            self, filter_functions={**self.filter_functions, field_name: chain}
        )

    def remove_filter_function(self, field_name: str) -> QueryBuilder:
        functions = {
            k: v for k, v in self.filter_functions.items() if k != field_name
        }
        return replace(self, filter_functions=functions)

    # ── Sort ─────────────────────────────────────────────────────

    def put_sort(self, sort: Any) -> QueryBuilder:
        """Replace the sort with *sort*, a list of ``(direction, field)`` pairs.

        An invalid sort leaves :attr:`sort` untouched and records the error.
        """
        cleared = self.validation_result.without_errors(SORT_KEY)
        result = validate_sort(cleared, sort)
        if result.has_error(SORT_KEY):
            return replace(self, validation_result=result)
        return replace(
            self, sort=list(result.changes[SORT_KEY]), validation_result=result
        )

    def clear_sort(self) -> QueryBuilder:
        return replace(
            self,
            sort=[],
            validation_result=self.validation_result.delete_change(SORT_KEY),
        )

    def add_sort(
        self, field_name: str, direction: SortDirection | str
    ) -> QueryBuilder:
        """Append an ordering on *field_name* after the current ones."""
        return self.put_sort([*self.sort, (direction, field_name)])

    def remove_sort(self, field_name: str) -> QueryBuilder:
        """Drop every clause ordering by *field_name*."""
        return self.put_sort([c for c in self.sort if c.field != field_name])

    def put_default_sort(self, sort: Any) -> QueryBuilder:
        """Use *sort* only when no sort is set."""
        if self.sort:
            return self
        return self.put_sort(sort)

    def merge_default_sort(self, sort: Any) -> QueryBuilder:
        """Append clauses of *sort* whose field is not ordered by yet.

        Existing clauses keep their position and direction.
        """
        if not isinstance(sort, (list, tuple)):
            return self.put_sort(sort)
        merged: list[Any] = list(self.sort)
        seen = {c.field for c in self.sort}
        for clause in sort:
            field_name = _clause_field(clause)
            if field_name is not None and field_name in seen:
                continue
            merged.append(clause)
            seen.add(field_name)
        return self.put_sort(merged)

    def put_sort_function(
        self, field_name: str, function: SortFunction
    ) -> QueryBuilder:
        """Order by *field_name* with ``function(query, direction)``."""
        _require_callable("sort", field_name, function)
        logger.debug("Registered sort function for %r", field_name)
        return replace(
            self, sort_functions={**self.sort_functions, field_name: function}
        )

    def remove_sort_function(self, field_name: str) -> QueryBuilder:
        functions = {k: v for k, v in self.sort_functions.items() if k != field_name}
        return replace(self, sort_functions=functions)

    # ── Pagination ───────────────────────────────────────────────

    def put_pagination(
        self, pagination: Pagination | Mapping[str, Any] | None
    ) -> QueryBuilder:
        """Set both page and page_size, or clear pagination with ``None``/``{}``.

        Values must already be positive ints; they are not coerced. Partial
        or invalid input is recorded as a validation error and leaves
        :attr:`pagination` unchanged.
        """
        values = pagination_to_dict(pagination)
        result = self.validation_result
        for key in PAGINATION_KEYS:
            result = result.without_errors(key)

        if not values:
            for key in PAGINATION_KEYS:
                result = result.delete_change(key)
            return replace(self, pagination=None, validation_result=result)

        if len(values) == 1:
            (given,) = values
            result = result.with_error(
                _other_pagination_key(given),
                f"is required when {given} is given",
                clause=PARTIAL_PAGINATION_CLAUSE,
            )
            return replace(self, validation_result=result)

        try:
            new_pagination = Pagination.model_validate(values, strict=True)
        except PydanticValidationError as exc:
            for error in exc.errors():
                result = result.with_error(
                    str(error["loc"][0]),
                    error["msg"],
                    clause=INVALID_PAGINATION_CLAUSE,
                )
            return replace(self, validation_result=result)

        for key, value in new_pagination.to_dict().items():
            result = result.put_change(key, value)
        return replace(self, pagination=new_pagination, validation_result=result)

    def clear_pagination(self) -> QueryBuilder:
        return self.put_pagination(None)

    def put_default_pagination(
        self, pagination: Pagination | Mapping[str, Any] | None
    ) -> QueryBuilder:
        """Per field, *pagination* applies only where the current one is unset."""
        merged = {
            **pagination_to_dict(pagination),
            **pagination_to_dict(self.pagination),
        }
        return self.put_pagination(merged)

    # ── Composition & execution ──────────────────────────────────

    def query(self) -> Any:
        """Return the composed query; see :func:`query_builder.composer.compose`."""
        return compose(self)

    async def fetch(self) -> Any:
        """Execute the composed query; see :func:`query_builder.fetcher.fetch`."""
        return await fetch(self)

    # ── Errors ───────────────────────────────────────────────────

    @property
    def is_valid(self) -> bool:
        """True iff validation produced zero errors."""
        return self.validation_result.is_valid

    @property
    def has_errors(self) -> bool:
        return not self.validation_result.is_valid

    @property
    def errors(self) -> tuple[FieldError, ...]:
        return self.validation_result.errors

    def has_error(self, field_name: str) -> bool:
        return self.validation_result.has_error(field_name)

    def has_cast_error(self, field_name: str) -> bool:
        return self.validation_result.is_cast_error(field_name)

    def get_error(self, field_name: str) -> FieldError | None:
        return self.validation_result.get_error(field_name)

    def errors_for(self, field_name: str) -> list[FieldError]:
        return self.validation_result.errors_for(field_name)
