"""Tests for QueryBuilder construction and its mutation API."""

from __future__ import annotations

from typing import Any

import pytest
from conftest import VALID_PARAM_TYPES, VALID_PARAMS, filter_users_by_search

from query_builder import (
    CompositeValidator,
    InvalidFunctionError,
    Pagination,
    QueryBuilder,
    SortClause,
    SortDirection,
    ValidationResult,
)
from query_builder.builder import RESERVED_PARAM_TYPES


def _new(params: dict[str, Any], types: dict[str, Any] | None = None, **kw: Any):
    types = VALID_PARAM_TYPES if types is None else types
    return QueryBuilder.new(object(), "base", params, types, **kw)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_create_with_valid_params_and_types() -> None:
    repo = object()
    qb = QueryBuilder.new(repo, "base", VALID_PARAMS, VALID_PARAM_TYPES)

    assert qb.repo is repo
    assert qb.base_query == "base"
    assert qb.is_valid
    assert not qb.has_errors
    assert qb.params == VALID_PARAMS
    assert qb.filters == {"search": "clubcollect", "adult": True}
    assert qb.sort == [
        SortClause(SortDirection.DESC, "birthdate"),
        SortClause(SortDirection.ASC, "inserted_at"),
    ]
    assert qb.pagination == Pagination(page=1, page_size=1)


def test_reserved_types_are_merged_and_fixed() -> None:
    qb = _new({}, {"search": str, "page": str})
    assert qb.param_types["search"] is str
    for key, type_tag in RESERVED_PARAM_TYPES.items():
        assert qb.param_types[key] == type_tag


def test_params_are_copied() -> None:
    params = {"search": "a"}
    qb = _new(params)
    params["search"] = "b"
    assert qb.params == {"search": "a"}


def test_without_pagination_params() -> None:
    params = {k: v for k, v in VALID_PARAMS.items() if k not in ("page", "page_size")}
    qb = _new(params)
    assert qb.is_valid
    assert qb.pagination is None


def test_without_sort_param() -> None:
    qb = _new({"search": "x"})
    assert qb.sort == []


def test_unknown_params_are_not_filters() -> None:
    qb = _new({"search": "x", "unknown": "y"})
    assert qb.filters == {"search": "x"}


def test_invalid_cast_keeps_filters_empty_and_reports() -> None:
    qb = _new({"search": "x", "adult": "maybe", "page": "1", "page_size": "5"})

    assert not qb.is_valid
    assert qb.has_errors
    assert qb.has_error("adult")
    assert qb.has_cast_error("adult")
    assert not qb.has_error("search")
    assert qb.filters == {}
    assert qb.pagination is None


def test_sort_grammar_runs_even_when_cast_fails() -> None:
    qb = _new({"adult": "maybe", "sort": [{"name": "asc"}]})
    assert qb.has_error("adult")
    assert qb.sort == [SortClause(SortDirection.ASC, "name")]


def test_invalid_sort_param_does_not_block_filters() -> None:
    qb = _new({"search": "x", "sort": [{"name": "up"}]})
    assert not qb.is_valid
    assert qb.filters == {"search": "x"}
    assert qb.sort == []
    error = qb.get_error("sort")
    assert error is not None
    assert error.context == {"index": 0, "clause": "invalid_direction"}


def test_non_list_sort_param() -> None:
    qb = _new({"sort": "inserted_at:desc"})
    error = qb.get_error("sort")
    assert error is not None
    assert error.context == {"clause": "not_a_list"}


def test_partial_pagination_is_an_error() -> None:
    qb = _new({"page": "2"})
    assert not qb.is_valid
    assert qb.pagination is None
    error = qb.get_error("page_size")
    assert error is not None
    assert error.context["clause"] == "partial_pagination"


def test_non_positive_page_is_a_cast_error() -> None:
    qb = _new({"page": "0", "page_size": "10"})
    assert qb.has_cast_error("page")
    assert qb.pagination is None


def test_custom_validator_appends_errors() -> None:
    def min_length(result: ValidationResult) -> ValidationResult:
        search = result.get_change("search")
        if search is not None and len(search) < 3:
            return result.with_error("search", "should be at least 3 characters")
        return result

    qb = _new({"search": "ab"}, custom_validator=min_length)
    assert qb.has_error("search")
    assert not qb.has_cast_error("search")
    assert qb.filters == {}

    # Reapplied when filters are re-validated.
    assert qb.put_filters({"search": "abc"}).is_valid
    assert qb.put_filters({"search": "abc"}).filters == {"search": "abc"}
    assert qb.put_filters({"search": "xy"}).has_error("search")


def test_composite_custom_validator() -> None:
    validator = CompositeValidator(
        [
            lambda r: r.with_error("search", "first"),
            lambda r: r.with_error("adult", "second"),
        ]
    )
    qb = _new({"search": "x"}, custom_validator=validator)
    assert [e.field for e in qb.errors] == ["search", "adult"]


def test_put_params_replaces_everything() -> None:
    qb = _new(VALID_PARAMS).put_params({"adult": "false"})
    assert qb.params == {"adult": "false"}
    assert qb.filters == {"adult": False}
    assert qb.sort == []
    assert qb.pagination is None


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def test_put_filters_overwrites_and_revalidates() -> None:
    qb = _new({"search": "a"}).put_filters({"search": "b", "adult": "true"})
    assert qb.is_valid
    assert qb.filters == {"search": "b", "adult": True}
    assert qb.params == {"search": "b", "adult": "true"}


def test_put_default_filters_only_fills_gaps() -> None:
    qb = _new({"search": "a"}).put_default_filters({"search": "b", "adult": True})
    assert qb.filters == {"search": "a", "adult": True}


def test_failed_put_filters_keeps_previous_filters() -> None:
    qb = _new({"search": "a"})
    failed = qb.put_filters({"adult": "maybe"})

    assert failed.has_cast_error("adult")
    assert failed.filters == {"search": "a"}
    assert qb.is_valid


def test_put_filters_keeps_sort_and_pagination() -> None:
    qb = _new(VALID_PARAMS).put_filters({"search": "other"})
    assert qb.filters == {"search": "other", "adult": True}
    assert qb.sort == _new(VALID_PARAMS).sort
    assert qb.pagination == Pagination(page=1, page_size=1)


def test_put_filters_ignores_reserved_keys() -> None:
    qb = _new(VALID_PARAMS).put_filters({"page": "9", "sort": "x"})
    assert qb.is_valid
    assert qb.pagination == Pagination(page=1, page_size=1)
    assert "page" not in qb.filters


def test_put_filters_carries_sort_errors() -> None:
    qb = _new({"search": "a", "sort": True}).put_filters({"search": "b"})
    assert qb.filters == {"search": "b"}
    assert qb.has_error("sort")


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------


def test_put_sort_is_idempotent() -> None:
    qb = _new({"sort": [{"a": "asc"}, {"b": "desc"}]}, {})
    assert qb.sort == [("asc", "a"), ("desc", "b")]
    again = qb.put_sort(qb.sort)
    assert again.sort == qb.sort
    assert again.put_sort(again.sort).sort == qb.sort
    assert again.validation_result.changes["sort"] == qb.sort


def test_wire_field_names_survive_sort_updates() -> None:
    qb = _new({"sort": [{"user.name": "asc"}, {"created-at": "desc"}]}, {})
    assert qb.is_valid

    again = qb.put_sort(qb.sort)
    assert again.is_valid
    assert again.sort == qb.sort

    removed = qb.remove_sort("created-at")
    assert removed.is_valid
    assert removed.sort == [("asc", "user.name")]

    merged = qb.merge_default_sort([("asc", "id")]).add_sort("a-b", "desc")
    assert merged.is_valid
    assert [c.field for c in merged.sort] == ["user.name", "created-at", "id", "a-b"]


def test_failed_put_sort_keeps_sort_and_records_error() -> None:
    qb = _new({"sort": [{"a": "asc"}]}, {})
    failed = qb.put_sort([("up", "b")])

    assert failed.sort == [("asc", "a")]
    error = failed.get_error("sort")
    assert error is not None
    assert error.context == {"index": 0, "clause": "invalid_direction"}


def test_put_sort_clears_stale_errors() -> None:
    failed = _new({"sort": [{"a": "up"}]}, {})
    assert failed.has_error("sort")

    fixed = failed.put_sort([("asc", "a")])
    assert not fixed.has_error("sort")
    assert fixed.is_valid
    assert fixed.sort == [("asc", "a")]


def test_clear_sort() -> None:
    qb = _new({"sort": [{"a": "asc"}]}, {}).clear_sort()
    assert qb.sort == []
    assert "sort" not in qb.validation_result.changes


def test_add_sort_appends() -> None:
    qb = _new({"sort": [{"a": "asc"}]}, {}).add_sort("b", SortDirection.DESC)
    assert qb.sort == [("asc", "a"), ("desc", "b")]
    assert qb.add_sort("c", "sideways").has_error("sort")


def test_remove_sort_by_field() -> None:
    qb = _new({"sort": [{"a": "asc"}, {"b": "desc"}]}, {}).add_sort("a", "desc")
    assert qb.remove_sort("a").sort == [("desc", "b")]
    assert qb.remove_sort("missing").sort == qb.sort


def test_put_default_sort_only_when_empty() -> None:
    default = [("asc", "name")]
    empty = _new({}, {})
    assert empty.put_default_sort(default).sort == default

    sorted_qb = _new({"sort": [{"a": "desc"}]}, {})
    assert sorted_qb.put_default_sort(default) is sorted_qb


def test_merge_default_sort() -> None:
    qb = _new({"sort": [{"x": "desc"}]}, {})
    merged = qb.merge_default_sort([("asc", "x"), ("desc", "y")])
    assert merged.sort == [("desc", "x"), ("desc", "y")]


def test_merge_default_sort_reports_invalid_defaults() -> None:
    qb = _new({"sort": [{"x": "desc"}]}, {})
    merged = qb.merge_default_sort([("up", "y")])
    assert merged.sort == [("desc", "x")]
    error = merged.get_error("sort")
    assert error is not None
    assert error.context == {"index": 1, "clause": "invalid_direction"}


def test_mutations_do_not_alias() -> None:
    base = _new({"sort": [{"a": "asc"}]}, {})
    left = base.add_sort("b", "asc")
    right = base.add_sort("c", "desc")

    assert base.sort == [("asc", "a")]
    assert left.sort == [("asc", "a"), ("asc", "b")]
    assert right.sort == [("asc", "a"), ("desc", "c")]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def test_put_pagination_sets_pair() -> None:
    qb = _new(VALID_PARAMS).put_pagination({"page": 3, "page_size": 20})
    assert qb.pagination == Pagination(page=3, page_size=20)
    assert qb.pagination.to_dict() == {"page": 3, "page_size": 20}
    assert qb.validation_result.changes["page"] == 3


@pytest.mark.parametrize("empty", [None, {}])
def test_put_pagination_empty_clears(empty: Any) -> None:
    qb = _new(VALID_PARAMS).put_pagination(empty)
    assert qb.pagination is None
    assert "page" not in qb.validation_result.changes
    assert _new({}).put_pagination(empty).pagination is None


def test_clear_pagination() -> None:
    assert _new(VALID_PARAMS).clear_pagination().pagination is None


def test_partial_put_pagination_is_rejected() -> None:
    qb = _new(VALID_PARAMS).put_pagination({"page": 3})
    assert qb.pagination == Pagination(page=1, page_size=1)
    error = qb.get_error("page_size")
    assert error is not None
    assert error.context["clause"] == "partial_pagination"


def test_invalid_put_pagination_is_rejected() -> None:
    qb = _new(VALID_PARAMS).put_pagination({"page": 0, "page_size": 10})
    assert qb.pagination == Pagination(page=1, page_size=1)
    error = qb.get_error("page")
    assert error is not None
    assert error.context["clause"] == "invalid_pagination"
    assert [e.field for e in qb.errors_for("page")] == ["page"]

    fixed = qb.put_pagination(Pagination(page=2, page_size=10))
    assert fixed.is_valid
    assert fixed.pagination == Pagination(page=2, page_size=10)


@pytest.mark.parametrize(
    ("values", "field"),
    [
        ({"page": True, "page_size": 20}, "page"),
        ({"page": 2.0, "page_size": 20}, "page"),
        ({"page": 2, "page_size": "20"}, "page_size"),
    ],
)
def test_put_pagination_does_not_coerce(values: dict[str, Any], field: str) -> None:
    qb = _new(VALID_PARAMS).put_pagination(values)
    assert qb.pagination == Pagination(page=1, page_size=1)
    error = qb.get_error(field)
    assert error is not None
    assert error.context["clause"] == "invalid_pagination"


def test_put_default_pagination_never_overrides() -> None:
    qb = _new(VALID_PARAMS).put_pagination({"page": 3, "page_size": 20})
    result = qb.put_default_pagination({"page": 1, "page_size": 50})
    assert result.pagination == Pagination(page=3, page_size=20)


def test_put_default_pagination_fills_empty() -> None:
    qb = _new({}).put_default_pagination(Pagination(page=1, page_size=50))
    assert qb.pagination == Pagination(page=1, page_size=50)


# ---------------------------------------------------------------------------
# Function registries
# ---------------------------------------------------------------------------


def test_put_and_remove_filter_function() -> None:
    qb = (
        _new(VALID_PARAMS)
        .put_filter_function("search", filter_users_by_search)
        .put_filter_function("adult", lambda q, _: q)
        .remove_filter_function("search")
    )
    assert set(qb.filter_functions) == {"adult"}


def test_put_filter_function_overwrites_chain() -> None:
    def first(q: Any, _: Any) -> Any:
        return q

    def second(q: Any, _: Any) -> Any:
        return q

    chained = _new({}).add_filter_function("a", first).add_filter_function("a", second)
    assert chained.filter_functions["a"] == (first, second)
    assert chained.put_filter_function("a", second).filter_functions["a"] == (second,)


def test_sort_function_registry() -> None:
    def by_name(q: Any, _: SortDirection) -> Any:
        return q

    qb = _new({}).put_sort_function("name", by_name)
    assert qb.sort_functions == {"name": by_name}
    assert qb.remove_sort_function("name").sort_functions == {}


def test_non_callable_function_raises() -> None:
    with pytest.raises(InvalidFunctionError, match="'search'"):
        _new({}).put_filter_function("search", "not callable")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        _new({}).put_sort_function("name", None)  # type: ignore[arg-type]
