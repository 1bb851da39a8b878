"""Pagination request and page result value types."""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, PositiveInt

T = TypeVar("T")

PAGE_KEY = "page"
PAGE_SIZE_KEY = "page_size"
PAGINATION_KEYS = (PAGE_KEY, PAGE_SIZE_KEY)


class Pagination(BaseModel):
    """A full pagination request: both ``page`` and ``page_size`` are set.

    There is no partially specified pagination; "no pagination" is
    represented by ``None`` on the builder.
    """

    model_config = ConfigDict(frozen=True)

    page: PositiveInt
    page_size: PositiveInt

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def to_dict(self) -> dict[str, int]:
        return {PAGE_KEY: self.page, PAGE_SIZE_KEY: self.page_size}


DEFAULT_PAGINATION = Pagination(page=1, page_size=50)


def default_pagination() -> Pagination:
    """Pagination used when the caller wants a sensible default page."""
    return DEFAULT_PAGINATION


def pagination_to_dict(
    pagination: Pagination | Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Normalise any accepted pagination input to a plain dict of set fields."""
    if pagination is None:
        return {}
    if isinstance(pagination, Pagination):
        return pagination.to_dict()
    return {k: pagination[k] for k in PAGINATION_KEYS if k in pagination}


def total_pages(total_entries: int, page_size: int) -> int:
    """Number of pages for *total_entries*; an empty result still has one page."""
    return max(1, math.ceil(total_entries / page_size))


def default_entries_factory() -> list[Any]:
    return []


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results together with its metadata."""

    entries: list[T] = field(default_factory=default_entries_factory)
    page: int = 1
    page_size: int = DEFAULT_PAGINATION.page_size
    total_entries: int = 0
    total_pages: int = 1

    @classmethod
    def build(
        cls, entries: list[T], pagination: Pagination, total_entries: int
    ) -> Page[T]:
        return cls(
            entries=entries,
            page=pagination.page,
            page_size=pagination.page_size,
            total_entries=total_entries,
            total_pages=total_pages(total_entries, pagination.page_size),
        )

    def __iter__(self) -> Iterator[T]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
