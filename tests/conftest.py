"""Shared fixtures: a small user table and its filter functions."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any

import pytest

from query_builder import InMemoryQueryRepository

VALID_PARAMS: dict[str, Any] = {
    "search": "clubcollect",
    "adult": "true",
    "sort": [{"birthdate": "desc"}, {"inserted_at": "asc"}],
    "page": "1",
    "page_size": "1",
}
VALID_PARAM_TYPES: dict[str, Any] = {"search": str, "adult": bool}


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    birthdate: datetime.date | None
    inserted_at: datetime.datetime


def adult_cutoff(today: datetime.date | None = None) -> datetime.date:
    """Latest birthdate of someone older than 18 years."""
    today = today or datetime.date.today()
    return today - datetime.timedelta(days=18 * 366)


def make_users() -> list[User]:
    return [
        User(
            id=1,
            name="adult",
            email="adult@clubcollect.com",
            birthdate=datetime.date(1990, 1, 1),
            inserted_at=datetime.datetime(2020, 1, 1, 12, 0),
        ),
        User(
            id=2,
            name="juvenile",
            email="juvenile@clubcollect.com",
            birthdate=datetime.date(2019, 1, 1),
            inserted_at=datetime.datetime(2020, 1, 2, 12, 0),
        ),
        User(
            id=3,
            name="outsider",
            email="outsider@example.com",
            birthdate=datetime.date(1980, 6, 1),
            inserted_at=datetime.datetime(2020, 1, 3, 12, 0),
        ),
        User(
            id=4,
            name="another adult",
            email="another@clubcollect.com",
            birthdate=datetime.date(1985, 3, 3),
            inserted_at=datetime.datetime(2020, 1, 4, 12, 0),
        ),
    ]


def filter_users_by_search(query: Any, search: str) -> Any:
    needle = search.lower()
    return query.where(
        lambda u: needle in u.name.lower() or needle in u.email.lower()
    )


def filter_users_by_adult(query: Any, adult: bool) -> Any:
    if not adult:
        return query
    cutoff = adult_cutoff()
    return query.where(lambda u: u.birthdate is not None and u.birthdate < cutoff)


@pytest.fixture
def users() -> list[User]:
    return make_users()


@pytest.fixture
def repo(users: list[User]) -> InMemoryQueryRepository:
    return InMemoryQueryRepository(users)
