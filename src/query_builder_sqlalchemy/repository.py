"""SQLAlchemyQueryRepository — async execution of composed queries."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from query_builder.pagination import Page

from .exceptions import SessionManagementError
from .query import as_statement

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from query_builder.pagination import Pagination

    AsyncSessionFactory = Callable[[], AsyncSession]

logger = logging.getLogger(__name__)


class SQLAlchemyQueryRepository:
    """
    ``IQueryRepository`` implementation over an ``AsyncSession``.

    Supports two usage patterns:

    1. **Caller-managed session**::

           repo = SQLAlchemyQueryRepository(session=session)

    2. **Self-managed sessions**, one per call::

           factory = async_sessionmaker(engine, expire_on_commit=False)
           repo = SQLAlchemyQueryRepository(session_factory=factory)

    **Important:** exactly one of ``session`` or ``session_factory`` must be
    provided.
    """

    def __init__(
        self,
        session: AsyncSession | None = None,
        session_factory: AsyncSessionFactory | None = None,
    ) -> None:
        if session is not None and session_factory is not None:
            raise SessionManagementError(
                "Cannot provide both 'session' and 'session_factory'."
            )
        if session is None and session_factory is None:
            raise SessionManagementError(
                "Must provide either 'session' or 'session_factory'."
            )
        self._session = session
        self._session_factory = session_factory

    @contextlib.asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[AsyncSession]:
        if self._session is not None:
            yield self._session
            return
        assert self._session_factory is not None
        async with self._session_factory() as session:
            yield session

    async def all(self, query: Any) -> list[Any]:
        stmt = as_statement(query)
        async with self._session_scope() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def paginate(self, query: Any, pagination: Pagination) -> Page[Any]:
        stmt = as_statement(query)
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        page_stmt = stmt.limit(pagination.limit).offset(pagination.offset)

        async with self._session_scope() as session:
            total_entries = (await session.execute(count_stmt)).scalar_one()
            result = await session.execute(page_stmt)
            entries = list(result.scalars().all())

        logger.debug(
            "Fetched %d of %d entries (page %d)",
            len(entries),
            total_entries,
            pagination.page,
        )
        return Page.build(entries, pagination, total_entries=total_entries)
