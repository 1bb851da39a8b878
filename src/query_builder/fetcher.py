"""Execute a builder's composed query through its repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .composer import compose

if TYPE_CHECKING:
    from .builder import QueryBuilder

logger = logging.getLogger(__name__)


async def fetch(builder: QueryBuilder) -> Any:
    """Return ``repo.all(query)`` or, when paginated, ``repo.paginate(...)``.

    Repository failures are not caught or retried.
    """
    query = compose(builder)
    if builder.pagination is None:
        logger.debug("Fetching all records")
        return await builder.repo.all(query)

    logger.debug(
        "Fetching page %d (page_size=%d)",
        builder.pagination.page,
        builder.pagination.page_size,
    )
    return await builder.repo.paginate(query, builder.pagination)
