from __future__ import annotations

from .query import MemoryQuery, get_field
from .repository import InMemoryQueryRepository

__all__ = ["InMemoryQueryRepository", "MemoryQuery", "get_field"]
