from __future__ import annotations

from .memory import InMemoryQueryRepository, MemoryQuery

__all__ = ["InMemoryQueryRepository", "MemoryQuery"]
