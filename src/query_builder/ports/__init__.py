"""Ports: contracts between the builder and its collaborators."""

from __future__ import annotations

from .caster import ITypedCaster
from .queryable import IQueryable
from .repository import IQueryRepository
from .validation import ResultValidator, identity_validator

__all__ = [
    "IQueryRepository",
    "IQueryable",
    "ITypedCaster",
    "ResultValidator",
    "identity_validator",
]
