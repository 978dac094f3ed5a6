"""Primitives: exceptions, ID generation."""

from __future__ import annotations

from .exceptions import (
    ConcurrencyError,
    DomainError,
    InfrastructureError,
    InvariantViolationError,
    KushimError,
    NotFoundError,
    OptimisticConcurrencyError,
    PersistenceError,
)
from .id_generator import IIDGenerator, SequentialIDGenerator, UUID4Generator

__all__ = [
    "ConcurrencyError",
    "DomainError",
    "IIDGenerator",
    "InfrastructureError",
    "InvariantViolationError",
    "KushimError",
    "NotFoundError",
    "OptimisticConcurrencyError",
    "PersistenceError",
    "SequentialIDGenerator",
    "UUID4Generator",
]
