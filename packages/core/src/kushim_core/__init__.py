"""kushim-core: foundation primitives shared by the Kushim packages.

Zero infrastructure dependencies. Pydantic for immutable value objects.
"""

from __future__ import annotations

from .domain import ValueObject
from .primitives import (
    ConcurrencyError,
    DomainError,
    IIDGenerator,
    InfrastructureError,
    InvariantViolationError,
    KushimError,
    NotFoundError,
    OptimisticConcurrencyError,
    PersistenceError,
    SequentialIDGenerator,
    UUID4Generator,
)

__all__: list[str] = [
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
    "ValueObject",
]

__version__ = "0.1.0"
