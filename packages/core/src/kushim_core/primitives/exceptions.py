"""Domain and infrastructure exceptions for kushim-core."""

from __future__ import annotations


class KushimError(Exception):
    """Root exception for every Kushim package."""


class DomainError(KushimError):
    """Base class for all domain-related errors."""


class NotFoundError(DomainError):
    """Raised when a record or resource is not found."""


class InvariantViolationError(DomainError):
    """Raised when a domain invariant is violated."""


class ConcurrencyError(KushimError):
    """Base class for all concurrency-related conflicts.

    Callers catch this to decide whether to re-read and retry."""


class InfrastructureError(KushimError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class OptimisticConcurrencyError(ConcurrencyError, PersistenceError):
    """Raised when a store detects a version mismatch on write.

    Usage: store adapters raise this when the compare-and-set on a
    record's ``version`` column matches no row.
    """

    def __init__(
        self,
        record_type: str,
        record_id: object,
        expected_version: int,
    ) -> None:
        self.record_type = record_type
        self.record_id = record_id
        self.expected_version = expected_version
        super().__init__(
            f"{record_type} {record_id!r} version conflict. "
            f"Expected version {expected_version} but was modified concurrently."
        )
