"""Prometheus metrics for authentication operations.

Two series, created on first use:

- ``kushim_auth_operation_duration_seconds{operation, method}``
- ``kushim_auth_events_total{event, method, outcome}``

Usage:
    ```python
    from kushim_identity.observability import AuthMetrics

    with AuthMetrics.operation("login", method="password"):
        result = await service.login(email, password)

    AuthMetrics.record_event(login_success_event(user_id))
    ```
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Generator

    from ..audit.events import AuthAuditEvent

_logger = logging.getLogger(__name__)


class _AuthMetricsRegistry:
    """Lazily created Prometheus collectors.

    Collectors register with the default registry once per process. When
    prometheus_client is missing every call is a no-op.
    """

    def __init__(self) -> None:
        self._histogram: Any = None
        self._counter: Any = None
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        self._initialized = True

        try:
            from prometheus_client import Counter, Histogram
        except ImportError:
            _logger.debug("prometheus_client not available, metrics disabled")
            return

        self._histogram = Histogram(
            "kushim_auth_operation_duration_seconds",
            "Duration of authentication boundary operations",
            ["operation", "method"],
        )
        self._counter = Counter(
            "kushim_auth_events_total",
            "Authentication audit events by outcome",
            ["event", "method", "outcome"],
        )

    @property
    def enabled(self) -> bool:
        self._ensure_initialized()
        return self._counter is not None

    def observe(self, operation: str, method: str, seconds: float) -> None:
        if not self.enabled:
            return
        try:
            self._histogram.labels(operation=operation, method=method).observe(
                seconds
            )
        except Exception:
            _logger.debug("Failed to record duration for %s", operation)

    def count(self, event: str, method: str, outcome: str) -> None:
        if not self.enabled:
            return
        try:
            self._counter.labels(event=event, method=method, outcome=outcome).inc()
        except Exception:
            _logger.debug("Failed to count %s", event)


# Global registry instance
_registry = _AuthMetricsRegistry()


class AuthMetrics:
    """Entry points used by ``AuthService``."""

    @staticmethod
    @contextmanager
    def operation(
        operation: str, *, method: str = "password"
    ) -> Generator[None, None, None]:
        """Time a boundary operation.

        Outcomes are counted from audit events, so raised exceptions are the
        only thing counted here (as ``<operation>`` / ``error``).
        """
        start = time.monotonic()
        try:
            yield
        except Exception:
            _registry.count(operation, method, "error")
            raise
        finally:
            _registry.observe(operation, method, time.monotonic() - start)

    @staticmethod
    def record_event(event: AuthAuditEvent) -> None:
        outcome = event.error.value if event.error is not None else "success"
        _registry.count(event.event_type.value, event.provider, outcome)


__all__: list[str] = ["AuthMetrics"]
