"""In-memory audit store for testing and development."""

from __future__ import annotations

from collections import deque
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from ..ports import IAuthAuditStore

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from .events import AuthAuditEvent, AuthEventType


class InMemoryAuthAuditStore(IAuthAuditStore):
    """Bounded, process-local ``IAuthAuditStore``.

    Keeps the newest ``max_events`` events; older ones are dropped. Lost on
    restart.

    Example:
        ```python
        store = InMemoryAuthAuditStore()
        await store.record(login_success_event("user-123"))
        events = await store.get_events("user-123")
        ```
    """

    def __init__(self, *, max_events: int = 10_000) -> None:
        self._events: deque[AuthAuditEvent] = deque(maxlen=max_events)

    async def record(self, event: AuthAuditEvent) -> None:
        self._events.append(event)

    def _newest_first(
        self, predicate: Callable[[AuthAuditEvent], bool], limit: int
    ) -> list[AuthAuditEvent]:
        matches: Iterator[AuthAuditEvent] = filter(predicate, reversed(self._events))
        return [event for _, event in zip(range(limit), matches)]

    async def get_events(
        self,
        principal_id: str,
        *,
        event_types: list[AuthEventType] | None = None,
        limit: int = 100,
    ) -> list[AuthAuditEvent]:
        return self._newest_first(
            lambda e: e.principal_id == principal_id
            and (not event_types or e.event_type in event_types),
            limit,
        )

    async def get_events_by_type(
        self, event_type: AuthEventType, *, limit: int = 100
    ) -> list[AuthAuditEvent]:
        """Events of one type across all principals, newest first."""
        return self._newest_first(lambda e: e.event_type is event_type, limit)

    async def get_recent_failures(
        self,
        *,
        principal_id: str | None = None,
        minutes: int = 15,
        limit: int = 100,
    ) -> list[AuthAuditEvent]:
        """Failed logins and MFA attempts inside a time window.

        Args:
            principal_id: Restrict to one identity. Password login failures
                carry no principal and only appear without this filter.
            minutes: Window size.
            limit: Maximum number of events.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=minutes)
        return self._newest_first(
            lambda e: not e.success
            and e.timestamp >= cutoff
            and (principal_id is None or e.principal_id == principal_id),
            limit,
        )

    def clear(self) -> None:
        self._events.clear()

    def count(self) -> int:
        return len(self._events)

    def count_by_type(self, event_type: AuthEventType) -> int:
        return sum(1 for e in self._events if e.event_type is event_type)


__all__: list[str] = ["InMemoryAuthAuditStore"]
