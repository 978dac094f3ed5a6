"""In-memory replay tracking for TOTP codes.

WARNING: This implementation is NOT suitable for multi-worker deployments.
Each worker keeps its own record, so a code replayed against a different
worker is accepted. Back IUsedCodeStore with Redis (SET NX EX) in
production.
"""

from __future__ import annotations

import time

from ..ports import IUsedCodeStore


class InMemoryUsedCodeStore(IUsedCodeStore):
    """In-memory used-code store for development and testing.

    Example:
        ```python
        store = InMemoryUsedCodeStore()
        assert await store.consume("user-1", 57_000_000, ttl=90)
        assert not await store.consume("user-1", 57_000_000, ttl=90)
        ```
    """

    def __init__(self) -> None:
        self._used: dict[tuple[str, int], float] = {}

    async def consume(self, user_id: str, time_step: int, ttl: int) -> bool:
        now = time.monotonic()
        self._purge(now)

        key = (user_id, time_step)
        if key in self._used:
            return False
        self._used[key] = now + ttl
        return True

    def _purge(self, now: float) -> None:
        expired = [key for key, expires in self._used.items() if expires <= now]
        for key in expired:
            del self._used[key]

    def clear_all(self) -> None:
        """Forget every consumed code. Useful for testing cleanup."""
        self._used.clear()


__all__: list[str] = ["InMemoryUsedCodeStore"]
