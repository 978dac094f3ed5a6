"""Auth observability helpers (Prometheus metrics)."""

from __future__ import annotations

from .metrics import AuthMetrics

__all__: list[str] = ["AuthMetrics"]
