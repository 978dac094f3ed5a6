"""Audit events and stores for authentication activity."""

from __future__ import annotations

from .events import (
    AuthAuditEvent,
    AuthEventType,
    login_challenged_event,
    login_failed_event,
    login_success_event,
    mfa_enabled_event,
    mfa_enrollment_started_event,
    mfa_failed_event,
    mfa_verified_event,
    social_linked_event,
    user_created_event,
)
from .memory import InMemoryAuthAuditStore

__all__: list[str] = [
    # Event types and classes
    "AuthEventType",
    "AuthAuditEvent",
    # Event factory functions
    "login_success_event",
    "login_challenged_event",
    "login_failed_event",
    "mfa_enrollment_started_event",
    "mfa_enabled_event",
    "mfa_verified_event",
    "mfa_failed_event",
    "user_created_event",
    "social_linked_event",
    # Store implementations
    "InMemoryAuthAuditStore",
]
