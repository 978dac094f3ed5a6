"""User directory adapters.

``SQLAlchemyUserDirectory`` lives in ``kushim_identity.directory.sqlalchemy``
and is imported from there so the in-memory adapter carries no database
dependency.
"""

from __future__ import annotations

from .memory import InMemoryUserDirectory

__all__: list[str] = ["InMemoryUserDirectory"]
