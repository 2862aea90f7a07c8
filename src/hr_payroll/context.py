"""Caller context passed explicitly into every mutating core operation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CallerContext:
    """Who is asking for a change.

    The core holds no ambient identity; callers (HTTP adapter, CLI, tests)
    build one of these per request and the services copy it into audit
    entries and period locks.
    """

    actor_user_id: int | None = None
    actor_username: str | None = None

    @classmethod
    def system(cls) -> CallerContext:
        """Context for unattended callers such as the CLI."""
        return cls(actor_user_id=None, actor_username="system")

    @property
    def label(self) -> str:
        if self.actor_username:
            return self.actor_username
        if self.actor_user_id is not None:
            return f"user:{self.actor_user_id}"
        return "anonymous"
