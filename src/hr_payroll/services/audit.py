"""Audit trail writer."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from hr_payroll.context import CallerContext
from hr_payroll.models import AuditLog


class AuditService:
    """Appends audit entries inside the caller's open transaction.

    Entries commit or roll back together with the mutation they describe.
    """

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        ctx: CallerContext,
        action: str,
        entity_type: str,
        entity_id: Any = None,
        details: str | None = None,
    ) -> AuditLog:
        entry = AuditLog(
            actor_user_id=ctx.actor_user_id,
            actor_username=ctx.actor_username,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=details[:500] if details else None,
        )
        self.session.add(entry)
        return entry
