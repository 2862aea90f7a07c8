"""Resolution of role and department names to stable identifiers."""

from __future__ import annotations

import logging
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hr_payroll.context import CallerContext
from hr_payroll.errors import DuplicateError, ReferenceNotFoundError
from hr_payroll.models import Department, Role
from hr_payroll.services.audit import AuditService
from hr_payroll.validation import ValidationReport, check_required

logger = logging.getLogger(__name__)


class ReferenceKind(str, Enum):
    """Reference tables that user and employee rows point at."""

    ROLE = "role"
    DEPARTMENT = "department"


_MODELS: dict[ReferenceKind, type[Role] | type[Department]] = {
    ReferenceKind.ROLE: Role,
    ReferenceKind.DEPARTMENT: Department,
}


class ReferenceResolver:
    """Looks up roles and departments by exact, case-insensitive name.

    A missing reference raises ReferenceNotFoundError instead of yielding a
    null or zero id, so no row can be written with an orphaned foreign key.
    """

    def __init__(self, session: Session):
        self.session = session

    def resolve(self, kind: ReferenceKind | str, name: str | None) -> int:
        """Return the id of the named role or department.

        Raises:
            ReferenceNotFoundError: If no row has that name
        """
        ref_kind = ReferenceKind(kind)
        model = _MODELS[ref_kind]
        wanted = (name or "").strip()
        if not wanted:
            raise ReferenceNotFoundError(ref_kind.value, wanted)

        ref_id = self.session.execute(
            select(model.id).where(func.lower(model.name) == func.lower(wanted))
        ).scalar_one_or_none()

        if ref_id is None:
            raise ReferenceNotFoundError(ref_kind.value, wanted)
        return ref_id

    def resolve_role(self, name: str | None) -> int:
        return self.resolve(ReferenceKind.ROLE, name)

    def resolve_department(self, name: str | None) -> int:
        return self.resolve(ReferenceKind.DEPARTMENT, name)

    def list_names(self, kind: ReferenceKind | str) -> list[str]:
        """All names of a reference table, sorted."""
        model = _MODELS[ReferenceKind(kind)]
        result = self.session.execute(select(model.name).order_by(model.name))
        return list(result.scalars().all())

    def create_reference(
        self,
        ctx: CallerContext,
        kind: ReferenceKind | str,
        name: str,
        description: str | None = None,
    ) -> int:
        """Insert a role or department and return its id.

        Raises:
            ValidationError: If the name is blank
            DuplicateError: If the name is taken (case-insensitive)
        """
        ref_kind = ReferenceKind(kind)
        report = ValidationReport()
        report.record("name", check_required(name, f"{ref_kind.value.capitalize()} name"))
        report.raise_if_failed()

        clean_name = name.strip()
        try:
            self.resolve(ref_kind, clean_name)
        except ReferenceNotFoundError:
            pass
        else:
            raise DuplicateError("name", clean_name, f"A {ref_kind.value} named '{clean_name}' already exists")

        if ref_kind is ReferenceKind.DEPARTMENT:
            row: Role | Department = Department(name=clean_name, description=description)
        else:
            row = Role(name=clean_name)
        self.session.add(row)
        self.session.flush()

        AuditService(self.session).record(ctx, f"{ref_kind.value}_created", ref_kind.value, row.id)
        logger.info("Created %s %r (id=%s)", ref_kind.value, clean_name, row.id)
        return row.id
