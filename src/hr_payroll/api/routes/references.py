"""Role and department reference endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from hr_payroll.api.dependencies import Caller, SessionFactory
from hr_payroll.api.schemas import (
    ErrorResponse,
    ReferenceCreate,
    ReferenceCreated,
    ReferenceListResponse,
)
from hr_payroll.database import session_scope
from hr_payroll.services import ReferenceKind, ReferenceResolver

router = APIRouter(prefix="/references", tags=["references"])


@router.get("/{kind}", response_model=ReferenceListResponse)
def list_references(
    session_factory: SessionFactory,
    kind: Annotated[ReferenceKind, Path()],
) -> ReferenceListResponse:
    """List role or department names for pickers."""
    with session_scope(session_factory) as session:
        names = ReferenceResolver(session).list_names(kind)
    return ReferenceListResponse(kind=kind.value, names=names)


@router.post(
    "/{kind}",
    response_model=ReferenceCreated,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_reference(
    session_factory: SessionFactory,
    ctx: Caller,
    kind: Annotated[ReferenceKind, Path()],
    payload: ReferenceCreate,
) -> ReferenceCreated:
    """Create a role or department."""
    with session_scope(session_factory) as session:
        ref_id = ReferenceResolver(session).create_reference(
            ctx, kind, payload.name, payload.description
        )
    return ReferenceCreated(id=ref_id, kind=kind.value, name=payload.name.strip())
