"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.context import CallerContext
from hr_payroll.services import PayrollService, ProvisioningService


def get_session_factory(request: Request) -> sessionmaker[Session]:
    """Session factory installed on the application at startup."""
    return request.app.state.session_factory


def get_caller_context(
    x_actor_id: Annotated[str | None, Header()] = None,
    x_actor_username: Annotated[str | None, Header()] = None,
) -> CallerContext:
    """Build the caller context from optional actor headers."""
    actor_id: int | None = None
    if x_actor_id:
        try:
            actor_id = int(x_actor_id)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid X-Actor-Id format",
            )
    return CallerContext(actor_user_id=actor_id, actor_username=x_actor_username or None)


def get_provisioning_service(
    session_factory: Annotated[sessionmaker[Session], Depends(get_session_factory)],
) -> ProvisioningService:
    return ProvisioningService(session_factory)


def get_payroll_service(
    session_factory: Annotated[sessionmaker[Session], Depends(get_session_factory)],
) -> PayrollService:
    return PayrollService(session_factory)


# Type aliases for cleaner dependency injection
SessionFactory = Annotated[sessionmaker[Session], Depends(get_session_factory)]
Caller = Annotated[CallerContext, Depends(get_caller_context)]
Provisioning = Annotated[ProvisioningService, Depends(get_provisioning_service)]
Payroll = Annotated[PayrollService, Depends(get_payroll_service)]
