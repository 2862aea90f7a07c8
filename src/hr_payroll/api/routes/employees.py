"""Employee provisioning endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Response, status

from hr_payroll.api.dependencies import Caller, Provisioning
from hr_payroll.api.schemas import (
    EmployeeBase,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ErrorResponse,
    ProvisioningResponse,
)
from hr_payroll.validation import EmployeeFields, UserFields

router = APIRouter(prefix="/employees", tags=["employees"])


def _to_fields(
    payload: EmployeeBase,
    password: str | None = None,
) -> tuple[UserFields, EmployeeFields]:
    user = UserFields(
        username=payload.username,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        phone=payload.phone,
        role_name=payload.role,
        department_name=payload.department,
        designation=payload.designation,
        date_joined=payload.date_joined,
        status=payload.status,
        password=password,
    )
    employee = EmployeeFields(
        gender=payload.gender,
        salary=payload.salary,
        bank_account=payload.bank_account,
    )
    return user, employee


@router.post(
    "",
    response_model=ProvisioningResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def create_employee(
    service: Provisioning,
    ctx: Caller,
    payload: EmployeeCreate,
) -> ProvisioningResponse:
    """Create a User and its Employee as one unit."""
    user, employee = _to_fields(payload, password=payload.password)
    result = service.create_employee(ctx, user, employee)
    return ProvisioningResponse.model_validate(result)


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_employee(
    service: Provisioning,
    employee_id: Annotated[int, Path()],
) -> EmployeeResponse:
    """Get the joined profile of one employee."""
    return EmployeeResponse.model_validate(service.get_employee(employee_id))


@router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def update_employee(
    service: Provisioning,
    ctx: Caller,
    employee_id: Annotated[int, Path()],
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    """Update the User and Employee rows together."""
    user, employee = _to_fields(payload)
    service.update_employee(ctx, employee_id, user, employee, new_password=payload.new_password)
    return EmployeeResponse.model_validate(service.get_employee(employee_id))


@router.post(
    "/{employee_id}/terminate",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
def terminate_employee(
    service: Provisioning,
    ctx: Caller,
    employee_id: Annotated[int, Path()],
) -> EmployeeResponse:
    """Mark an employee and its user Inactive."""
    service.terminate_employee(ctx, employee_id)
    return EmployeeResponse.model_validate(service.get_employee(employee_id))


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def delete_employee(
    service: Provisioning,
    ctx: Caller,
    employee_id: Annotated[int, Path()],
) -> Response:
    """Delete an employee without payroll history, then its user."""
    service.delete_employee(ctx, employee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
