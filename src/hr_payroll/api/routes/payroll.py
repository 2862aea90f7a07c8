"""Payroll generation and pay period endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from hr_payroll.api.dependencies import Caller, Payroll
from hr_payroll.api.schemas import (
    BatchFailureResponse,
    BatchGenerateRequest,
    BatchResultResponse,
    ErrorResponse,
    PayrollGenerateRequest,
    PayrollRecordResponse,
    PeriodLockResponse,
    PeriodResponse,
)
from hr_payroll.calculators import PayAdjustment, PayPeriod

router = APIRouter(prefix="/payroll", tags=["payroll"])


# ============================================================================
# Generation
# ============================================================================


@router.post(
    "/records",
    response_model=PayrollRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def generate_record(
    service: Payroll,
    ctx: Caller,
    payload: PayrollGenerateRequest,
) -> PayrollRecordResponse:
    """Compute and store the payroll row of one employee for one period."""
    period = PayPeriod.parse(payload.month, payload.year)
    adjustment = PayAdjustment.parse(payload.allowances, payload.deductions)
    record = service.generate_one(ctx, payload.employee_id, period, adjustment)
    return PayrollRecordResponse.model_validate(record)


@router.post(
    "/batches",
    response_model=BatchResultResponse,
    responses={422: {"model": ErrorResponse}},
)
def generate_batch(
    service: Payroll,
    ctx: Caller,
    payload: BatchGenerateRequest,
) -> BatchResultResponse:
    """Generate rows for every active employee; failures are reported per employee."""
    period = PayPeriod.parse(payload.month, payload.year)
    default = PayAdjustment.parse(payload.allowances, payload.deductions)
    overrides = {
        employee_id: PayAdjustment.parse(item.allowances, item.deductions)
        for employee_id, item in payload.adjustments.items()
    }

    result = service.generate_batch(
        ctx,
        period,
        default_adjustment=default,
        adjustments=overrides,
        employee_ids=payload.employee_ids,
    )
    return BatchResultResponse(
        month=period.month,
        year=period.year,
        success_count=result.success_count,
        failure_count=result.failure_count,
        cancelled=result.cancelled,
        record_ids=result.record_ids,
        failures=[BatchFailureResponse.model_validate(f) for f in result.failures],
    )


@router.post(
    "/records/{record_id}/process",
    response_model=PayrollRecordResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def process_record(
    service: Payroll,
    ctx: Caller,
    record_id: Annotated[int, Path()],
) -> PayrollRecordResponse:
    """Move a Pending row to Processed."""
    return PayrollRecordResponse.model_validate(service.mark_processed(ctx, record_id))


# ============================================================================
# Periods
# ============================================================================


@router.get(
    "/periods/{year}/{month}",
    response_model=PeriodResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def get_period(
    service: Payroll,
    year: Annotated[int, Path()],
    month: Annotated[str, Path()],
    department: Annotated[str | None, Query()] = None,
    record_status: Annotated[str | None, Query(alias="status")] = None,
) -> PeriodResponse:
    """State and totals of one pay period, with its rows.

    ``department`` and ``status`` narrow the listed rows; the totals always
    cover the whole period.
    """
    period = PayPeriod.parse(month, year)
    summary = service.period_summary(period)
    records = service.list_period(period, department=department, status=record_status)
    return PeriodResponse(
        month=period.month,
        year=period.year,
        state=summary.state.value,
        record_count=summary.record_count,
        active_employee_count=summary.active_employee_count,
        total_base=summary.total_base,
        total_allowances=summary.total_allowances,
        total_deductions=summary.total_deductions,
        total_tax=summary.total_tax,
        total_net=summary.total_net,
        records=[PayrollRecordResponse.model_validate(r) for r in records],
    )


@router.post(
    "/periods/{year}/{month}/lock",
    response_model=PeriodLockResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def lock_period(
    service: Payroll,
    ctx: Caller,
    year: Annotated[int, Path()],
    month: Annotated[str, Path()],
) -> PeriodLockResponse:
    """Close a pay period to further payroll writes."""
    period = PayPeriod.parse(month, year)
    locked = service.lock_period(ctx, period)
    return PeriodLockResponse(
        month=period.month,
        year=period.year,
        state=service.period_state(period).value,
        locked_records=locked,
    )


@router.get(
    "/employees/{employee_id}/history",
    response_model=list[PayrollRecordResponse],
    responses={404: {"model": ErrorResponse}},
)
def employee_history(
    service: Payroll,
    employee_id: Annotated[int, Path()],
) -> list[PayrollRecordResponse]:
    """Every payroll row of one employee, newest period first."""
    return [
        PayrollRecordResponse.model_validate(r)
        for r in service.list_employee_history(employee_id)
    ]
