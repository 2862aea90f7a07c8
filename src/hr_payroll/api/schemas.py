"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Error schemas
# ============================================================================


class FieldErrorResponse(BaseModel):
    """One failed field check."""

    field: str
    reason: str


class ErrorResponse(BaseModel):
    """Error body returned for every core failure."""

    detail: str
    code: str
    errors: list[FieldErrorResponse] | None = None


# ============================================================================
# Reference schemas
# ============================================================================


class ReferenceCreate(BaseModel):
    """Schema for creating a role or department."""

    name: str
    description: str | None = None


class ReferenceCreated(BaseModel):
    """Schema for a created role or department."""

    id: int
    kind: str
    name: str


class ReferenceListResponse(BaseModel):
    """Names of one reference table."""

    kind: str
    names: list[str]


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeBase(BaseModel):
    """Fields shared by create and update.

    Values are accepted loosely (strings included) and checked by the
    validation layer, so every failing field is reported at once.
    """

    username: str
    first_name: str
    last_name: str
    email: str
    phone: str
    role: str
    department: str
    designation: str
    date_joined: str
    status: str = "Active"
    gender: str
    salary: str
    bank_account: str


class EmployeeCreate(EmployeeBase):
    """Schema for provisioning a new employee."""

    password: str


class EmployeeUpdate(EmployeeBase):
    """Schema for updating an employee; a new password is optional."""

    new_password: str | None = None


class ProvisioningResponse(BaseModel):
    """Identifiers of a provisioned User + Employee pair."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    employee_id: int


class EmployeeResponse(BaseModel):
    """Joined view of an employee and its user."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    user_id: int
    username: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str
    role: str
    department: str
    designation: str
    gender: str
    salary: Decimal
    bank_account: str
    date_joined: date
    status: str


# ============================================================================
# Settings schemas
# ============================================================================


class SettingsResponse(BaseModel):
    """Current tax configuration."""

    model_config = ConfigDict(from_attributes=True)

    tax_rate: Decimal
    social_rate: Decimal
    currency_symbol: str


class SettingsUpdate(BaseModel):
    """Partial settings update; omitted fields are left unchanged."""

    tax_rate: str | None = None
    social_rate: str | None = None
    currency_symbol: str | None = None


# ============================================================================
# Payroll schemas
# ============================================================================


class AdjustmentRequest(BaseModel):
    """Allowances and deductions for one period."""

    allowances: str | None = None
    deductions: str | None = None


class PayrollGenerateRequest(AdjustmentRequest):
    """Schema for generating a single payroll row."""

    employee_id: int
    month: str
    year: int


class BatchGenerateRequest(BaseModel):
    """Schema for a batch run over the active employee set."""

    month: str
    year: int
    allowances: str | None = None
    deductions: str | None = None
    employee_ids: list[int] | None = None
    adjustments: dict[int, AdjustmentRequest] = Field(default_factory=dict)


class PayrollRecordResponse(BaseModel):
    """Schema for a stored payroll row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    emp_id: int
    month: str
    year: int
    base_salary: Decimal
    allowances: Decimal
    deductions: Decimal
    tax: Decimal
    net_salary: Decimal
    generated_on: datetime
    status: str


class BatchFailureResponse(BaseModel):
    """One employee the batch skipped."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    reason: str
    code: str


class BatchResultResponse(BaseModel):
    """Outcome of a batch run."""

    month: str
    year: int
    success_count: int
    failure_count: int
    cancelled: bool
    record_ids: list[int]
    failures: list[BatchFailureResponse]


class PeriodResponse(BaseModel):
    """State, totals and rows of one pay period."""

    month: str
    year: int
    state: str
    record_count: int
    active_employee_count: int
    total_base: Decimal
    total_allowances: Decimal
    total_deductions: Decimal
    total_tax: Decimal
    total_net: Decimal
    records: list[PayrollRecordResponse]


class PeriodLockResponse(BaseModel):
    """Result of locking a period."""

    month: str
    year: int
    state: str
    locked_records: int
