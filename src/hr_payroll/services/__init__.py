"""HR payroll core services."""

from hr_payroll.services.audit import AuditService
from hr_payroll.services.configuration import ConfigurationStore
from hr_payroll.services.passwords import hash_password, verify_password
from hr_payroll.services.payroll_service import (
    BatchFailure,
    BatchResult,
    PayrollService,
    PeriodSummary,
)
from hr_payroll.services.provisioning import (
    EmployeeProfile,
    ProvisioningResult,
    ProvisioningService,
)
from hr_payroll.services.reference_resolver import ReferenceKind, ReferenceResolver
from hr_payroll.services.state_machine import (
    PayrollStatus,
    PayrollStatusMachine,
    PeriodState,
    PeriodStateMachine,
)

__all__ = [
    "AuditService",
    "BatchFailure",
    "BatchResult",
    "ConfigurationStore",
    "EmployeeProfile",
    "PayrollService",
    "PayrollStatus",
    "PayrollStatusMachine",
    "PeriodState",
    "PeriodStateMachine",
    "PeriodSummary",
    "ProvisioningResult",
    "ProvisioningService",
    "ReferenceKind",
    "ReferenceResolver",
    "hash_password",
    "verify_password",
]
