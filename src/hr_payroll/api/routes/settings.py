"""Tax configuration endpoints."""

from fastapi import APIRouter

from hr_payroll.api.dependencies import Caller, SessionFactory
from hr_payroll.api.schemas import ErrorResponse, SettingsResponse, SettingsUpdate
from hr_payroll.database import session_scope
from hr_payroll.services import ConfigurationStore

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SettingsResponse)
def get_settings(session_factory: SessionFactory) -> SettingsResponse:
    """Current tax and social rates and currency symbol."""
    with session_scope(session_factory) as session:
        current = ConfigurationStore(session).get()
    return SettingsResponse.model_validate(current)


@router.put(
    "",
    response_model=SettingsResponse,
    responses={422: {"model": ErrorResponse}},
)
def update_settings(
    session_factory: SessionFactory,
    ctx: Caller,
    payload: SettingsUpdate,
) -> SettingsResponse:
    """Update any subset of the settings; takes effect for the next payroll row."""
    with session_scope(session_factory) as session:
        updated = ConfigurationStore(session).update(
            ctx,
            tax_rate=payload.tax_rate,
            social_rate=payload.social_rate,
            currency_symbol=payload.currency_symbol,
        )
    return SettingsResponse.model_validate(updated)
