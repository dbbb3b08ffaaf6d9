"""
Foreign exchange rates routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional
from walletpalz.schemas.exchange_rate import RateTableResponse
from walletpalz.api.dependencies import get_user_preferences
from walletpalz.services import fx_service
from walletpalz.services.settings_service import UserPreferences

router = APIRouter(prefix="/fx-rates", tags=["fx-rates"])


@router.get("/latest", response_model=RateTableResponse)
async def get_latest_rates(
    base: Optional[str] = None,
    preferences: UserPreferences = Depends(get_user_preferences)
):
    """Latest rates relative to ``base`` (defaults to the user's currency).

    An unreachable provider yields an empty table with ``available`` false.
    """
    try:
        base_currency = fx_service.normalize_currency(base) if base else preferences.currency
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    rates = fx_service.fetch_rates(base_currency)
    return RateTableResponse(base_currency=base_currency, rates=rates, available=bool(rates))
