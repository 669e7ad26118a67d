"""TradeBoost — Onboarding Profile & Google Ads Connection Routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from tradeboost.database import get_session
from tradeboost.api.deps import get_current_user_id
from tradeboost.accounts import store
from tradeboost.core.errors import ConfigurationError
from tradeboost.core.periods import now_ms, resolve_month_period
from tradeboost.models.account_models import ConnectionIn, ProfileIn

router = APIRouter(tags=["Account"])


@router.get("/onboarding/profile")
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    profile = store.get_profile(session, user_id)
    if not profile:
        return {"status": "no_data", "message": "Onboarding not started."}
    return {"status": "success", "profile": profile.model_dump()}


@router.put("/onboarding/profile")
async def save_profile(
    request: ProfileIn,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Create or update the onboarding profile."""
    if request.reporting_timezone:
        try:
            resolve_month_period(request.reporting_timezone)
        except ConfigurationError as e:
            raise HTTPException(status_code=422, detail=str(e))
    profile = store.save_profile(session, user_id, request)
    return {"status": "success", "profile": profile.model_dump()}


@router.post("/google-ads/connection")
async def connect_google_ads(
    request: ConnectionIn,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Store OAuth tokens from the Google Ads consent flow."""
    connection = store.save_connection(session, user_id, request)
    return {"status": "success", "connection_id": connection.id}


@router.get("/google-ads/connection")
async def google_ads_status(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Connection status. Tokens are never echoed back."""
    connection = store.get_connection(session, user_id)
    if not connection or not connection.is_active:
        return {"connected": False}
    return {
        "connected": not connection.is_expired(now_ms()),
        "expires_at": connection.expires_at,
        "customer_id": connection.customer_id,
        "can_refresh": bool(connection.refresh_token),
    }


@router.delete("/google-ads/connection")
async def disconnect_google_ads(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    store.disconnect(session, user_id)
    return {"success": True}
