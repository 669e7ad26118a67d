"""TradeBoost — Dashboard Metrics & Spend Sync Routes."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from tradeboost.database import get_session
from tradeboost.api.deps import get_current_user_id
from tradeboost.accounts.store import account_timezone
from tradeboost.analyzer.metrics_engine import get_dashboard_metrics
from tradeboost.connectors.google_ads.errors import GoogleAdsAuthError
from tradeboost.core.errors import ConfigurationError, SpendSyncError
from tradeboost.core.periods import resolve_month_period
from tradeboost.models.metrics_models import DashboardMetrics
from tradeboost.models.spend_models import SyncResult
from tradeboost.spend.snapshot_store import snapshots_for_month
from tradeboost.spend.sync import refresh_current_month_if_stale
from tradeboost.core.logging import get_logger

logger = get_logger("api.metrics")

router = APIRouter(tags=["Metrics"])


@router.get(
    "/metrics/dashboard",
    response_model=DashboardMetrics,
    response_model_by_alias=True,
)
async def dashboard_metrics(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Month-to-date qualified calls, ad spend, cost per lead and estimated ROI."""
    try:
        return get_dashboard_metrics(session, user_id)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/spend/refresh", response_model=SyncResult)
async def refresh_spend(
    force: bool = Query(False, description="Bypass the freshness check"),
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Sync this month's Google Ads spend if the last sync is stale."""
    try:
        return await refresh_current_month_if_stale(session, user_id, force=force)
    except GoogleAdsAuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except SpendSyncError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/spend/snapshots")
async def month_snapshots(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Daily spend snapshots for the current month."""
    period = resolve_month_period(account_timezone(session, user_id))
    rows = snapshots_for_month(session, user_id, period.month_key)
    return {
        "status": "success",
        "month_key": period.month_key,
        "count": len(rows),
        "snapshots": [
            {
                "date": r.date,
                "currency_code": r.currency_code,
                "spend_micros": r.spend_micros,
                "synced_at": r.synced_at,
                "source": r.source,
            }
            for r in rows
        ],
    }
