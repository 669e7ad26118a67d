"""TradeBoost — Scheduler Jobs.

Optional APScheduler interval job that refreshes month-to-date spend for
every connected account. The sync's own freshness gate keeps repeat runs
cheap, so the interval only bounds how stale the dashboard can get.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlmodel import Session, select

from tradeboost.config import settings
from tradeboost.database import engine
from tradeboost.models.account_models import GoogleAdsConnection
from tradeboost.spend.sync import refresh_current_month_if_stale
from tradeboost.core.logging import get_logger

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


async def refresh_connected_accounts(bind=None) -> dict:
    """Run the spend sync for each active Google Ads connection."""
    summary = {"synced": 0, "skipped": 0, "failed": 0}
    with Session(bind if bind is not None else engine) as session:
        user_ids = session.exec(
            select(GoogleAdsConnection.user_id).where(GoogleAdsConnection.is_active == True)  # noqa: E712
        ).all()

        for user_id in user_ids:
            try:
                result = await refresh_current_month_if_stale(session, user_id)
            except Exception as e:
                session.rollback()
                summary["failed"] += 1
                logger.error(f"Scheduled spend sync failed: {e}", extra={"user_id": user_id})
                continue
            summary["skipped" if result.skipped else "synced"] += 1

    logger.info(
        f"Scheduled spend sync complete: {summary['synced']} synced, "
        f"{summary['skipped']} skipped, {summary['failed']} failed"
    )
    return summary


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        refresh_connected_accounts,
        "interval",
        minutes=settings.sync_interval_minutes,
        id="spend_refresh",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started. Spend refresh every {settings.sync_interval_minutes} min")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
