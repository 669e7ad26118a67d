"""Periodic spend refresh job."""

from tradeboost.accounts.store import disconnect, save_connection
from tradeboost.config import settings
from tradeboost.core.periods import now_ms, resolve_month_period
from tradeboost.models.account_models import ConnectionIn
from tradeboost.scheduler import jobs
from tradeboost.spend.snapshot_store import upsert_daily_spend


def _connect(session, user_id):
    save_connection(
        session,
        user_id,
        ConnectionIn(access_token="t", expires_at=now_ms() + 3_600_000, customer_id="1"),
    )


async def test_refresh_connected_accounts_counts_outcomes(engine, session):
    today = resolve_month_period().today_date
    _connect(session, "fresh-user")
    upsert_daily_spend(session, "fresh-user", today, "GBP", 100)
    # Expired token and nothing to refresh with: fails without stopping the loop
    save_connection(
        session, "broken-user", ConnectionIn(access_token="t", expires_at=0, customer_id="2")
    )
    _connect(session, "gone-user")
    disconnect(session, "gone-user")

    summary = await jobs.refresh_connected_accounts(bind=engine)

    assert summary == {"synced": 0, "skipped": 1, "failed": 1}


def test_scheduler_disabled_by_default(monkeypatch):
    monkeypatch.setattr(settings, "scheduler_enabled", False)
    jobs.start_scheduler()
    assert jobs.scheduler.running is False
    jobs.stop_scheduler()
