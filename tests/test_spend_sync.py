"""Freshness-gated spend sync."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from conftest import NOW
from tradeboost.spend import sync as sync_module
from tradeboost.accounts.store import get_connection, save_connection, save_profile
from tradeboost.connectors.google_ads.errors import GoogleAdsAPIError, GoogleAdsAuthError
from tradeboost.connectors.google_ads.oauth import TokenGrant
from tradeboost.connectors.google_ads.transformer import DailyCostRow
from tradeboost.core.errors import NotAuthenticatedError, SpendSyncError
from tradeboost.core.periods import to_epoch_ms
from tradeboost.models.account_models import ConnectionIn, ProfileIn
from tradeboost.spend.snapshot_store import find_snapshot, upsert_daily_spend
from tradeboost.spend.sync import SKIP_FRESH, SKIP_IN_PROGRESS, refresh_current_month_if_stale
from tradeboost.spend.sync_lease import acquire_lease

NOW_MS = to_epoch_ms(NOW)
USER = "user-1"


class FakeReportClient:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.calls = []
        self.closed = False

    async def report(self, date_from, date_to):
        self.calls.append((date_from, date_to))
        if self.error:
            raise self.error
        return self.rows

    async def close(self):
        self.closed = True


class FakeTokenRefresher:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def refresh(self, refresh_token):
        self.calls.append(refresh_token)
        if self.error:
            raise self.error
        return TokenGrant(access_token="fresh-token", expires_at=NOW_MS + 3_600_000)


def _connect(session, expires_at=NOW_MS + 3_600_000, refresh_token="refresh-1"):
    save_connection(
        session,
        USER,
        ConnectionIn(
            access_token="access-1",
            refresh_token=refresh_token,
            expires_at=expires_at,
            customer_id="123-456-7890",
        ),
    )


def _factory(client, seen=None):
    def build(connection):
        if seen is not None:
            seen.append(connection.access_token)
        return client

    return build


async def test_recent_sync_is_skipped(session):
    _connect(session)
    upsert_daily_spend(
        session, USER, "2026-03-14", "GBP", 1_000_000,
        synced_at=to_epoch_ms(NOW - timedelta(minutes=10)),
    )
    client = FakeReportClient()

    result = await refresh_current_month_if_stale(
        session, USER, report_client_factory=_factory(client), now=NOW
    )

    assert result.skipped is True
    assert result.reason == SKIP_FRESH
    assert client.calls == []


async def test_stale_sync_fetches_and_replaces(session):
    _connect(session)
    upsert_daily_spend(
        session, USER, "2026-03-14", "GBP", 1_000_000,
        synced_at=to_epoch_ms(NOW - timedelta(minutes=50)),
    )
    client = FakeReportClient(
        rows=[
            DailyCostRow(date="2026-03-14", cost_micros="2500000"),
            DailyCostRow(date="2026-03-15", cost_micros="0"),
        ]
    )

    result = await refresh_current_month_if_stale(
        session, USER, report_client_factory=_factory(client), now=NOW
    )

    assert result.skipped is False
    assert result.days == 2
    assert client.calls == [("2026-03-01", "2026-03-15")]
    assert client.closed is True
    snapshot = find_snapshot(session, USER, "2026-03-14")
    assert snapshot.spend_micros == 2_500_000
    assert snapshot.synced_at == NOW_MS
    assert snapshot.google_customer_id == "123-456-7890"


async def test_force_bypasses_freshness(session):
    _connect(session)
    upsert_daily_spend(session, USER, "2026-03-14", "GBP", 1, synced_at=NOW_MS)
    client = FakeReportClient(rows=[DailyCostRow(date="2026-03-14", cost_micros=7)])

    result = await refresh_current_month_if_stale(
        session, USER, report_client_factory=_factory(client), now=NOW, force=True
    )

    assert result.days == 1
    assert find_snapshot(session, USER, "2026-03-14").spend_micros == 7


async def test_bad_rows_are_skipped(session):
    _connect(session)
    client = FakeReportClient(
        rows=[
            DailyCostRow(date=None, cost_micros="100"),
            DailyCostRow(date="2026-03-02", cost_micros="-5"),
            DailyCostRow(date="2026-03-03", cost_micros="300"),
        ]
    )

    result = await refresh_current_month_if_stale(
        session, USER, report_client_factory=_factory(client), now=NOW
    )

    assert result.days == 1
    assert find_snapshot(session, USER, "2026-03-02") is None
    assert find_snapshot(session, USER, "2026-03-03").spend_micros == 300


async def test_profile_currency_and_timezone_are_used(session):
    save_profile(
        session,
        USER,
        ProfileIn(reporting_timezone="Pacific/Auckland", currency_code="NZD"),
    )
    _connect(session)
    client = FakeReportClient(rows=[DailyCostRow(date="2026-03-16", cost_micros=5)])

    await refresh_current_month_if_stale(
        session, USER, report_client_factory=_factory(client), now=NOW
    )

    # Midday UTC on the 15th is already the 16th in Auckland
    assert client.calls == [("2026-03-01", "2026-03-16")]
    assert find_snapshot(session, USER, "2026-03-16").currency_code == "NZD"


async def test_expired_token_is_refreshed_once(session):
    _connect(session, expires_at=NOW_MS - 1)
    refresher = FakeTokenRefresher()
    seen = []
    client = FakeReportClient(rows=[])

    result = await refresh_current_month_if_stale(
        session,
        USER,
        report_client_factory=_factory(client, seen),
        token_refresher=refresher,
        now=NOW,
    )

    assert result.skipped is False
    assert refresher.calls == ["refresh-1"]
    assert seen == ["fresh-token"]
    assert get_connection(session, USER).access_token == "fresh-token"


async def test_expired_token_without_refresh_token(session):
    _connect(session, expires_at=NOW_MS - 1, refresh_token=None)

    with pytest.raises(GoogleAdsAuthError):
        await refresh_current_month_if_stale(
            session, USER, report_client_factory=_factory(FakeReportClient()), now=NOW
        )


async def test_failed_refresh_is_an_auth_error(session):
    _connect(session, expires_at=NOW_MS - 1)
    refresher = FakeTokenRefresher(error=GoogleAdsAuthError("Token refresh failed: invalid_grant"))
    client = FakeReportClient()

    with pytest.raises(GoogleAdsAuthError):
        await refresh_current_month_if_stale(
            session,
            USER,
            report_client_factory=_factory(client),
            token_refresher=refresher,
            now=NOW,
        )
    assert client.calls == []


async def test_not_connected(session):
    with pytest.raises(GoogleAdsAuthError, match="not connected"):
        await refresh_current_month_if_stale(session, USER, now=NOW)


async def test_report_failure_raises_sync_error_and_releases_lease(session):
    _connect(session)
    client = FakeReportClient(error=GoogleAdsAPIError("Internal error", 500))

    with pytest.raises(SpendSyncError, match="Failed to fetch Google Ads spend"):
        await refresh_current_month_if_stale(
            session, USER, report_client_factory=_factory(client), now=NOW
        )

    assert client.closed is True
    assert acquire_lease(session, USER, ttl_seconds=120, at_ms=NOW_MS) is not None


async def test_concurrent_sync_is_skipped(session):
    _connect(session)
    assert acquire_lease(session, USER, ttl_seconds=120, at_ms=NOW_MS) is not None
    client = FakeReportClient()

    result = await refresh_current_month_if_stale(
        session, USER, report_client_factory=_factory(client), now=NOW
    )

    assert result.skipped is True
    assert result.reason == SKIP_IN_PROGRESS
    assert client.calls == []


async def test_requires_user():
    with pytest.raises(NotAuthenticatedError):
        await refresh_current_month_if_stale(None, None)


async def test_out_of_range_spend_is_skipped(session):
    _connect(session)
    client = FakeReportClient(
        rows=[
            DailyCostRow(date="2026-03-02", cost_micros="99999999999999999999999"),
            DailyCostRow(date="2026-03-03", cost_micros="300"),
        ]
    )

    result = await refresh_current_month_if_stale(
        session, USER, report_client_factory=_factory(client), now=NOW
    )

    assert result.days == 1
    assert find_snapshot(session, USER, "2026-03-02") is None
    assert find_snapshot(session, USER, "2026-03-03").spend_micros == 300


async def test_storage_failure_reports_days_synced(session, monkeypatch):
    _connect(session)
    client = FakeReportClient(
        rows=[
            DailyCostRow(date="2026-03-01", cost_micros="100"),
            DailyCostRow(date="2026-03-02", cost_micros="200"),
        ]
    )
    real_upsert = sync_module.upsert_daily_spend

    def flaky_upsert(session, user_id, date, *args, **kwargs):
        if date == "2026-03-02":
            raise OperationalError("INSERT INTO ad_spend_snapshots", {}, Exception("disk I/O error"))
        return real_upsert(session, user_id, date, *args, **kwargs)

    monkeypatch.setattr(sync_module, "upsert_daily_spend", flaky_upsert)

    with pytest.raises(SpendSyncError) as exc:
        await refresh_current_month_if_stale(
            session, USER, report_client_factory=_factory(client), now=NOW
        )

    assert exc.value.days_synced == 1
    assert find_snapshot(session, USER, "2026-03-01").spend_micros == 100
    assert acquire_lease(session, USER, ttl_seconds=120, at_ms=NOW_MS) is not None
