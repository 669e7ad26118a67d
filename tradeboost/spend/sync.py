"""TradeBoost — Spend Sync Orchestrator.

Runs one freshness-gated sync of month-to-date spend:
  resolve period → freshness check → lease → authenticate → report → upsert

There is no persisted state machine; each invocation decides afresh. The
freshness gate bounds calls to Google Ads, so the sync can be triggered
opportunistically (dashboard load, manual retry, periodic job).
"""

from typing import Callable, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from tradeboost.config import settings
from tradeboost.accounts.store import account_currency, account_timezone, get_connection
from tradeboost.connectors.google_ads.client import GoogleAdsClient
from tradeboost.connectors.google_ads.errors import GoogleAdsAuthError
from tradeboost.connectors.google_ads.oauth import GoogleTokenRefresher, TokenGrant
from tradeboost.connectors.google_ads.transformer import DailyCostRow
from tradeboost.core.errors import NotAuthenticatedError, SnapshotValidationError, SpendSyncError
from tradeboost.core.periods import NowLike, resolve_now, resolve_month_period, to_epoch_ms
from tradeboost.models.account_models import GoogleAdsConnection
from tradeboost.models.spend_models import SourceMeta, SyncResult
from tradeboost.spend.snapshot_store import latest_synced_at, upsert_daily_spend
from tradeboost.spend.sync_lease import acquire_lease, release_lease
from tradeboost.core.logging import get_logger

logger = get_logger("spend.sync")

SKIP_FRESH = "fresh_enough"
SKIP_IN_PROGRESS = "sync_in_progress"


class SpendReportClient(Protocol):
    async def report(self, date_from: str, date_to: str) -> List[DailyCostRow]: ...


class TokenRefresher(Protocol):
    async def refresh(self, refresh_token: str) -> TokenGrant: ...


ReportClientFactory = Callable[[GoogleAdsConnection], SpendReportClient]


def default_report_client(connection: GoogleAdsConnection) -> GoogleAdsClient:
    return GoogleAdsClient(
        access_token=connection.access_token,
        customer_id=connection.customer_id,
    )


async def _authenticate(
    session: Session,
    user_id: str,
    token_refresher: TokenRefresher,
    at_ms: int,
) -> GoogleAdsConnection:
    """Load the user's connection, refreshing an expired access token once."""
    connection = get_connection(session, user_id)
    if connection is None or not connection.is_active:
        raise GoogleAdsAuthError("Google Ads not connected")

    if connection.is_expired(at_ms):
        if not connection.refresh_token:
            raise GoogleAdsAuthError("Google Ads token expired and no refresh token is stored")
        grant = await token_refresher.refresh(connection.refresh_token)
        connection.access_token = grant.access_token
        connection.expires_at = grant.expires_at
        session.add(connection)
        session.commit()
        session.refresh(connection)
        logger.info("Stored refreshed Google Ads token", extra={"user_id": user_id})

    return connection


async def _fetch_rows(
    client: SpendReportClient, date_from: str, date_to: str, user_id: str
) -> List[DailyCostRow]:
    try:
        return await client.report(date_from, date_to)
    except GoogleAdsAuthError:
        raise
    except Exception as e:
        logger.error(f"Google Ads spend report failed: {e}", extra={"user_id": user_id})
        raise SpendSyncError(f"Failed to fetch Google Ads spend: {e}") from e
    finally:
        close = getattr(client, "close", None)
        if close is not None:
            await close()


async def refresh_current_month_if_stale(
    session: Session,
    user_id: Optional[str],
    *,
    report_client_factory: Optional[ReportClientFactory] = None,
    token_refresher: Optional[TokenRefresher] = None,
    now: NowLike = None,
    force: bool = False,
) -> SyncResult:
    """Sync this month's daily spend from Google Ads unless recently synced.

    Raises ``GoogleAdsAuthError`` for credential problems and
    ``SpendSyncError`` when the report fetch fails or a row cannot be stored;
    in the latter case ``days_synced`` counts the days already committed.
    Rows without a date or with invalid spend are skipped and logged.
    """
    if not user_id:
        raise NotAuthenticatedError()

    at = resolve_now(now)
    at_ms = to_epoch_ms(at)
    period = resolve_month_period(account_timezone(session, user_id), now=at)

    if not force:
        latest = latest_synced_at(session, user_id, period.month_key)
        freshness_ms = settings.spend_freshness_minutes * 60 * 1000
        if latest is not None and at_ms - latest < freshness_ms:
            logger.info(
                f"Spend for {period.month_key} synced {(at_ms - latest) // 1000}s ago, skipping",
                extra={"user_id": user_id},
            )
            return SyncResult(skipped=True, reason=SKIP_FRESH)

    holder = acquire_lease(session, user_id, settings.sync_lease_seconds, at_ms)
    if holder is None:
        logger.info("Another sync holds the lease, skipping", extra={"user_id": user_id})
        return SyncResult(skipped=True, reason=SKIP_IN_PROGRESS)

    days = 0
    try:
        connection = await _authenticate(
            session, user_id, token_refresher or GoogleTokenRefresher(), at_ms
        )
        factory = report_client_factory or default_report_client
        rows = await _fetch_rows(
            factory(connection), period.first_of_month, period.today_date, user_id
        )

        currency = account_currency(session, user_id)
        source_meta = SourceMeta(
            source="google_ads",
            google_customer_id=connection.customer_id or settings.google_ads_login_customer_id or None,
        )
        for row in rows:
            if not row.date:
                logger.warning(f"Report row missing date: {row}", extra={"user_id": user_id})
                continue
            try:
                upsert_daily_spend(
                    session,
                    user_id,
                    row.date,
                    currency,
                    row.cost_micros,
                    source_meta,
                    synced_at=at_ms,
                )
            except SnapshotValidationError as e:
                logger.warning(f"Skipping report row: {e}", extra={"user_id": user_id})
                continue
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(
                    f"Storing spend for {row.date} failed after {days} days: {e}",
                    extra={"user_id": user_id},
                )
                raise SpendSyncError(
                    f"Failed to store Google Ads spend: {e}", days_synced=days
                ) from e
            days += 1
    finally:
        release_lease(session, user_id, holder)

    logger.info(
        f"Synced {days} days of spend for {period.month_key}",
        extra={"user_id": user_id},
    )
    return SyncResult(skipped=False, days=days)
