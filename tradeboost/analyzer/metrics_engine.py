"""TradeBoost — Dashboard Metrics Engine.

Computes month-to-date KPIs from stored calls and spend snapshots:
qualified calls, ad spend, cost per lead, estimated ROI.
"""

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from tradeboost.accounts.store import account_currency, account_timezone, get_profile
from tradeboost.core.errors import NotAuthenticatedError
from tradeboost.core.money import Money
from tradeboost.core.periods import NowLike, MonthPeriod, resolve_now, resolve_month_period, to_epoch_ms
from tradeboost.models.call_models import QualificationStatus, QualifiedCall
from tradeboost.models.metrics_models import DashboardMetrics, SpendAmount, TimeRange
from tradeboost.models.spend_models import AdSpendSnapshot
from tradeboost.core.logging import get_logger

logger = get_logger("analyzer.metrics")


def count_qualified_calls(session: Session, user_id: str, period: MonthPeriod) -> int:
    """Qualified calls started within [month_start, month_end)."""
    return session.exec(
        select(func.count(QualifiedCall.id)).where(
            QualifiedCall.user_id == user_id,
            QualifiedCall.started_at >= period.month_start,
            QualifiedCall.started_at < period.month_end,
            QualifiedCall.qualification_status == QualificationStatus.QUALIFIED.value,
        )
    ).one()


def month_to_date_spend(
    session: Session, user_id: str, period: MonthPeriod, currency_code: str
) -> Money:
    """Sum of snapshot spend in ``currency_code`` from the 1st through today.

    Snapshots stored in another currency (e.g. after the account's currency
    changed) cannot be added without an exchange rate, so they are logged
    and left out of the total.
    """
    rows = session.exec(
        select(AdSpendSnapshot).where(
            AdSpendSnapshot.user_id == user_id,
            # YYYY-MM-DD compares in date order
            AdSpendSnapshot.date >= period.first_of_month,
            AdSpendSnapshot.date <= period.today_date,
        )
    ).all()

    total = Money(micros=0, currency_code=currency_code)
    excluded = {}
    for row in rows:
        if row.currency_code and row.currency_code != currency_code:
            excluded[row.currency_code] = excluded.get(row.currency_code, 0) + 1
            continue
        total = total + Money(micros=row.spend_micros, currency_code=currency_code)

    if excluded:
        logger.warning(
            f"Excluded spend in {', '.join(sorted(excluded))} from {currency_code} total "
            f"({sum(excluded.values())} days)",
            extra={"user_id": user_id},
        )
    return total


def compute_cost_per_lead(spend: float, qualified_calls: int) -> Optional[float]:
    """Spend per qualified call, or None when there are no leads."""
    if qualified_calls <= 0:
        return None
    return spend / qualified_calls


def get_dashboard_metrics(
    session: Session,
    user_id: Optional[str],
    now: NowLike = None,
) -> DashboardMetrics:
    """Recompute the dashboard KPIs for ``user_id``. Read-only."""
    if not user_id:
        raise NotAuthenticatedError()

    at = resolve_now(now)
    period = resolve_month_period(account_timezone(session, user_id), now=at)

    profile = get_profile(session, user_id)
    average_job_value = profile.average_job_value if profile else 0.0
    currency_code = account_currency(session, user_id)

    qualified_calls = count_qualified_calls(session, user_id, period)
    spend = month_to_date_spend(session, user_id, period, currency_code)

    estimated_revenue = qualified_calls * (average_job_value or 0.0)
    metrics = DashboardMetrics(
        time_range=TimeRange(
            month_key=period.month_key, start=period.month_start, end=period.month_end
        ),
        qualified_calls=qualified_calls,
        ad_spend=SpendAmount(amount=spend.amount, currency_code=spend.currency_code),
        cost_per_lead=compute_cost_per_lead(spend.amount, qualified_calls),
        estimated_revenue=estimated_revenue,
        estimated_roi=estimated_revenue - spend.amount,
        last_updated_at=to_epoch_ms(at),
        has_real_data=qualified_calls > 0 or spend.micros > 0,
    )

    logger.info(
        f"Dashboard {period.month_key}: {qualified_calls} qualified calls, spend {spend}",
        extra={"user_id": user_id},
    )
    return metrics
