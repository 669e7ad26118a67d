"""TradeBoost — Dashboard Metrics Output (derived, never persisted)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Serializes with camelCase keys for the dashboard consumer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeRange(_CamelModel):
    month_key: str
    start: int
    end: int


class SpendAmount(_CamelModel):
    amount: float
    currency_code: str


class DashboardMetrics(_CamelModel):
    """Month-to-date lead and spend KPIs.

    ``cost_per_lead`` is ``None`` when there are no qualified calls; the UI
    renders that as "N/A" rather than 0 or infinity.
    """

    time_range: TimeRange
    qualified_calls: int
    ad_spend: SpendAmount
    cost_per_lead: Optional[float] = None
    estimated_revenue: float = 0.0
    estimated_roi: float
    last_updated_at: int
    has_real_data: bool
