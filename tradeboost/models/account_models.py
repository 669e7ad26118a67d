"""TradeBoost — Account Models (onboarding profile, Google Ads connection)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import BigInteger
from sqlmodel import SQLModel, Field

from tradeboost.core.periods import now_ms


class TradeType(str, Enum):
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    BOTH = "both"


class OnboardingProfile(SQLModel, table=True):
    """Business profile captured during onboarding."""

    __tablename__ = "onboarding_profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, unique=True)
    business_name: str = ""
    trade_type: Optional[str] = Field(default=None, description="plumbing | electrical | both")
    service_city: str = ""
    average_job_value: float = Field(default=0.0, description="Major currency units")
    monthly_budget: float = 0.0
    monthly_leads_goal: int = 0
    reporting_timezone: Optional[str] = Field(
        default=None, description="IANA name; falls back to settings.reporting_timezone"
    )
    currency_code: str = "GBP"
    updated_at: int = Field(default_factory=now_ms, sa_type=BigInteger)


class GoogleAdsConnection(SQLModel, table=True):
    """OAuth tokens linking a user to their Google Ads account."""

    __tablename__ = "google_ads_connections"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, unique=True)
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: int = Field(sa_type=BigInteger, description="Epoch ms")
    scope: str = ""
    customer_id: Optional[str] = Field(default=None, description="Google Ads customer id")
    is_active: bool = True
    created_at: int = Field(default_factory=now_ms, sa_type=BigInteger)
    disconnected_at: Optional[int] = Field(default=None, sa_type=BigInteger)

    def is_expired(self, at_ms: Optional[int] = None) -> bool:
        return self.expires_at < (at_ms if at_ms is not None else now_ms())


# ── API payloads ──


class ProfileIn(BaseModel):
    business_name: str = ""
    trade_type: Optional[TradeType] = None
    service_city: str = ""
    average_job_value: float = 0.0
    monthly_budget: float = 0.0
    monthly_leads_goal: int = 0
    reporting_timezone: Optional[str] = None
    currency_code: str = "GBP"


class ConnectionIn(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: int
    scope: str = ""
    customer_id: Optional[str] = None
