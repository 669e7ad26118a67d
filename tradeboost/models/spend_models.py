"""TradeBoost — Ad-Spend Snapshot Models."""

from typing import Optional

from pydantic import BaseModel
from sqlalchemy import BigInteger
from sqlmodel import SQLModel, Field, UniqueConstraint

from tradeboost.core.periods import now_ms


class AdSpendSnapshot(SQLModel, table=True):
    """One day's spend for one account.

    Unique constraint on (user_id, date); a resync replaces the row in full
    because the ads platform may revise a day's figure after the fact.
    """

    __tablename__ = "ad_spend_snapshots"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_spend_user_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    date: str = Field(index=True, description="YYYY-MM-DD in reporting timezone")
    currency_code: str = Field(default="GBP")
    spend_micros: int = Field(default=0, sa_type=BigInteger)
    synced_at: int = Field(default_factory=now_ms, sa_type=BigInteger)
    source: str = Field(default="google_ads")
    google_customer_id: Optional[str] = None


class SyncLease(SQLModel, table=True):
    """Short-lived per-user lock held while a spend sync runs."""

    __tablename__ = "sync_leases"

    user_id: str = Field(primary_key=True)
    holder: str
    expires_at: int = Field(sa_type=BigInteger)


class SourceMeta(BaseModel):
    """Provenance attached to a snapshot write."""

    source: str = "google_ads"
    google_customer_id: Optional[str] = None


class SyncResult(BaseModel):
    """Outcome of a refresh attempt."""

    skipped: bool
    reason: Optional[str] = None  # "fresh_enough" | "sync_in_progress"
    days: Optional[int] = None
