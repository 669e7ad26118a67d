"""TradeBoost — Call Tracking Models (Append-only)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import BigInteger
from sqlmodel import SQLModel, Field, UniqueConstraint

from tradeboost.core.periods import now_ms

# Column limits: started_at is BIGINT, duration_seconds INTEGER
MAX_EPOCH_MS = 2**63 - 1
MAX_DURATION_SECONDS = 2**31 - 1


class QualificationStatus(str, Enum):
    QUALIFIED = "qualified"
    UNQUALIFIED = "unqualified"


class QualificationReason(str, Enum):
    """Why a call was (or was not) counted as a lead."""

    NOT_ANSWERED = "not_answered"
    SHORT_DURATION = "short_duration"
    RULES_SATISFIED = "rules_satisfied"


class QualifiedCall(SQLModel, table=True):
    """One inbound call, classified once on first ingestion.

    Unique constraint on (provider, external_call_id) makes webhook
    redelivery a no-op. Rows are never updated after insert.
    """

    __tablename__ = "qualified_calls"
    __table_args__ = (
        UniqueConstraint("provider", "external_call_id", name="uq_call_external_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    provider: str = Field(description="twilio | callrail | ...")
    external_call_id: str = Field(description="Provider's unique call id")
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    tracking_number: Optional[str] = None
    started_at: int = Field(sa_type=BigInteger, index=True, description="Epoch ms UTC")
    duration_seconds: int = Field(ge=0)
    answered: bool
    qualification_status: str = Field(index=True)
    qualification_reason: str
    created_at: int = Field(default_factory=now_ms, sa_type=BigInteger)


class CallEventIn(BaseModel):
    """Normalized inbound call event, validated at the ingestion boundary."""

    user_id: str = PydanticField(min_length=1)
    provider: str = PydanticField(min_length=1)
    external_call_id: str = PydanticField(min_length=1)
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    tracking_number: Optional[str] = None
    started_at: int = PydanticField(ge=0, le=MAX_EPOCH_MS, description="Epoch ms UTC")
    duration_seconds: int = PydanticField(ge=0, le=MAX_DURATION_SECONDS)
    answered: bool
