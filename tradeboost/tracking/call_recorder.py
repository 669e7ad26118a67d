"""TradeBoost — Call Qualification Recorder.

Ingests call events from call-tracking providers. Each external call id is
recorded at most once; qualification is decided on first ingestion and
never revisited.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from tradeboost.config import settings
from tradeboost.database import native_insert
from tradeboost.models.call_models import (
    CallEventIn,
    QualificationReason,
    QualificationStatus,
    QualifiedCall,
)
from tradeboost.core.periods import now_ms
from tradeboost.core.logging import get_logger

logger = get_logger("tracking.calls")


def qualify_call(
    answered: bool,
    duration_seconds: int,
    min_duration: Optional[int] = None,
) -> tuple[QualificationStatus, QualificationReason]:
    """Apply the lead rule: answered AND duration >= ``min_duration`` seconds."""
    if min_duration is None:
        min_duration = settings.qualification_min_duration_seconds

    if not answered:
        return QualificationStatus.UNQUALIFIED, QualificationReason.NOT_ANSWERED
    if duration_seconds < min_duration:
        return QualificationStatus.UNQUALIFIED, QualificationReason.SHORT_DURATION
    return QualificationStatus.QUALIFIED, QualificationReason.RULES_SATISFIED


def find_call(
    session: Session, provider: str, external_call_id: str
) -> Optional[QualifiedCall]:
    return session.exec(
        select(QualifiedCall).where(
            QualifiedCall.provider == provider,
            QualifiedCall.external_call_id == external_call_id,
        )
    ).first()


def record_call_event(
    session: Session,
    event: CallEventIn,
    min_duration: Optional[int] = None,
) -> int:
    """Record a call event and return its record id.

    Redelivery of the same (provider, external_call_id) returns the existing
    id without touching the stored row. The unique constraint is what
    guarantees this under concurrent deliveries; the initial lookup only
    saves a write on the common redelivery path.
    """
    existing = find_call(session, event.provider, event.external_call_id)
    if existing:
        logger.info(
            f"Duplicate call event {event.provider}:{event.external_call_id}, keeping record {existing.id}",
            extra={"user_id": existing.user_id, "provider": event.provider},
        )
        return existing.id

    status, reason = qualify_call(event.answered, event.duration_seconds, min_duration)
    values = {
        **event.model_dump(),
        "qualification_status": status.value,
        "qualification_reason": reason.value,
        "created_at": now_ms(),
    }

    insert = native_insert(session)
    if insert is not None:
        stmt = (
            insert(QualifiedCall)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["provider", "external_call_id"])
        )
        session.connection().execute(stmt)
        session.commit()
    else:
        try:
            session.add(QualifiedCall(**values))
            session.commit()
        except IntegrityError:
            session.rollback()

    record = find_call(session, event.provider, event.external_call_id)
    if record is None:
        raise RuntimeError(
            f"Call {event.provider}:{event.external_call_id} missing after insert"
        )

    logger.info(
        f"Recorded call {record.id} as {record.qualification_status} ({record.qualification_reason})",
        extra={"user_id": record.user_id, "provider": record.provider},
    )
    return record.id
