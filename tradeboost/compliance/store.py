"""TradeBoost — Compliance Evidence Store.

Detected violations and submitted certifications are kept per advertiser so
the account can show what was flagged, what was done about it, and which
credentials were on file at the time.
"""

from typing import List, Optional

from sqlmodel import Session, select

from tradeboost.core.errors import RecordNotFoundError
from tradeboost.core.periods import now_ms
from tradeboost.models.compliance_models import (
    CertificationIn,
    ComplianceEvidence,
    ComplianceViolation,
    ComplianceViolationRecord,
    UserCertification,
    ViolationResolutionIn,
)
from tradeboost.core.logging import get_logger

logger = get_logger("compliance.store")


def record_violations(
    session: Session,
    user_id: str,
    violations: List[ComplianceViolation],
    content: str,
    campaign_id: Optional[str] = None,
    detection_method: str = "ai_filter",
) -> List[ComplianceViolationRecord]:
    """Store one unresolved record per violation found in ``content``."""
    records = [
        ComplianceViolationRecord(
            user_id=user_id,
            violation_type=v.type,
            description=v.reason,
            severity=v.severity,
            phrase=v.phrase,
            content_flagged=content,
            campaign_id=campaign_id,
            detection_method=detection_method,
        )
        for v in violations
    ]
    if not records:
        return []

    session.add_all(records)
    session.commit()
    for record in records:
        session.refresh(record)
    logger.info(
        f"Recorded {len(records)} compliance violations: {', '.join(v.type for v in violations)}",
        extra={"user_id": user_id},
    )
    return records


def list_violations(
    session: Session, user_id: str, include_resolved: bool = False
) -> List[ComplianceViolationRecord]:
    """The user's violations, newest first."""
    query = select(ComplianceViolationRecord).where(ComplianceViolationRecord.user_id == user_id)
    if not include_resolved:
        query = query.where(ComplianceViolationRecord.resolved == False)  # noqa: E712
    query = query.order_by(
        ComplianceViolationRecord.created_at.desc(), ComplianceViolationRecord.id.desc()
    )
    return list(session.exec(query).all())


def resolve_violation(
    session: Session,
    user_id: str,
    violation_id: int,
    resolution: ViolationResolutionIn,
    at_ms: Optional[int] = None,
) -> ComplianceViolationRecord:
    """Mark a violation resolved. A resolved record is never rewritten."""
    record = session.get(ComplianceViolationRecord, violation_id)
    if record is None or record.user_id != user_id:
        raise RecordNotFoundError(f"Compliance violation {violation_id} not found")
    if record.resolved:
        logger.info(f"Violation {violation_id} already resolved", extra={"user_id": user_id})
        return record

    record.resolved = True
    record.resolution_action = resolution.action
    record.resolution_notes = resolution.notes
    record.resolved_by = user_id
    record.resolved_at = at_ms if at_ms is not None else now_ms()
    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info(
        f"Resolved violation {violation_id} ({resolution.action})", extra={"user_id": user_id}
    )
    return record


def store_certification(
    session: Session, user_id: str, data: CertificationIn
) -> UserCertification:
    """Add a certification as pending evidence. Earlier submissions are kept."""
    certification = UserCertification(
        user_id=user_id,
        **data.model_dump(mode="json"),
    )
    session.add(certification)
    session.commit()
    session.refresh(certification)
    logger.info(
        f"Stored {certification.certification_type} certification", extra={"user_id": user_id}
    )
    return certification


def list_certifications(session: Session, user_id: str) -> List[UserCertification]:
    return list(
        session.exec(
            select(UserCertification)
            .where(UserCertification.user_id == user_id)
            .order_by(UserCertification.uploaded_at.desc(), UserCertification.id.desc())
        ).all()
    )


def compliance_evidence(
    session: Session, user_id: str, at_ms: Optional[int] = None
) -> ComplianceEvidence:
    """Certifications plus every violation, resolved or not."""
    return ComplianceEvidence(
        user_id=user_id,
        certifications=list_certifications(session, user_id),
        violations=list_violations(session, user_id, include_resolved=True),
        evidence_generated_at=at_ms if at_ms is not None else now_ms(),
    )
