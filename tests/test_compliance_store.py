"""Stored compliance evidence: violations and certifications."""

import pytest

from tradeboost.analyzer.compliance_engine import scan_content
from tradeboost.compliance.store import (
    compliance_evidence,
    list_certifications,
    list_violations,
    record_violations,
    resolve_violation,
    store_certification,
)
from tradeboost.core.errors import RecordNotFoundError
from tradeboost.models.compliance_models import CertificationIn, ViolationResolutionIn

USER = "user-1"


def _record(session, content, user_id=USER, campaign_id=None):
    return record_violations(
        session, user_id, scan_content(content).violations, content, campaign_id=campaign_id
    )


def test_scan_violations_are_recorded_unresolved(session):
    records = _record(session, "Gas repairs, 24/7 service", campaign_id="camp-1")

    assert {r.phrase for r in records} == {"gas repairs", "24/7 service"}
    gas = next(r for r in records if r.phrase == "gas repairs")
    assert gas.violation_type == "gasWork"
    assert gas.severity == "critical"
    assert gas.content_flagged == "Gas repairs, 24/7 service"
    assert gas.campaign_id == "camp-1"
    assert gas.detection_method == "ai_filter"
    assert gas.resolved is False
    assert gas.id is not None


def test_clean_content_records_nothing(session):
    assert _record(session, "Friendly local plumber in Leeds") == []
    assert list_violations(session, USER) == []


def test_unresolved_violations_newest_first_and_user_scoped(session):
    first = _record(session, "Gas repairs")[0]
    second = _record(session, "24/7 service")[0]
    _record(session, "Gas repairs", user_id="someone-else")

    assert [r.id for r in list_violations(session, USER)] == [second.id, first.id]


def test_resolve_violation(session):
    record = _record(session, "Gas repairs")[0]

    resolved = resolve_violation(
        session,
        USER,
        record.id,
        ViolationResolutionIn(action="content_rewritten", notes="Now says boiler servicing"),
        at_ms=5_000,
    )

    assert resolved.resolved is True
    assert resolved.resolution_action == "content_rewritten"
    assert resolved.resolution_notes == "Now says boiler servicing"
    assert resolved.resolved_by == USER
    assert resolved.resolved_at == 5_000
    assert list_violations(session, USER) == []
    assert [r.id for r in list_violations(session, USER, include_resolved=True)] == [record.id]


def test_resolution_is_not_rewritten(session):
    record = _record(session, "Gas repairs")[0]
    resolve_violation(session, USER, record.id, ViolationResolutionIn(action="content_removed"), at_ms=1)

    again = resolve_violation(
        session, USER, record.id, ViolationResolutionIn(action="other"), at_ms=2
    )

    assert again.resolution_action == "content_removed"
    assert again.resolved_at == 1


def test_cannot_resolve_another_users_violation(session):
    record = _record(session, "Gas repairs", user_id="someone-else")[0]

    with pytest.raises(RecordNotFoundError):
        resolve_violation(session, USER, record.id, ViolationResolutionIn(action="content_removed"))
    with pytest.raises(RecordNotFoundError):
        resolve_violation(session, USER, 999, ViolationResolutionIn(action="content_removed"))


def test_certifications_are_stored_pending(session):
    store_certification(
        session,
        USER,
        CertificationIn(certification_type="gas_safe", reference_number="123456"),
    )
    store_certification(
        session,
        USER,
        CertificationIn(
            certification_type="insurance",
            provider="Acme Insurance",
            coverage=2_000_000,
            expires_at=1_900_000_000_000,
        ),
    )
    store_certification(
        session, "someone-else", CertificationIn(certification_type="part_p")
    )

    certifications = list_certifications(session, USER)

    assert {c.certification_type for c in certifications} == {"gas_safe", "insurance"}
    assert all(c.verification_status == "pending" and not c.verified for c in certifications)
    insurance = next(c for c in certifications if c.certification_type == "insurance")
    assert insurance.coverage == 2_000_000
    assert insurance.expires_at == 1_900_000_000_000


def test_evidence_bundles_history(session):
    store_certification(session, USER, CertificationIn(certification_type="gas_safe"))
    open_record, closed_record = _record(session, "Gas repairs, 24/7 service")
    resolve_violation(session, USER, closed_record.id, ViolationResolutionIn(action="content_removed"))

    evidence = compliance_evidence(session, USER, at_ms=7_000)

    assert evidence.user_id == USER
    assert evidence.evidence_generated_at == 7_000
    assert [c.certification_type for c in evidence.certifications] == ["gas_safe"]
    assert {v.id for v in evidence.violations} == {open_record.id, closed_record.id}
