"""TradeBoost — Ad-Copy Compliance Routes."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session
from typing import List, Optional

from tradeboost.database import get_session
from tradeboost.api.deps import get_current_user_id
from tradeboost.analyzer.compliance_engine import (
    apply_safe_replacements,
    compliance_summary,
    generate_compliance_report,
    scan_content,
    validate_campaign_compliance,
    validate_certification_requirements,
)
from tradeboost.compliance import store
from tradeboost.core.errors import RecordNotFoundError
from tradeboost.models.compliance_models import (
    CampaignDraft,
    CertificationIn,
    Certifications,
    ComplianceCheck,
    ComplianceEvidence,
    ComplianceReport,
    ComplianceResult,
    ComplianceSummary,
    ComplianceViolation,
    ComplianceViolationRecord,
    UserCertification,
    ViolationResolutionIn,
)
from tradeboost.core.logging import get_logger

logger = get_logger("api.compliance")

router = APIRouter(prefix="/compliance", tags=["Compliance"])


# ── Request / Response Models ──


class ContentRequest(BaseModel):
    content: str = Field(min_length=1)
    campaign_id: Optional[str] = None


class CertificationRequest(BaseModel):
    content: str = Field(min_length=1)
    certifications: Certifications = Certifications()


class RewriteResponse(BaseModel):
    original: str
    rewritten: str
    scan: ComplianceResult


class CertificationResponse(BaseModel):
    violations: List[ComplianceViolation]
    report: ComplianceReport


class CampaignCheckResponse(BaseModel):
    checks: List[ComplianceCheck]
    summary: ComplianceSummary


# ── Endpoints ──


@router.post("/scan", response_model=ComplianceResult)
async def scan(
    request: ContentRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Flag banned phrases and claims that need evidence.

    Violations are kept on file until resolved.
    """
    result = scan_content(request.content)
    store.record_violations(
        session, user_id, result.violations, request.content, campaign_id=request.campaign_id
    )
    return result


@router.post("/rewrite", response_model=RewriteResponse)
async def rewrite(request: ContentRequest, user_id: str = Depends(get_current_user_id)):
    """Apply safe replacements and rescan the result."""
    rewritten = apply_safe_replacements(request.content)
    return RewriteResponse(
        original=request.content, rewritten=rewritten, scan=scan_content(rewritten)
    )


@router.post("/certification-check", response_model=CertificationResponse)
async def check_certifications(
    request: CertificationRequest, user_id: str = Depends(get_current_user_id)
):
    """Check content against the advertiser's verified credentials."""
    violations = validate_certification_requirements(request.content, request.certifications)
    scan_result = scan_content(request.content)
    report = generate_compliance_report(request.content, request.certifications, scan_result)
    if violations:
        logger.info(
            f"Certification gaps: {', '.join(v.type for v in violations)}",
            extra={"user_id": user_id},
        )
    return CertificationResponse(violations=violations, report=report)


@router.post("/campaign-check", response_model=CampaignCheckResponse)
async def campaign_check(
    campaign: CampaignDraft, user_id: str = Depends(get_current_user_id)
):
    """Run the UK trade rules over a campaign draft."""
    checks = validate_campaign_compliance(campaign)
    return CampaignCheckResponse(checks=checks, summary=compliance_summary(checks))


# ── Evidence ──


@router.post("/certifications", response_model=UserCertification, status_code=201)
async def submit_certification(
    request: CertificationIn,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """File a certification as pending evidence."""
    return store.store_certification(session, user_id, request)


@router.get("/certifications", response_model=List[UserCertification])
async def get_certifications(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    return store.list_certifications(session, user_id)


@router.get("/violations", response_model=List[ComplianceViolationRecord])
async def get_violations(
    include_resolved: bool = False,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Unresolved violations, newest first; ``include_resolved`` adds the rest."""
    return store.list_violations(session, user_id, include_resolved=include_resolved)


@router.post("/violations/{violation_id}/resolve", response_model=ComplianceViolationRecord)
async def resolve_violation(
    violation_id: int,
    request: ViolationResolutionIn,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    try:
        return store.resolve_violation(session, user_id, violation_id, request)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/evidence", response_model=ComplianceEvidence)
async def get_evidence(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Certifications and violation history for a legal audit."""
    return store.compliance_evidence(session, user_id)
