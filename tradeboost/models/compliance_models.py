"""TradeBoost — Compliance Scanner Schemas & Evidence Tables."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import BigInteger
from sqlmodel import SQLModel, Field

from tradeboost.core.periods import now_ms
from tradeboost.models.account_models import TradeType


class ComplianceViolation(BaseModel):
    type: str
    phrase: str
    reason: str
    severity: str  # "low" | "medium" | "high" | "critical"
    replacement: Optional[str] = None


class ComplianceWarning(BaseModel):
    type: str
    phrase: str
    concern: str
    recommendation: str


class ComplianceResult(BaseModel):
    """Result of scanning a block of ad copy."""

    approved: bool
    violations: List[ComplianceViolation] = []
    warnings: List[ComplianceWarning] = []
    suggestions: List[str] = []


class Certifications(BaseModel):
    """Which credentials the advertiser has verified."""

    gas_safe: bool = False
    part_p: bool = False
    insurance: bool = False


class ServiceArea(BaseModel):
    city: str
    postcode: Optional[str] = None
    radius: float = 10.0  # miles


class AdCopy(BaseModel):
    headlines: List[str] = []
    descriptions: List[str] = []


class CampaignDraft(BaseModel):
    """The parts of a generated campaign that compliance rules inspect."""

    trade_type: TradeType
    service_area: ServiceArea
    service_offerings: List[str] = []
    ad_copy: AdCopy = AdCopy()
    keywords: List[str] = []


class ComplianceRuleOut(BaseModel):
    id: str
    title: str
    description: str
    severity: str  # "error" | "warning" | "info"
    category: str


class ComplianceCheck(BaseModel):
    rule: ComplianceRuleOut
    passed: bool
    message: str
    suggestions: List[str] = []


class ComplianceSummary(BaseModel):
    overall: str  # "excellent" | "good" | "needs-attention"
    errors: int
    warnings: int
    info: int
    total: int
    passed: int


class ComplianceReport(BaseModel):
    """Evidence record of a scan, kept for legal audit."""

    timestamp: int
    content_scanned: str
    user_certifications: Dict[str, Any] = PydanticField(default_factory=dict)
    scan_result: ComplianceResult
    compliance_version: str = "1.0"
    scan_engine: str = "TradeBoost AI Safety Filter"
    regulatory_framework: str = "UK Trading Standards & Consumer Protection"
    evidence_generated: bool = True


# ── Evidence tables ──


class CertificationType(str, Enum):
    GAS_SAFE = "gas_safe"
    PART_P = "part_p"
    NICEIC = "niceic"
    INSURANCE = "insurance"
    BUSINESS = "business"


class UserCertification(SQLModel, table=True):
    """A credential the advertiser has submitted as compliance evidence.

    Rows start as ``pending``; verification happens out of band.
    """

    __tablename__ = "user_certifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    certification_type: str = Field(index=True)
    reference_number: Optional[str] = Field(
        default=None, description="Gas Safe / Part P number, policy number or company number"
    )
    provider: Optional[str] = Field(default=None, description="Insurer or registration scheme")
    coverage: Optional[float] = Field(default=None, description="Insured amount, major units")
    expires_at: Optional[int] = Field(default=None, sa_type=BigInteger)
    document_url: Optional[str] = None
    document_type: Optional[str] = None
    verified: bool = False
    verification_status: str = "pending"
    verification_notes: Optional[str] = None
    uploaded_at: int = Field(default_factory=now_ms, sa_type=BigInteger)


class ComplianceViolationRecord(SQLModel, table=True):
    """A detected violation, kept until resolved and afterwards for audit."""

    __tablename__ = "compliance_violations"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    violation_type: str
    description: str
    severity: str
    phrase: Optional[str] = None
    content_flagged: str = ""
    campaign_id: Optional[str] = None
    detection_method: str = "ai_filter"
    resolved: bool = Field(default=False, index=True)
    resolution_action: Optional[str] = None
    resolution_notes: Optional[str] = None
    resolved_by: Optional[str] = None
    reported_to_authorities: bool = False
    authority_reference: Optional[str] = None
    created_at: int = Field(default_factory=now_ms, sa_type=BigInteger)
    resolved_at: Optional[int] = Field(default=None, sa_type=BigInteger)


# ── Evidence payloads ──


class CertificationIn(BaseModel):
    certification_type: CertificationType
    reference_number: Optional[str] = None
    provider: Optional[str] = None
    coverage: Optional[float] = PydanticField(default=None, ge=0)
    expires_at: Optional[int] = PydanticField(default=None, ge=0, le=2**63 - 1)
    document_url: Optional[str] = None
    document_type: Optional[str] = None


class ViolationResolutionIn(BaseModel):
    action: str = PydanticField(min_length=1, description="e.g. content_removed, content_rewritten")
    notes: Optional[str] = None


class ComplianceEvidence(BaseModel):
    """Everything held on file for an advertiser, for a legal audit."""

    user_id: str
    certifications: List[UserCertification] = []
    violations: List[ComplianceViolationRecord] = []
    evidence_generated_at: int
