"""TradeBoost — UK Advertising Compliance Registry.

Defines the banned-phrase filters, the verify-before-you-claim warning
phrases, and the UK trade campaign rules. The compliance engine treats
everything registered here uniformly; adding a phrase or rule needs no
engine change.
"""

from enum import Enum
from typing import Dict, List, Tuple


class ViolationSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RuleSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RuleCategory(str, Enum):
    LEGAL = "legal"
    SAFETY = "safety"
    ADVERTISING = "advertising"
    LOCATION = "location"


class PhraseFilter:
    """A group of banned phrases sharing a severity and reason."""

    def __init__(
        self,
        name: str,
        banned_phrases: List[str],
        severity: ViolationSeverity,
        reason: str,
        replacements: Dict[str, str] | None = None,
    ):
        self.name = name
        self.banned_phrases = banned_phrases
        self.severity = severity
        self.reason = reason
        self.replacements = replacements or {}

    def __repr__(self) -> str:
        return f"<PhraseFilter {self.name} ({self.severity.value})>"


class ComplianceRule:
    """A campaign-level UK trades rule."""

    def __init__(
        self,
        rule_id: str,
        title: str,
        description: str,
        severity: RuleSeverity,
        trade_types: Tuple[str, ...],
        category: RuleCategory,
    ):
        self.id = rule_id
        self.title = title
        self.description = description
        self.severity = severity
        self.trade_types = trade_types
        self.category = category

    def applies_to(self, trade_type: str) -> bool:
        return trade_type in self.trade_types

    def __repr__(self) -> str:
        return f"<ComplianceRule {self.id} ({self.severity.value})>"


# ─────────────────────────────────────────────
# BANNED PHRASES: scanned in generated ad copy
# ─────────────────────────────────────────────

COMPLIANCE_FILTERS: Dict[str, PhraseFilter] = {
    "gasWork": PhraseFilter(
        "gasWork",
        [
            "gas repairs",
            "gas installations",
            "gas safety checks",
            "carbon monoxide testing",
            "gas leak repairs",
            "boiler installations",
            "gas appliance servicing",
            "gas pipe work",
            "gas fitting",
        ],
        ViolationSeverity.CRITICAL,
        "Gas work requires valid Gas Safe registration",
        {
            "gas repairs": "heating system maintenance (Gas Safe certified)",
            "gas installations": "heating installations (Gas Safe certified)",
            "gas safety checks": "heating safety inspections (Gas Safe certified)",
            "carbon monoxide testing": "safety testing (Gas Safe certified)",
            "gas leak repairs": "heating system repairs (Gas Safe certified)",
            "boiler installations": "boiler services (Gas Safe certified)",
        },
    ),
    "electricalWork": PhraseFilter(
        "electricalWork",
        [
            "all electrical work",
            "electrical installations",
            "rewiring",
            "electrical safety certificates",
            "consumer unit replacement",
            "electrical inspection",
            "part p work",
        ],
        ViolationSeverity.CRITICAL,
        "Electrical work requires Part P certification",
        {
            "all electrical work": "qualified electrical services",
            "electrical installations": "electrical services (Part P certified)",
            "rewiring": "electrical upgrades (Part P certified)",
            "electrical safety certificates": "electrical inspections (Part P certified)",
        },
    ),
    "availability": PhraseFilter(
        "availability",
        [
            "24/7 service",
            "24 hour service",
            "always available",
            "emergency service guaranteed",
            "instant response",
            "immediate attendance",
            "24/7 emergency",
            "round the clock",
        ],
        ViolationSeverity.HIGH,
        "Availability claims must be accurate and deliverable",
        {
            "24/7 service": "emergency callouts available",
            "24 hour service": "same-day service available",
            "always available": "rapid response available",
            "emergency service guaranteed": "emergency services offered",
            "instant response": "quick response times",
            "immediate attendance": "prompt service available",
        },
    ),
    "pricing": PhraseFilter(
        "pricing",
        [
            "cheapest guaranteed",
            "lowest prices",
            "best value guaranteed",
            "free estimates*",
            "no hidden costs*",
            "unbeatable prices",
            "price match guarantee",
        ],
        ViolationSeverity.HIGH,
        "Price guarantees must be substantiated and truthful",
        {
            "cheapest guaranteed": "competitive pricing",
            "lowest prices": "fair pricing",
            "best value guaranteed": "excellent value",
            "free estimates*": "upfront quotes available",
            "no hidden costs*": "transparent pricing",
        },
    ),
    "certificationClaims": PhraseFilter(
        "certificationClaims",
        [
            "gas safe certified",
            "part p qualified",
            "fully licensed",
            "certified engineer",
            "qualified professional",
        ],
        ViolationSeverity.CRITICAL,
        "Certification claims must be verified before advertising",
        {
            "gas safe certified": "[REQUIRES VERIFICATION] Gas Safe registered",
            "part p qualified": "[REQUIRES VERIFICATION] Part P certified",
            "fully licensed": "[REQUIRES VERIFICATION] Licensed professional",
        },
    ),
    "safetyClaims": PhraseFilter(
        "safetyClaims",
        [
            "100% safe",
            "guaranteed safe",
            "risk-free",
            "completely safe",
            "no risk",
            "absolutely safe",
        ],
        ViolationSeverity.HIGH,
        "Absolute safety claims cannot be guaranteed",
        {
            "100% safe": "safe working practices",
            "guaranteed safe": "safety-focused approach",
            "risk-free": "careful risk management",
        },
    ),
}


# ─────────────────────────────────────────────
# WARNING PHRASES: allowed, but the advertiser must be able to back them up
# phrase → (concern, recommendation)
# ─────────────────────────────────────────────

WARNING_PHRASES: Dict[str, Dict[str, Tuple[str, str]]] = {
    "timeCommitments": {
        "same day": (
            "Ensure you can actually deliver same-day service",
            "Consider 'same-day service available' if not guaranteed",
        ),
        "within hours": (
            "Verify you can respond within stated timeframe",
            "Specify actual response timeframe",
        ),
        "immediate": (
            "Confirm you can provide immediate response",
            "Use 'rapid response' or 'quick service'",
        ),
        "urgent": (
            "Ensure urgent response capability is available",
            "Consider 'priority service available'",
        ),
        "emergency": (
            "Verify you offer genuine emergency services",
            "Ensure 24/7 availability or clarify hours",
        ),
    },
    "locationClaims": {
        "throughout UK": (
            "Confirm you actually service entire UK",
            "List specific regions you cover",
        ),
        "nationwide": (
            "Verify nationwide coverage is accurate",
            "Specify actual coverage areas",
        ),
        "all areas": (
            "Ensure all areas claim is truthful",
            "List covered postcodes or regions",
        ),
        "everywhere": (
            "Confirm universal coverage capability",
            "Be specific about service boundaries",
        ),
    },
    "qualificationHints": {
        "professional": (
            "Ensure professional credentials are valid",
            "Include specific professional credentials",
        ),
        "qualified": (
            "Verify all qualifications are current",
            "List relevant qualifications",
        ),
        "certified": (
            "Confirm certifications are up to date",
            "Specify certifications held",
        ),
        "licensed": (
            "Verify all licenses are valid",
            "Include license numbers where applicable",
        ),
        "registered": (
            "Confirm registration status is current",
            "Include registration numbers (Gas Safe, etc.)",
        ),
    },
}

DEFAULT_CONCERN = "Verify this claim is accurate"
DEFAULT_RECOMMENDATION = "Provide evidence or specifics"


# ─────────────────────────────────────────────
# CONTENT KEYWORDS: trigger certification requirements
# ─────────────────────────────────────────────

GAS_KEYWORDS = ("gas", "boiler", "heating", "carbon monoxide")
ELECTRICAL_KEYWORDS = ("electrical", "wiring", "socket", "switch", "fuse")


# ─────────────────────────────────────────────
# UK CAMPAIGN RULES
# ─────────────────────────────────────────────

_PLUMBING = ("plumbing", "both")
_ELECTRICAL = ("electrical", "both")
_ALL_TRADES = ("plumbing", "electrical", "both")

UK_COMPLIANCE_RULES: List[ComplianceRule] = [
    # Gas Safety Regulations
    ComplianceRule(
        "gas-safe-registration",
        "Gas Safe Registration Required",
        "All gas work must be carried out by Gas Safe registered engineers",
        RuleSeverity.ERROR,
        _PLUMBING,
        RuleCategory.LEGAL,
    ),
    ComplianceRule(
        "gas-safety-certificate",
        "Gas Safety Certificate Advertising",
        "Must mention Gas Safe registration when advertising gas services",
        RuleSeverity.ERROR,
        _PLUMBING,
        RuleCategory.ADVERTISING,
    ),
    # Electrical Regulations
    ComplianceRule(
        "part-p-compliance",
        "Part P Building Regulations",
        "Electrical work in homes must comply with Part P of Building Regulations",
        RuleSeverity.ERROR,
        _ELECTRICAL,
        RuleCategory.LEGAL,
    ),
    ComplianceRule(
        "electrical-qualifications",
        "Electrical Qualifications Display",
        "Must display relevant electrical qualifications (City & Guilds, NVQ, etc.)",
        RuleSeverity.WARNING,
        _ELECTRICAL,
        RuleCategory.ADVERTISING,
    ),
    ComplianceRule(
        "electrical-testing-certificates",
        "Electrical Testing & Certificates",
        "Must offer electrical testing and provide certificates for notifiable work",
        RuleSeverity.WARNING,
        _ELECTRICAL,
        RuleCategory.SAFETY,
    ),
    # General Trading Standards
    ComplianceRule(
        "trading-standards-compliance",
        "Trading Standards Compliance",
        "All advertising must comply with UK Trading Standards regulations",
        RuleSeverity.ERROR,
        _ALL_TRADES,
        RuleCategory.LEGAL,
    ),
    ComplianceRule(
        "price-transparency",
        "Price Transparency",
        "Must be transparent about pricing, call-out charges, and additional costs",
        RuleSeverity.WARNING,
        _ALL_TRADES,
        RuleCategory.ADVERTISING,
    ),
    ComplianceRule(
        "no-misleading-claims",
        "No Misleading Claims",
        "Cannot make false or misleading claims about services or qualifications",
        RuleSeverity.ERROR,
        _ALL_TRADES,
        RuleCategory.ADVERTISING,
    ),
    # Insurance & Liability
    ComplianceRule(
        "public-liability-insurance",
        "Public Liability Insurance",
        "Must have valid public liability insurance and mention it in advertising",
        RuleSeverity.WARNING,
        _ALL_TRADES,
        RuleCategory.LEGAL,
    ),
    # Location-Specific
    ComplianceRule(
        "london-low-emission-zone",
        "London Low Emission Zone",
        "Vehicles operating in London must comply with Low Emission Zone requirements",
        RuleSeverity.INFO,
        _ALL_TRADES,
        RuleCategory.LOCATION,
    ),
]


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

ALL_REPLACEMENTS: Dict[str, str] = {
    phrase.lower(): replacement
    for f in COMPLIANCE_FILTERS.values()
    for phrase, replacement in f.replacements.items()
}


def get_rule(rule_id: str) -> ComplianceRule | None:
    """Look up a campaign rule by id."""
    return next((r for r in UK_COMPLIANCE_RULES if r.id == rule_id), None)


def rules_for_trade(trade_type: str) -> list[ComplianceRule]:
    """Rules that apply to a given trade type."""
    return [r for r in UK_COMPLIANCE_RULES if r.applies_to(trade_type)]
