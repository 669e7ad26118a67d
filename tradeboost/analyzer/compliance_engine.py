"""TradeBoost — Compliance Engine.

Scans ad copy for phrases that breach UK trade advertising rules, proposes
safe rewrites, and checks whole campaign drafts against the UK rule set.
All matching is case-insensitive substring matching.
"""

import re
from typing import Callable, Dict, List

from tradeboost.core.compliance_rules import (
    ALL_REPLACEMENTS,
    COMPLIANCE_FILTERS,
    DEFAULT_CONCERN,
    DEFAULT_RECOMMENDATION,
    ELECTRICAL_KEYWORDS,
    GAS_KEYWORDS,
    WARNING_PHRASES,
    ComplianceRule,
    RuleSeverity,
    ViolationSeverity,
    rules_for_trade,
)
from tradeboost.core.periods import now_ms
from tradeboost.models.compliance_models import (
    CampaignDraft,
    Certifications,
    ComplianceCheck,
    ComplianceReport,
    ComplianceResult,
    ComplianceRuleOut,
    ComplianceSummary,
    ComplianceViolation,
    ComplianceWarning,
)
from tradeboost.core.logging import get_logger

logger = get_logger("analyzer.compliance")

# Longest phrase first so overlapping phrases prefer the most specific match
_REPLACEMENT_PATTERN = re.compile(
    "|".join(re.escape(p) for p in sorted(ALL_REPLACEMENTS, key=len, reverse=True)),
    re.IGNORECASE,
)


# ── Content scanning ──


def scan_content(content: str) -> ComplianceResult:
    """Flag banned phrases (violations) and claims needing evidence (warnings)."""
    violations: List[ComplianceViolation] = []
    warnings: List[ComplianceWarning] = []
    suggestions: List[str] = []

    lower_content = content.lower()

    for category, phrase_filter in COMPLIANCE_FILTERS.items():
        for phrase in phrase_filter.banned_phrases:
            if phrase.lower() not in lower_content:
                continue
            replacement = phrase_filter.replacements.get(phrase)
            violations.append(
                ComplianceViolation(
                    type=category,
                    phrase=phrase,
                    reason=phrase_filter.reason,
                    severity=phrase_filter.severity.value,
                    replacement=replacement,
                )
            )
            if replacement:
                suggestions.append(f'Replace "{phrase}" with "{replacement}"')

    for category, phrases in WARNING_PHRASES.items():
        for phrase, (concern, recommendation) in phrases.items():
            if phrase.lower() in lower_content:
                warnings.append(
                    ComplianceWarning(
                        type=category,
                        phrase=phrase,
                        concern=concern or DEFAULT_CONCERN,
                        recommendation=recommendation or DEFAULT_RECOMMENDATION,
                    )
                )

    if violations:
        logger.info(f"Compliance scan: {len(violations)} violations, {len(warnings)} warnings")
    return ComplianceResult(
        approved=not violations,
        violations=violations,
        warnings=warnings,
        suggestions=suggestions,
    )


def apply_safe_replacements(content: str) -> str:
    """Rewrite every banned phrase that has a safe alternative.

    Single pass: a rewrite is never itself rescanned, so replacement text
    such as "(Gas Safe certified)" is left intact.
    """
    return _REPLACEMENT_PATTERN.sub(
        lambda m: ALL_REPLACEMENTS[m.group(0).lower()], content
    )


def validate_certification_requirements(
    content: str, certifications: Certifications
) -> List[ComplianceViolation]:
    """Violations for advertising trade work without the matching credential."""
    violations: List[ComplianceViolation] = []
    lower_content = content.lower()

    if any(k in lower_content for k in GAS_KEYWORDS) and not certifications.gas_safe:
        violations.append(
            ComplianceViolation(
                type="missing_gas_safe",
                phrase="Gas-related services mentioned",
                reason="Gas Safe registration required for gas work advertising",
                severity=ViolationSeverity.CRITICAL.value,
            )
        )

    if any(k in lower_content for k in ELECTRICAL_KEYWORDS) and not certifications.part_p:
        violations.append(
            ComplianceViolation(
                type="missing_part_p",
                phrase="Electrical services mentioned",
                reason="Part P certification required for electrical work advertising",
                severity=ViolationSeverity.CRITICAL.value,
            )
        )

    if not certifications.insurance:
        violations.append(
            ComplianceViolation(
                type="missing_insurance",
                phrase="Service advertising without insurance verification",
                reason="Public liability insurance required for trade service advertising",
                severity=ViolationSeverity.HIGH.value,
            )
        )

    return violations


def generate_compliance_report(
    content: str, certifications: Certifications, scan_result: ComplianceResult
) -> ComplianceReport:
    """Evidence record of a scan for the legal audit trail."""
    return ComplianceReport(
        timestamp=now_ms(),
        content_scanned=content,
        user_certifications=certifications.model_dump(),
        scan_result=scan_result,
    )


# ── Campaign rule checks ──


def _rule_out(rule: ComplianceRule) -> ComplianceRuleOut:
    return ComplianceRuleOut(
        id=rule.id,
        title=rule.title,
        description=rule.description,
        severity=rule.severity.value,
        category=rule.category.value,
    )


def _check(rule: ComplianceRule, passed: bool, message: str, suggestions=None) -> ComplianceCheck:
    return ComplianceCheck(
        rule=_rule_out(rule),
        passed=passed,
        message=message,
        suggestions=suggestions or [],
    )


def _has_any(text: str, terms) -> bool:
    return any(t in text for t in terms)


def _has_gas_services(text: str) -> bool:
    return _has_any(text, ("gas", "boiler", "heating"))


def _check_gas_safe_registration(rule, campaign: CampaignDraft, text: str) -> ComplianceCheck:
    if not _has_gas_services(text):
        return _check(rule, True, "No gas services advertised - Gas Safe registration not required")
    mentioned = _has_any(text, ("gas safe", "gas-safe"))
    if mentioned:
        return _check(rule, True, "Gas Safe registration mentioned - compliant")
    return _check(
        rule,
        False,
        "Gas services offered but Gas Safe registration not mentioned",
        [
            'Add "Gas Safe Registered" to your ad headlines',
            "Include Gas Safe registration number in ad description",
            'Mention "Fully qualified Gas Safe engineer" in your copy',
        ],
    )


def _check_gas_safe_mentioned(rule, campaign: CampaignDraft, text: str) -> ComplianceCheck:
    if not _has_gas_services(text):
        return _check(rule, True, "No gas services advertised")
    if _has_any(text, ("gas safe", "registered")):
        return _check(rule, True, "Gas Safe credentials properly mentioned")
    return _check(
        rule,
        False,
        "Gas services offered without proper credentials mentioned",
        [
            "Add your Gas Safe registration number",
            'Include "Gas Safe Registered Engineer" in headlines',
        ],
    )


def _check_part_p(rule, campaign: CampaignDraft, text: str) -> ComplianceCheck:
    notifiable = ("rewiring", "consumer unit", "electrical installation", "fuse box")
    if not _has_any(text, notifiable):
        return _check(rule, True, "No notifiable electrical work advertised")
    if _has_any(text, ("part p", "building regulations", "compliant", "certified")):
        return _check(rule, True, "Part P compliance mentioned")
    return _check(
        rule,
        False,
        "Notifiable electrical work offered without Part P compliance mention",
        [
            'Add "Part P Building Regulations compliant" to your ad',
            'Mention "Certified electrical installations"',
            'Include "Building Regulations approved" in your copy',
        ],
    )


def _check_electrical_qualifications(rule, campaign: CampaignDraft, text: str) -> ComplianceCheck:
    terms = ("qualified", "certified", "city & guilds", "nvq", "qualification")
    if _has_any(text, terms):
        return _check(rule, True, "Electrical qualifications mentioned")
    return _check(
        rule,
        False,
        "Consider mentioning electrical qualifications for credibility",
        [
            'Add "Fully qualified electrician" to your headlines',
            'Mention "City & Guilds certified" in descriptions',
            'Include "NVQ Level 3 qualified" in your ad copy',
        ],
    )


def _check_price_transparency(rule, campaign: CampaignDraft, text: str) -> ComplianceCheck:
    terms = ("free quote", "no call out", "transparent", "upfront", "fixed price", "no hidden")
    if _has_any(text, terms):
        return _check(rule, True, "Price transparency information included")
    return _check(
        rule,
        False,
        "Consider adding pricing transparency information",
        [
            'Add "Free, no-obligation quotes" to your ad',
            'Include "No hidden charges" in descriptions',
            'Mention "Transparent, upfront pricing"',
            'Add "No call-out fees" if applicable',
        ],
    )


MISLEADING_TERMS = (
    "cheapest",
    "best in uk",
    "guaranteed lowest",
    "always available",
    "instant",
    "100% guaranteed",
)


def _check_misleading_claims(rule, campaign: CampaignDraft, text: str) -> ComplianceCheck:
    found = [t for t in MISLEADING_TERMS if t in text]
    if not found:
        return _check(rule, True, "No potentially misleading claims detected")
    return _check(
        rule,
        False,
        f"Potentially misleading claims found: {', '.join(found)}",
        [
            "Replace absolute claims with qualified statements",
            'Use "competitive pricing" instead of "cheapest"',
            'Say "reliable service" instead of "always available"',
            'Use "fast response" instead of "instant"',
        ],
    )


def _check_london_lez(rule, campaign: CampaignDraft, text: str) -> ComplianceCheck:
    if "london" not in campaign.service_area.city.lower():
        return _check(rule, True, "Not operating in London - LEZ requirements not applicable")
    return _check(
        rule,
        True,
        "Operating in London - ensure vehicles comply with Low Emission Zone requirements",
        [
            "Ensure all vehicles meet ULEZ standards",
            'Consider mentioning "Eco-friendly service vehicles" in ads',
            "Check daily charge requirements for older vehicles",
        ],
    )


RULE_CHECKS: Dict[str, Callable[[ComplianceRule, CampaignDraft, str], ComplianceCheck]] = {
    "gas-safe-registration": _check_gas_safe_registration,
    "gas-safety-certificate": _check_gas_safe_mentioned,
    "part-p-compliance": _check_part_p,
    "electrical-qualifications": _check_electrical_qualifications,
    "price-transparency": _check_price_transparency,
    "no-misleading-claims": _check_misleading_claims,
    "london-low-emission-zone": _check_london_lez,
}


def _campaign_text(campaign: CampaignDraft) -> str:
    ad_text = " ".join(campaign.ad_copy.headlines + campaign.ad_copy.descriptions)
    services = " ".join(campaign.service_offerings)
    keywords = " ".join(campaign.keywords)
    return f"{ad_text} {services} {keywords}".lower()


def validate_campaign_compliance(campaign: CampaignDraft) -> List[ComplianceCheck]:
    """Run every UK rule that applies to the campaign's trade type."""
    text = _campaign_text(campaign)
    checks: List[ComplianceCheck] = []
    for rule in rules_for_trade(campaign.trade_type.value):
        check_fn = RULE_CHECKS.get(rule.id)
        if check_fn is None:
            checks.append(_check(rule, True, "Compliance check passed"))
        else:
            checks.append(check_fn(rule, campaign, text))
    return checks


def compliance_summary(checks: List[ComplianceCheck]) -> ComplianceSummary:
    """Roll up failed checks by severity."""

    def failed(severity: RuleSeverity) -> int:
        return sum(1 for c in checks if not c.passed and c.rule.severity == severity.value)

    errors = failed(RuleSeverity.ERROR)
    warnings = failed(RuleSeverity.WARNING)
    if errors:
        overall = "needs-attention"
    elif warnings:
        overall = "good"
    else:
        overall = "excellent"

    return ComplianceSummary(
        overall=overall,
        errors=errors,
        warnings=warnings,
        info=failed(RuleSeverity.INFO),
        total=len(checks),
        passed=sum(1 for c in checks if c.passed),
    )
