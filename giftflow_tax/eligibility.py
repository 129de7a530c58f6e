"""Wish eligibility rules.

Decides whether a wish is tax-deductible from its category, description and
vendor. The score is a simple additive heuristic:

- A pre-verified category starts at 0.7
- A vendor that passes its identifier check adds 0.2, a failing one subtracts 0.3
- 0.8 or more is eligible

Denylisted categories and suspicious descriptions are rejected outright.
"""

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Pattern, Sequence, Tuple

from .irs_rules import EIN_PATTERN, is_valid_npi
from .models import (
    DocumentAnalysis, DocumentType, VendorInfo, VerificationContext,
    VerificationOutcome, VerificationResult, WishDocument,
)

logger = logging.getLogger(__name__)

EXCLUSIONS_POLICY_REF = "IRC Section 162 - Trade or Business Expenses (exclusions)"
GENERAL_POLICY_REF = "General tax deductibility guidelines"


@dataclass(frozen=True)
class PreverifiedCategory:
    """A category that is deductible as long as its vendor checks out."""
    requirements: Tuple[str, ...]
    policy_ref: str


PREVERIFIED_CATEGORIES: Mapping[str, PreverifiedCategory] = MappingProxyType({
    "medical-expenses": PreverifiedCategory(
        requirements=("Valid medical provider", "Qualifying medical expense"),
        policy_ref="IRC Section 213 - Medical and Dental Expenses",
    ),
    "educational-materials": PreverifiedCategory(
        requirements=("Accredited educational institution", "Qualifying educational expense"),
        policy_ref="IRC Section 117 - Qualified Scholarships",
    ),
    "housing-assistance": PreverifiedCategory(
        requirements=("501(c)(3) housing partner", "Qualifying housing assistance"),
        policy_ref="IRC Section 170 - Charitable Contributions",
    ),
    "food-assistance": PreverifiedCategory(
        requirements=("Qualified food assistance program", "501(c)(3) organization"),
        policy_ref="IRC Section 170 - Charitable Contributions",
    ),
})

DENIED_CATEGORIES: Tuple[str, ...] = (
    "entertainment",
    "alcohol",
    "tobacco",
    "adult-goods",
    "luxury-items",
    "personal-expenses",
    "political-contributions",
)

SUSPICIOUS_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"beer|alcohol|wine|spirits", re.IGNORECASE),
    re.compile(r"xbox|playstation|gaming|entertainment", re.IGNORECASE),
    re.compile(r"luxury|designer|expensive", re.IGNORECASE),
    re.compile(r"personal|private|individual", re.IGNORECASE),
)


# Vendor checks return a failure reason, or None when the vendor passes.
VendorRule = Callable[[VendorInfo], Optional[str]]


def _validate_medical(vendor: VendorInfo) -> Optional[str]:
    if not is_valid_npi(vendor.npi):
        return "Invalid or missing NPI for medical provider"
    return None


def _validate_educational(vendor: VendorInfo) -> Optional[str]:
    if not vendor.ein or not EIN_PATTERN.fullmatch(vendor.ein):
        return "Invalid or missing EIN for educational institution"
    return None


def _validate_501c3(vendor: VendorInfo) -> Optional[str]:
    if not vendor.is_501c3:
        return "Organization must be 501(c)(3) tax-exempt"
    if not vendor.ein or not EIN_PATTERN.fullmatch(vendor.ein):
        return "Invalid or missing EIN for 501(c)(3) organization"
    return None


# 'general' vendors have no rule and leave the score unchanged
VENDOR_VALIDATION_RULES: Mapping[str, VendorRule] = MappingProxyType({
    "medical": _validate_medical,
    "educational": _validate_educational,
    "501c3": _validate_501c3,
})


@dataclass(frozen=True)
class EligibilityPolicy:
    """Lookup tables and score constants for the verifier."""
    denied_categories: Tuple[str, ...] = DENIED_CATEGORIES
    preverified_categories: Mapping[str, PreverifiedCategory] = field(
        default_factory=lambda: PREVERIFIED_CATEGORIES
    )
    vendor_rules: Mapping[str, VendorRule] = field(
        default_factory=lambda: VENDOR_VALIDATION_RULES
    )
    suspicious_patterns: Tuple[Pattern, ...] = SUSPICIOUS_PATTERNS

    category_match_score: float = 0.7
    vendor_pass_bonus: float = 0.2
    vendor_fail_penalty: float = 0.3
    eligible_threshold: float = 0.8
    denied_confidence: float = 1.0
    suspicious_confidence: float = 0.9
    review_confidence: float = 0.5


DEFAULT_POLICY = EligibilityPolicy()


def get_vendor_type(vendor: VendorInfo) -> str:
    """Classify a vendor so the matching identifier rule can be applied."""
    if vendor.npi:
        return "medical"
    if vendor.is_501c3:
        return "501c3"
    vendor_type = vendor.type or ""
    if "education" in vendor_type or "school" in vendor_type:
        return "educational"
    return "general"


def _score(value: float) -> float:
    # 0.7 + 0.2 should read as 0.9, not 0.8999999999999999
    return round(value, 2)


def verify_wish_eligibility(
    context: VerificationContext,
    policy: EligibilityPolicy = DEFAULT_POLICY,
) -> VerificationResult:
    """
    Decide whether a wish is tax-deductible.

    Args:
        context: Category, description, optional vendor and documents.
        policy: Lookup tables and score constants.

    Returns:
        VerificationResult with outcome, reasons, policy references
        and confidence.
    """
    description = context.description.lower()
    category = context.category.lower()

    # --- Denylisted categories: reject regardless of anything else ---
    denied = next(
        (cat for cat in policy.denied_categories
         if cat in description or cat in category),
        None,
    )
    if denied:
        return VerificationResult(
            result=VerificationOutcome.REJECT,
            reasons=[f'Category "{denied}" is not tax-deductible'],
            policy_refs=[EXCLUSIONS_POLICY_REF],
            confidence=policy.denied_confidence,
        )

    reasons: List[str] = []
    policy_refs: List[str] = []
    confidence = 0.0

    # --- Pre-verified categories ---
    matched = next(
        (key for key in policy.preverified_categories if key in category),
        None,
    )
    if matched:
        confidence += policy.category_match_score
        policy_refs.append(policy.preverified_categories[matched].policy_ref)

        if context.vendor_info is not None:
            rule = policy.vendor_rules.get(get_vendor_type(context.vendor_info))
            if rule is not None:
                failure = rule(context.vendor_info)
                if failure:
                    reasons.append(failure)
                    confidence -= policy.vendor_fail_penalty
                else:
                    confidence += policy.vendor_pass_bonus

        if _score(confidence) >= policy.eligible_threshold:
            return VerificationResult(
                result=VerificationOutcome.ELIGIBLE,
                reasons=[f"Pre-verified category: {matched}"],
                policy_refs=policy_refs,
                confidence=_score(confidence),
            )

    # --- Suspicious descriptions ---
    if any(p.search(context.description) for p in policy.suspicious_patterns):
        return VerificationResult(
            result=VerificationOutcome.REJECT,
            reasons=["Contains non-deductible items or personal expenses"],
            policy_refs=[EXCLUSIONS_POLICY_REF],
            confidence=policy.suspicious_confidence,
        )

    # --- Manual review ---
    # A matched category keeps its score and any vendor failure reason.
    reasons.append("Requires manual review for tax deductibility")
    policy_refs.append(GENERAL_POLICY_REF)
    return VerificationResult(
        result=VerificationOutcome.REVIEW,
        reasons=reasons,
        policy_refs=policy_refs,
        confidence=_score(confidence) if matched else policy.review_confidence,
    )


class WishVerifier:
    """Verifier bound to one policy."""

    def __init__(self, policy: EligibilityPolicy = DEFAULT_POLICY):
        self.policy = policy

    def verify(self, context: VerificationContext) -> VerificationResult:
        return verify_wish_eligibility(context, self.policy)


# ---------------------------------------------------------------------------
# Document analysis
# ---------------------------------------------------------------------------

NPI_IN_TEXT = re.compile(r"\b\d{10}\b")
EIN_IN_TEXT = re.compile(r"\b\d{2}-?\d{7}\b")
VENDOR_LINE = re.compile(r"(?:vendor|provider|company):\s*([^\n]+)", re.IGNORECASE)


def analyze_documents(documents: Sequence[WishDocument]) -> DocumentAnalysis:
    """
    Gather category and vendor hints from a wish's documents.

    Documents are read in order and a later hint overwrites an earlier one,
    so when documents disagree the last one decides the category. The
    disagreement is recorded in ``conflicting_categories`` and logged.
    """
    analysis = DocumentAnalysis()
    vendor = VendorInfo()
    found_vendor = False
    seen_categories: List[str] = []

    for doc in documents:
        content = doc.content.lower()

        if doc.type == DocumentType.MEDICAL or "medical" in content or "hospital" in content:
            analysis.category = "medical-expenses"
            seen_categories.append(analysis.category)
            analysis.confidence += 0.3
            npi = NPI_IN_TEXT.search(content)
            if npi:
                vendor.npi = npi.group(0)
                found_vendor = True
                analysis.confidence += 0.2

        if doc.type == DocumentType.ENROLLMENT or "education" in content or "school" in content:
            analysis.category = "educational-materials"
            seen_categories.append(analysis.category)
            analysis.confidence += 0.3
            ein = EIN_IN_TEXT.search(content)
            if ein:
                vendor.ein = ein.group(0)
                found_vendor = True
                analysis.confidence += 0.2

        if doc.type in (DocumentType.INVOICE, DocumentType.ESTIMATE):
            analysis.confidence += 0.1
            # Match against the original text so the vendor name keeps its case
            name = VENDOR_LINE.search(doc.content)
            if name:
                vendor.name = name.group(1).strip()
                found_vendor = True
                analysis.confidence += 0.1

    distinct = list(dict.fromkeys(seen_categories))
    if len(distinct) > 1:
        analysis.conflicting_categories = distinct
        logger.warning(
            "Documents hint at conflicting categories %s; using last match %r",
            distinct, analysis.category,
        )

    analysis.confidence = _score(analysis.confidence)
    if found_vendor:
        analysis.vendor_info = vendor
    return analysis
