"""Data models for wish verification and charitable donation tax forms.

All monetary fields are integer cents. Conversion to dollars happens only
when a value is rendered for display.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union
from enum import Enum


# ---------------------------------------------------------------------------
# Wish verification
# ---------------------------------------------------------------------------

class DocumentType(Enum):
    """Classification of a supporting document attached to a wish."""
    MEDICAL = "medical"
    ENROLLMENT = "enrollment"
    INVOICE = "invoice"
    ESTIMATE = "estimate"
    OTHER = "other"
    UNKNOWN = "unknown"  # Not yet classified


class VerificationOutcome(Enum):
    """Terminal tax-deductibility decision for a wish."""
    ELIGIBLE = "eligible"
    REJECT = "reject"
    REVIEW = "review"


@dataclass
class VendorInfo:
    """Provider or organization that receives the wish funds."""
    name: str = ""
    type: str = ""
    npi: Optional[str] = None  # National Provider Identifier (medical)
    ein: Optional[str] = None  # Employer Identification Number
    is_501c3: Optional[bool] = None


@dataclass
class WishDocument:
    """A supporting document with its already-extracted text."""
    type: DocumentType = DocumentType.UNKNOWN
    content: str = ""


@dataclass
class VerificationContext:
    """Everything the verifier looks at for one wish."""
    category: str
    description: str
    vendor_info: Optional[VendorInfo] = None
    amount: Optional[int] = None  # Requested amount in cents (informational)
    documents: List[WishDocument] = field(default_factory=list)


@dataclass
class VerificationResult:
    """Decision, justification and score for a wish."""
    result: VerificationOutcome
    reasons: List[str]
    policy_refs: List[str]
    confidence: float  # 0-1 additive score, not a probability


@dataclass
class DocumentAnalysis:
    """Hints gathered from a wish's documents before verification."""
    category: Optional[str] = None  # None when no document hinted a category
    vendor_info: Optional[VendorInfo] = None
    confidence: float = 0.0
    conflicting_categories: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Donations
# ---------------------------------------------------------------------------

class AcquisitionMethod(Enum):
    """How the donor acquired donated property (Form 8283 column)."""
    PURCHASE = "purchase"
    GIFT = "gift"
    INHERITANCE = "inheritance"
    OTHER = "other"


@dataclass
class CashDonation:
    """Cash or check gift (Schedule A line 11)."""
    id: str
    date: str  # YYYY-MM-DD
    charity_name: str
    charity_ein: str
    amount: int  # cents
    is_irs_qualified: bool = False  # Pub 78 eligible
    has_acknowledgment: bool = False  # Required for gifts >= $250
    acknowledgment_date: Optional[str] = None
    description: Optional[str] = None


@dataclass
class NonCashDonation:
    """Gift of property (Schedule A line 12, Form 8283)."""
    id: str
    date: str  # YYYY-MM-DD
    charity_name: str
    charity_ein: str
    description: str  # Description of donated property
    fair_market_value: int  # cents
    is_irs_qualified: bool = False
    has_appraisal: bool = False  # Required for gifts > $5,000
    appraisal_date: Optional[str] = None
    appraisal_value: Optional[int] = None  # cents
    acquisition_date: Optional[str] = None
    acquisition_cost: Optional[int] = None  # cents, cost basis
    method_of_acquisition: Optional[AcquisitionMethod] = None


Donation = Union[CashDonation, NonCashDonation]


def donation_value(donation: Donation) -> int:
    """Amount for a cash gift, fair market value for property."""
    if isinstance(donation, CashDonation):
        return donation.amount
    return donation.fair_market_value


@dataclass
class MissingDocumentation:
    """A documentation gap the donor has to close before filing."""
    donation_id: str
    charity_name: str
    amount: int  # cents
    issue: str
    required_action: str
    deadline: Optional[str] = None


@dataclass
class TaxFormSummary:
    """Charitable contribution totals and documentation requirements."""
    tax_year: int

    # Schedule A totals (qualified donations only)
    cash_contributions: int = 0  # Line 11
    non_cash_contributions: int = 0  # Line 12
    total_charitable_contributions: int = 0  # Line 14

    # Form 8283 requirements
    requires_form_8283: bool = False
    requires_form_8283_section_a: bool = False  # Non-cash gifts > $500
    requires_form_8283_section_b: bool = False  # Non-cash gifts > $5,000

    missing_acknowledgment: List[MissingDocumentation] = field(default_factory=list)
    missing_appraisal: List[MissingDocumentation] = field(default_factory=list)
    missing_form_8283: List[MissingDocumentation] = field(default_factory=list)

    # All donations, qualified or not
    total_donations: int = 0
    total_cash_donations: int = 0
    total_non_cash_donations: int = 0
    qualified_donations: int = 0
    non_qualified_donations: int = 0


@dataclass
class PersonalInfo:
    """Taxpayer identification printed on the forms."""
    name: str
    ssn: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


@dataclass
class ScheduleA:
    """Schedule A (Form 1040) charitable contribution lines."""
    name: str
    ssn: str
    address: str
    city: str
    state: str
    zip: str
    cash_contributions: int  # Line 11
    non_cash_contributions: int  # Line 12
    total_charitable_contributions: int  # Line 14
    other_deductions: int  # Line 16, reserved
    total_itemized_deductions: int  # Line 17
    tax_year: int


@dataclass
class Form8283SectionA:
    """Form 8283 Section A entry (non-cash gifts over $500)."""
    # Part I - Information on donated property
    property_description: str
    date_of_contribution: str
    fair_market_value: int
    how_property_was_acquired: str
    date_of_acquisition: str
    cost_or_adjusted_basis: int

    # Part II - Donee
    donee_name: str
    donee_ein: str
    donee_address: str = ""
    donee_city: str = ""
    donee_state: str = ""
    donee_zip: str = ""

    # Part III - Appraisal (when value also exceeds $5,000)
    requires_appraisal: bool = False
    appraised_value: Optional[int] = None
    appraisal_date: Optional[str] = None
    appraiser_name: str = ""
    appraiser_address: str = ""
    appraiser_city: str = ""
    appraiser_state: str = ""
    appraiser_zip: str = ""
    appraiser_ein: str = ""

    # Part IV - Donee acknowledgment, completed manually
    donee_acknowledgment: bool = False
    donee_signature: str = ""
    donee_title: str = ""
    donee_date: str = ""


@dataclass
class Form8283SectionB:
    """Form 8283 Section B entry (non-cash gifts over $5,000)."""
    property_description: str
    date_of_contribution: str
    fair_market_value: int
    how_property_was_acquired: str
    date_of_acquisition: str
    cost_or_adjusted_basis: int

    donee_name: str
    donee_ein: str
    appraised_value: int  # Required for Section B
    appraisal_date: str = ""
    donee_address: str = ""
    donee_city: str = ""
    donee_state: str = ""
    donee_zip: str = ""
    appraiser_name: str = ""
    appraiser_address: str = ""
    appraiser_city: str = ""
    appraiser_state: str = ""
    appraiser_zip: str = ""
    appraiser_ein: str = ""
    donee_signature: str = ""
    donee_title: str = ""
    donee_date: str = ""


@dataclass
class TaxFormData:
    """Complete form bundle for one donor and tax year."""
    summary: TaxFormSummary
    schedule_a: ScheduleA
    personal_info: PersonalInfo
    form_8283_section_a: Optional[List[Form8283SectionA]] = None
    form_8283_section_b: Optional[List[Form8283SectionB]] = None

    @property
    def tax_year(self) -> int:
        return self.summary.tax_year


@dataclass
class ValidationReport:
    """Outcome of checking donation data against IRS formatting rules."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
