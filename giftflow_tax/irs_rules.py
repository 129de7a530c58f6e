"""IRS thresholds and identifier formats for charitable contributions.

Amounts are in cents.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

# Written acknowledgment required for a single cash gift of $250 or more
CASH_ACKNOWLEDGMENT_THRESHOLD = 25_000

# Form 8283 Section A for non-cash gifts over $500
NON_CASH_FORM_8283_THRESHOLD = 50_000

# Section B and a qualified appraisal for non-cash gifts over $5,000
NON_CASH_APPRAISAL_THRESHOLD = 500_000

# Standard deduction compared against charitable totals, by tax year.
# Unknown years fall back to 2024.
STANDARD_DEDUCTION = MappingProxyType({
    2023: 1_385_000,
    2024: 1_460_000,
})
STANDARD_DEDUCTION_FALLBACK_YEAR = 2024

# Records older than this are outside the retention window
DONATION_LOOKBACK_YEARS = 7

EIN_PATTERN = re.compile(r"^\d{2}-?\d{7}$")
NPI_PATTERN = re.compile(r"^\d{10}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class IRSRules:
    """Thresholds used by the tax form calculator."""
    cash_acknowledgment_threshold: int = CASH_ACKNOWLEDGMENT_THRESHOLD
    form_8283_threshold: int = NON_CASH_FORM_8283_THRESHOLD
    appraisal_threshold: int = NON_CASH_APPRAISAL_THRESHOLD
    standard_deduction: Mapping[int, int] = field(default_factory=lambda: STANDARD_DEDUCTION)
    standard_deduction_fallback_year: int = STANDARD_DEDUCTION_FALLBACK_YEAR
    lookback_years: int = DONATION_LOOKBACK_YEARS

    def standard_deduction_for(self, tax_year: int) -> int:
        return self.standard_deduction.get(
            tax_year, self.standard_deduction[self.standard_deduction_fallback_year]
        )


DEFAULT_IRS_RULES = IRSRules()


def is_valid_ein(ein: Optional[str]) -> bool:
    """True for 'XX-XXXXXXX' or 'XXXXXXXXX'; whitespace is ignored."""
    if not ein:
        return False
    return bool(EIN_PATTERN.fullmatch(re.sub(r"\s", "", ein)))


def normalize_ein(ein: Optional[str]) -> str:
    """
    Format an EIN as XX-XXXXXXX.

    Values that do not contain exactly nine digits are returned unchanged,
    and blank values become an empty string.
    """
    if not ein or not ein.strip():
        return ""
    digits = re.sub(r"\D", "", ein)
    if len(digits) != 9:
        return ein
    return f"{digits[:2]}-{digits[2:]}"


def is_valid_npi(npi: Optional[str]) -> bool:
    return bool(npi) and bool(NPI_PATTERN.fullmatch(npi))


def is_valid_date_format(value: Optional[str]) -> bool:
    return bool(value) and bool(DATE_PATTERN.fullmatch(value))
