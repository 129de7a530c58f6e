"""Charitable Contribution Report Generator.

Generates text reports mimicking the structure of:
- Schedule A, Gifts to Charity (lines 11-17)
- Form 8283 Section A / Section B
- Wish verification decisions

All amounts arrive in cents and are converted to dollars here.
"""

from typing import List, Optional

from .models import (
    Form8283SectionA, Form8283SectionB, MissingDocumentation, TaxFormData,
    ValidationReport, VerificationResult,
)


def fmt_cents(cents: int) -> str:
    """Format an amount in cents as currency."""
    if cents < 0:
        return f"-${abs(cents) / 100:,.2f}"
    return f"${cents / 100:,.2f}"


def _sep(char: str = "=", length: int = 72) -> str:
    return char * length


def _line(label: str, amount, width: int = 55) -> str:
    """Format a single line item; ints are cents."""
    value = fmt_cents(amount) if isinstance(amount, int) and not isinstance(amount, bool) else amount
    return f"  {label:<{width}} {value:>15}"


def generate_schedule_a_report(data: TaxFormData) -> str:
    """Generate Schedule A (Gifts to Charity) report."""
    sa = data.schedule_a
    lines = []
    lines.append("")
    lines.append(_sep("-", 72))
    lines.append(f"  SCHEDULE A - Itemized Deductions, Gifts to Charity (Tax Year {sa.tax_year})")
    lines.append(_sep("-", 72))
    lines.append(f"  Name: {sa.name}")
    if sa.city or sa.state:
        lines.append(f"  Address: {sa.address}, {sa.city}, {sa.state} {sa.zip}")
    lines.append("")
    lines.append(_line("Line 11  Gifts by cash or check", sa.cash_contributions))
    lines.append(_line("Line 12  Other than by cash or check", sa.non_cash_contributions))
    lines.append(_line("Line 14  Total gifts to charity", sa.total_charitable_contributions))
    lines.append(_line("Line 16  Other itemized deductions", sa.other_deductions))
    lines.append("  " + "-" * 68)
    lines.append(_line("Line 17  Total itemized deductions", sa.total_itemized_deductions))

    summary = data.summary
    if summary.non_qualified_donations > 0:
        lines.append("")
        lines.append(_line("Excluded (non-qualified organizations)", summary.non_qualified_donations))
    return "\n".join(lines)


def _acquisition_lines(entry) -> List[str]:
    lines = [
        _line("    Fair market value", entry.fair_market_value),
        _line("    How acquired", entry.how_property_was_acquired),
    ]
    if entry.date_of_acquisition:
        lines.append(_line("    Date acquired", entry.date_of_acquisition))
    if entry.cost_or_adjusted_basis:
        lines.append(_line("    Cost or adjusted basis", entry.cost_or_adjusted_basis))
    return lines


def generate_form_8283_report(
    section_a: Optional[List[Form8283SectionA]],
    section_b: Optional[List[Form8283SectionB]],
) -> str:
    """Generate Form 8283 report; empty when neither section applies."""
    if not section_a and not section_b:
        return ""

    lines = []
    lines.append("")
    lines.append(_sep("-", 72))
    lines.append("  FORM 8283 - Noncash Charitable Contributions")
    lines.append(_sep("-", 72))

    if section_a:
        lines.append("\n  Section A - Donated property over $500")
        for i, entry in enumerate(section_a, 1):
            lines.append(f"\n  ({i}) {entry.property_description}")
            lines.append(_line("    Donee", f"{entry.donee_name} {entry.donee_ein}".strip()))
            lines.append(_line("    Date of contribution", entry.date_of_contribution))
            lines.extend(_acquisition_lines(entry))
            if entry.requires_appraisal:
                lines.append("    ** Value over $5,000: qualified appraisal and Section B required")

    if section_b:
        lines.append("\n  Section B - Donated property over $5,000 (appraisal required)")
        for i, entry in enumerate(section_b, 1):
            lines.append(f"\n  ({i}) {entry.property_description}")
            lines.append(_line("    Donee", f"{entry.donee_name} {entry.donee_ein}".strip()))
            lines.append(_line("    Date of contribution", entry.date_of_contribution))
            lines.extend(_acquisition_lines(entry))
            lines.append(_line("    Appraised value", entry.appraised_value))
            lines.append(_line("    Appraisal date", entry.appraisal_date or "(to be completed)"))
            lines.append("    Appraiser and donee signatures: (to be completed)")

    return "\n".join(lines)


def _missing_lines(title: str, items: List[MissingDocumentation]) -> List[str]:
    if not items:
        return []
    lines = [f"\n  {title}:"]
    for item in items:
        lines.append(f"    - [{item.donation_id}] {item.charity_name}: {item.issue}")
        action = item.required_action
        if item.deadline:
            action += f" ({item.deadline})"
        lines.append(f"      -> {action}")
    return lines


def generate_full_report(
    data: TaxFormData,
    recommendations: Optional[List[str]] = None,
    validation: Optional[ValidationReport] = None,
) -> str:
    """Generate the complete charitable contribution report."""
    summary = data.summary
    lines = []
    lines.append(_sep("=", 72))
    lines.append(f"  CHARITABLE CONTRIBUTIONS SUMMARY - Tax Year {summary.tax_year}")
    lines.append("  DRAFT - review all information before filing")
    lines.append(_sep("=", 72))

    lines.append(_line("Total donations", summary.total_donations))
    lines.append(_line("  Cash", summary.total_cash_donations))
    lines.append(_line("  Non-cash", summary.total_non_cash_donations))
    lines.append(_line("Qualified donations", summary.qualified_donations))
    lines.append(_line("Non-qualified donations", summary.non_qualified_donations))
    lines.append(_line("Form 8283 required", "Yes" if summary.requires_form_8283 else "No"))

    lines.append(generate_schedule_a_report(data))

    form_8283 = generate_form_8283_report(data.form_8283_section_a, data.form_8283_section_b)
    if form_8283:
        lines.append(form_8283)

    missing = (
        _missing_lines("Missing acknowledgments", summary.missing_acknowledgment)
        + _missing_lines("Missing appraisals", summary.missing_appraisal)
        + _missing_lines("Form 8283 filings", summary.missing_form_8283)
    )
    if missing:
        lines.append("")
        lines.append(_sep("-", 72))
        lines.append("  DOCUMENTATION REQUIRED")
        lines.append(_sep("-", 72))
        lines.extend(missing)

    if validation and validation.errors:
        lines.append("")
        lines.append(_sep("-", 72))
        lines.append("  VALIDATION ERRORS")
        lines.append(_sep("-", 72))
        lines.extend(f"    - {e}" for e in validation.errors)

    if recommendations:
        lines.append("")
        lines.append(_sep("-", 72))
        lines.append("  RECOMMENDATIONS")
        lines.append(_sep("-", 72))
        lines.extend(f"    * {r}" for r in recommendations)

    lines.append("")
    lines.append(_sep("=", 72))
    return "\n".join(lines)


def generate_verification_report(wish_id: str, result: VerificationResult) -> str:
    """Generate a report for a wish verification decision."""
    lines = []
    lines.append(_sep("=", 72))
    lines.append(f"  WISH VERIFICATION - {wish_id}")
    lines.append(_sep("=", 72))
    lines.append(_line("Decision", result.result.value.upper()))
    lines.append(_line("Confidence", f"{result.confidence:.2f}"))
    lines.append("\n  Reasons:")
    lines.extend(f"    - {r}" for r in result.reasons)
    if result.policy_refs:
        lines.append("\n  Policy references:")
        lines.extend(f"    - {p}" for p in result.policy_refs)
    lines.append(_sep("=", 72))
    return "\n".join(lines)
