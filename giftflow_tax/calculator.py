"""Charitable contribution tax form calculator.

Handles the computation of:
- Schedule A gifts to charity (lines 11, 12, 14), qualified donations only
- Form 8283 Section A (non-cash > $500) and Section B (non-cash > $5,000)
- Missing acknowledgments, appraisals and Form 8283 filings
- Validation of donation records against IRS formatting rules
- Standard vs. itemized recommendations

Every query recomputes from the donation list; nothing is cached and the
donations are never modified.
"""

from datetime import date, datetime
from typing import List, Optional, Sequence

from .irs_rules import (
    DEFAULT_IRS_RULES, IRSRules, is_valid_date_format, is_valid_ein, normalize_ein,
)
from .models import (
    AcquisitionMethod, CashDonation, Donation, Form8283SectionA, Form8283SectionB,
    MissingDocumentation, NonCashDonation, PersonalInfo, ScheduleA, TaxFormData,
    TaxFormSummary, ValidationReport, donation_value,
)


def _dollars(cents: int) -> str:
    """Render cents as a dollar string for messages."""
    return f"${cents / 100:.2f}"


def _acquisition(method: Optional[AcquisitionMethod]) -> str:
    return method.value if method else AcquisitionMethod.OTHER.value


class TaxFormCalculator:
    """Calculate charitable contribution forms for one donor and tax year."""

    def __init__(
        self,
        donations: Sequence[Donation],
        tax_year: int,
        rules: IRSRules = DEFAULT_IRS_RULES,
    ):
        """
        Initialize the calculator.

        Args:
            donations: All of the donor's cash and non-cash donations.
            tax_year: Tax year the forms are generated for.
            rules: IRS thresholds (defaults to the current rules).
        """
        self.donations = tuple(donations)
        self.tax_year = tax_year
        self.rules = rules

    @property
    def cash_donations(self) -> List[CashDonation]:
        return [d for d in self.donations if isinstance(d, CashDonation)]

    @property
    def non_cash_donations(self) -> List[NonCashDonation]:
        return [d for d in self.donations if isinstance(d, NonCashDonation)]

    def calculate_summary(self) -> TaxFormSummary:
        """
        Compute Schedule A totals and documentation requirements.

        Returns:
            TaxFormSummary with qualified totals, Form 8283 flags and the
            three missing-documentation lists.
        """
        cash = self.cash_donations
        non_cash = self.non_cash_donations

        total_cash = sum(d.amount for d in cash)
        total_non_cash = sum(d.fair_market_value for d in non_cash)
        total = total_cash + total_non_cash

        # --- Schedule A lines 11-14: qualified organizations only ---
        qualified_cash = sum(d.amount for d in cash if d.is_irs_qualified)
        qualified_non_cash = sum(d.fair_market_value for d in non_cash if d.is_irs_qualified)
        qualified = qualified_cash + qualified_non_cash

        # --- Form 8283 ---
        section_a = any(d.fair_market_value > self.rules.form_8283_threshold for d in non_cash)
        section_b = any(d.fair_market_value > self.rules.appraisal_threshold for d in non_cash)

        return TaxFormSummary(
            tax_year=self.tax_year,
            cash_contributions=qualified_cash,
            non_cash_contributions=qualified_non_cash,
            total_charitable_contributions=qualified,
            requires_form_8283=section_a or section_b,
            requires_form_8283_section_a=section_a,
            requires_form_8283_section_b=section_b,
            missing_acknowledgment=self._missing_acknowledgments(cash),
            missing_appraisal=self._missing_appraisals(non_cash),
            missing_form_8283=self._missing_form_8283(non_cash),
            total_donations=total,
            total_cash_donations=total_cash,
            total_non_cash_donations=total_non_cash,
            qualified_donations=qualified,
            non_qualified_donations=total - qualified,
        )

    def generate_schedule_a(self, personal_info: PersonalInfo) -> ScheduleA:
        """Generate Schedule A charitable contribution lines."""
        summary = self.calculate_summary()
        return ScheduleA(
            name=personal_info.name,
            ssn=personal_info.ssn,
            address=personal_info.address,
            city=personal_info.city,
            state=personal_info.state,
            zip=personal_info.zip,
            cash_contributions=summary.cash_contributions,
            non_cash_contributions=summary.non_cash_contributions,
            total_charitable_contributions=summary.total_charitable_contributions,
            # Line 16 is not populated from donations
            other_deductions=0,
            total_itemized_deductions=summary.total_charitable_contributions,
            tax_year=self.tax_year,
        )

    def generate_form_8283_section_a(self) -> List[Form8283SectionA]:
        """One Section A entry per non-cash gift over $500."""
        entries = []
        for d in self.non_cash_donations:
            if d.fair_market_value <= self.rules.form_8283_threshold:
                continue
            entries.append(Form8283SectionA(
                property_description=d.description,
                date_of_contribution=d.date,
                fair_market_value=d.fair_market_value,
                how_property_was_acquired=_acquisition(d.method_of_acquisition),
                date_of_acquisition=d.acquisition_date or "",
                cost_or_adjusted_basis=d.acquisition_cost or 0,
                donee_name=d.charity_name,
                donee_ein=normalize_ein(d.charity_ein),
                requires_appraisal=d.fair_market_value > self.rules.appraisal_threshold,
                appraised_value=d.appraisal_value,
                appraisal_date=d.appraisal_date,
            ))
        return entries

    def generate_form_8283_section_b(self) -> List[Form8283SectionB]:
        """
        One Section B entry per non-cash gift over $5,000.

        Appraiser and donee signature fields are left blank for the donor
        to complete. The appraised value falls back to fair market value
        when no separate appraisal value was recorded.
        """
        entries = []
        for d in self.non_cash_donations:
            if d.fair_market_value <= self.rules.appraisal_threshold:
                continue
            entries.append(Form8283SectionB(
                property_description=d.description,
                date_of_contribution=d.date,
                fair_market_value=d.fair_market_value,
                how_property_was_acquired=_acquisition(d.method_of_acquisition),
                date_of_acquisition=d.acquisition_date or "",
                cost_or_adjusted_basis=d.acquisition_cost or 0,
                donee_name=d.charity_name,
                donee_ein=normalize_ein(d.charity_ein),
                appraised_value=d.appraisal_value or d.fair_market_value,
                appraisal_date=d.appraisal_date or "",
            ))
        return entries

    def generate_tax_form_data(self, personal_info: PersonalInfo) -> TaxFormData:
        """
        Generate the complete form bundle.

        Form 8283 sections are None (not empty lists) when not required.
        """
        summary = self.calculate_summary()
        return TaxFormData(
            summary=summary,
            schedule_a=self.generate_schedule_a(personal_info),
            personal_info=personal_info,
            form_8283_section_a=(
                self.generate_form_8283_section_a()
                if summary.requires_form_8283_section_a else None
            ),
            form_8283_section_b=(
                self.generate_form_8283_section_b()
                if summary.requires_form_8283_section_b else None
            ),
        )

    def validate_donations(self, today: Optional[date] = None) -> ValidationReport:
        """
        Validate donation data against IRS requirements.

        All problems are collected; checking does not stop at the first one.

        Args:
            today: Reference date for the future / look-back checks
                   (defaults to the current date).

        Returns:
            ValidationReport with one message per problem, prefixed with
            the 1-based donation number.
        """
        today = today or date.today()
        earliest = _years_before(today, self.rules.lookback_years)
        errors = []

        for index, d in enumerate(self.donations, 1):
            prefix = f"Donation {index}"

            if d.charity_ein and d.charity_ein.strip():
                if not is_valid_ein(d.charity_ein):
                    errors.append(f"{prefix}: Invalid EIN format. Use format XX-XXXXXXX or XXXXXXXXX")
            elif d.is_irs_qualified:
                errors.append(f"{prefix}: EIN is required for IRS qualified donations")

            donation_date = _parse_date(d.date) if is_valid_date_format(d.date) else None
            if donation_date is None:
                errors.append(f"{prefix}: Invalid date format. Use YYYY-MM-DD")

            if donation_value(d) <= 0:
                errors.append(f"{prefix}: Amount must be greater than $0.01")

            if donation_date is not None:
                if donation_date > today:
                    errors.append(f"{prefix}: Date cannot be in the future")
                if donation_date < earliest:
                    errors.append(
                        f"{prefix}: Date is too far in the past "
                        f"(more than {self.rules.lookback_years} years)"
                    )

        return ValidationReport(is_valid=not errors, errors=errors)

    def get_optimization_recommendations(self) -> List[str]:
        """Advisory hints for the donor; not filing advice."""
        recommendations = []
        summary = self.calculate_summary()

        standard = self.rules.standard_deduction_for(self.tax_year)
        if summary.total_charitable_contributions < standard:
            recommendations.append(
                f"Consider the standard deduction ({_dollars(standard)}) "
                f"instead of itemizing charitable contributions"
            )

        if summary.missing_acknowledgment:
            recommendations.append(
                f"Obtain acknowledgments for {len(summary.missing_acknowledgment)} "
                f"donations to maximize deductions"
            )

        if summary.missing_appraisal:
            recommendations.append(
                f"Obtain appraisals for {len(summary.missing_appraisal)} "
                f"high-value donations to support deductions"
            )

        if summary.non_qualified_donations > 0:
            recommendations.append(
                f"Verify that non-qualified donations "
                f"({_dollars(summary.non_qualified_donations)}) are properly documented"
            )

        return recommendations

    # ------------------------------------------------------------------
    # Missing documentation
    # ------------------------------------------------------------------

    def _missing_acknowledgments(self, cash: List[CashDonation]) -> List[MissingDocumentation]:
        return [
            MissingDocumentation(
                donation_id=d.id,
                charity_name=d.charity_name,
                amount=d.amount,
                issue=f"Cash donation of {_dollars(d.amount)} missing acknowledgment",
                required_action="Obtain written acknowledgment from charity",
                deadline="Before filing tax return",
            )
            for d in cash
            if d.amount >= self.rules.cash_acknowledgment_threshold and not d.has_acknowledgment
        ]

    def _missing_appraisals(self, non_cash: List[NonCashDonation]) -> List[MissingDocumentation]:
        return [
            MissingDocumentation(
                donation_id=d.id,
                charity_name=d.charity_name,
                amount=d.fair_market_value,
                issue=f"Non-cash donation of {_dollars(d.fair_market_value)} missing appraisal",
                required_action="Obtain qualified appraisal from certified appraiser",
                deadline="Before filing tax return",
            )
            for d in non_cash
            if d.fair_market_value > self.rules.appraisal_threshold and not d.has_appraisal
        ]

    def _missing_form_8283(self, non_cash: List[NonCashDonation]) -> List[MissingDocumentation]:
        # A gift over $5,000 gets both a Section A and a Section B entry
        missing = []
        for d in non_cash:
            value = _dollars(d.fair_market_value)
            if d.fair_market_value > self.rules.form_8283_threshold:
                missing.append(MissingDocumentation(
                    donation_id=d.id,
                    charity_name=d.charity_name,
                    amount=d.fair_market_value,
                    issue=f"Non-cash donation of {value} requires Form 8283",
                    required_action="Complete Form 8283 Section A",
                    deadline="Attach to tax return",
                ))
            if d.fair_market_value > self.rules.appraisal_threshold:
                missing.append(MissingDocumentation(
                    donation_id=d.id,
                    charity_name=d.charity_name,
                    amount=d.fair_market_value,
                    issue=f"Non-cash donation of {value} requires Form 8283 Section B",
                    required_action="Complete Form 8283 Section B with appraisal and charity signature",
                    deadline="Attach to tax return",
                ))
        return missing


def _parse_date(value: str) -> Optional[date]:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 -> Feb 28
        return day.replace(year=day.year - years, day=28)


EARLIEST_SUPPORTED_TAX_YEAR = 2020


def check_form_request(
    donations: Sequence[Donation],
    tax_year: int,
    personal_info: Optional[PersonalInfo],
    today: Optional[date] = None,
) -> List[str]:
    """
    Check a form generation request before any calculation runs.

    Returns:
        Error messages; empty when the request can proceed.
    """
    today = today or date.today()
    errors = []
    if not donations:
        errors.append("Donations are required and cannot be empty")
    if not tax_year or not EARLIEST_SUPPORTED_TAX_YEAR <= tax_year <= today.year:
        errors.append("Valid tax year is required")
    if personal_info is None or not personal_info.name or not personal_info.ssn:
        errors.append("Personal information (name and SSN) is required")
    return errors
