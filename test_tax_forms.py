"""Tests for the charitable contribution tax form calculator."""

from datetime import date, timedelta

from giftflow_tax.calculator import TaxFormCalculator, check_form_request
from giftflow_tax.irs_rules import IRSRules, is_valid_ein, normalize_ein
from giftflow_tax.models import (
    AcquisitionMethod, CashDonation, NonCashDonation, PersonalInfo,
)
from giftflow_tax.report_generator import fmt_cents, generate_full_report

PERSON = PersonalInfo(
    name="Jane Donor", ssn="123-45-6789", address="1 Main St",
    city="Springfield", state="IL", zip="62701",
)


def cash(amount, **kwargs):
    defaults = dict(
        id="c1", date="2024-03-15", charity_name="Food Bank",
        charity_ein="12-3456789", amount=amount, is_irs_qualified=True,
        has_acknowledgment=True,
    )
    defaults.update(kwargs)
    return CashDonation(**defaults)


def goods(fmv, **kwargs):
    defaults = dict(
        id="n1", date="2024-05-01", charity_name="Art Museum",
        charity_ein="987654321", description="Painting",
        fair_market_value=fmv, is_irs_qualified=True, has_appraisal=False,
    )
    defaults.update(kwargs)
    return NonCashDonation(**defaults)


def test_single_small_cash_donation():
    """$50 qualified cash gift with acknowledgment needs nothing else."""
    print("=" * 60)
    print("Test: Summary - single $50 cash donation")
    print("=" * 60)

    summary = TaxFormCalculator([cash(5_000)], 2024).calculate_summary()

    assert summary.cash_contributions == 5_000
    assert summary.non_cash_contributions == 0
    assert summary.total_charitable_contributions == 5_000
    assert not summary.requires_form_8283_section_a
    assert not summary.requires_form_8283_section_b
    assert summary.missing_acknowledgment == []
    assert summary.missing_appraisal == []
    assert summary.missing_form_8283 == []
    print("  [PASS] Totals and flags correct")


def test_high_value_non_cash_without_appraisal():
    """$6,000 painting: both Form 8283 sections, appraisal missing."""
    print("\n" + "=" * 60)
    print("Test: Summary - $6,000 non-cash donation, no appraisal")
    print("=" * 60)

    summary = TaxFormCalculator([goods(600_000)], 2024).calculate_summary()

    assert summary.requires_form_8283_section_a
    assert summary.requires_form_8283_section_b
    assert summary.requires_form_8283
    assert len(summary.missing_appraisal) == 1
    assert summary.missing_appraisal[0].issue == "Non-cash donation of $6000.00 missing appraisal"
    assert len(summary.missing_form_8283) == 2
    actions = [m.required_action for m in summary.missing_form_8283]
    assert actions[0] == "Complete Form 8283 Section A"
    assert actions[1].startswith("Complete Form 8283 Section B")
    assert all(m.donation_id == "n1" for m in summary.missing_form_8283)
    print("  [PASS] Section A + B required, two Form 8283 entries")


def test_acknowledgment_threshold_is_inclusive():
    print("\n" + "=" * 60)
    print("Test: Acknowledgment threshold at exactly $250")
    print("=" * 60)

    at_threshold = cash(25_000, id="at", has_acknowledgment=False)
    below = cash(24_999, id="below", has_acknowledgment=False)
    acknowledged = cash(50_000, id="ok", has_acknowledgment=True)
    summary = TaxFormCalculator([at_threshold, below, acknowledged], 2024).calculate_summary()

    ids = [m.donation_id for m in summary.missing_acknowledgment]
    assert ids == ["at"], ids
    missing = summary.missing_acknowledgment[0]
    assert missing.amount == 25_000
    assert missing.issue == "Cash donation of $250.00 missing acknowledgment"
    assert missing.deadline == "Before filing tax return"
    print("  [PASS] $250 included, $249.99 excluded")


def test_form_8283_threshold_is_strict():
    print("\n" + "=" * 60)
    print("Test: Form 8283 Section A threshold just over $500")
    print("=" * 60)

    over = TaxFormCalculator([goods(50_001)], 2024)
    assert over.calculate_summary().requires_form_8283_section_a
    assert not over.calculate_summary().requires_form_8283_section_b
    assert len(over.generate_form_8283_section_a()) == 1
    assert over.generate_form_8283_section_b() == []

    at = TaxFormCalculator([goods(50_000)], 2024)
    assert not at.calculate_summary().requires_form_8283_section_a
    assert at.generate_form_8283_section_a() == []
    assert at.calculate_summary().missing_form_8283 == []
    print("  [PASS] $500.01 requires Section A, $500.00 does not")


def test_appraisal_threshold_just_over():
    calc = TaxFormCalculator([goods(500_001)], 2024)
    summary = calc.calculate_summary()
    assert summary.requires_form_8283_section_a
    assert summary.requires_form_8283_section_b
    issues = [m.issue for m in summary.missing_form_8283]
    assert issues == [
        "Non-cash donation of $5000.01 requires Form 8283",
        "Non-cash donation of $5000.01 requires Form 8283 Section B",
    ]

    at = TaxFormCalculator([goods(500_000)], 2024).calculate_summary()
    assert not at.requires_form_8283_section_b
    assert at.missing_appraisal == []


def test_totals_exclude_non_qualified():
    donations = [
        cash(10_000, id="q1"),
        cash(7_500, id="nq1", is_irs_qualified=False, charity_ein=""),
        goods(20_000, id="q2"),
        goods(40_000, id="nq2", is_irs_qualified=False),
    ]
    summary = TaxFormCalculator(donations, 2024).calculate_summary()

    assert summary.cash_contributions == 10_000
    assert summary.non_cash_contributions == 20_000
    assert summary.total_charitable_contributions == 30_000
    assert summary.total_donations == 77_500
    assert summary.total_cash_donations == 17_500
    assert summary.total_non_cash_donations == 60_000
    assert summary.qualified_donations == 30_000
    assert summary.non_qualified_donations == 47_500


def test_schedule_a():
    calc = TaxFormCalculator([cash(12_345), goods(20_000)], 2024)
    sa = calc.generate_schedule_a(PERSON)

    assert sa.name == "Jane Donor"
    assert sa.zip == "62701"
    assert sa.cash_contributions == 12_345
    assert sa.non_cash_contributions == 20_000
    assert sa.total_charitable_contributions == 32_345
    assert sa.other_deductions == 0
    assert sa.total_itemized_deductions == 32_345
    assert sa.tax_year == 2024


def test_form_8283_entries():
    painting = goods(
        700_000, charity_ein="987654321", appraisal_value=650_000,
        appraisal_date="2024-04-20", acquisition_date="2001-01-01",
        acquisition_cost=100_000, method_of_acquisition=AcquisitionMethod.PURCHASE,
    )
    sofa = goods(60_000, id="n2", description="Sofa", charity_ein="55 1234567")
    calc = TaxFormCalculator([painting, sofa], 2024)

    section_a = calc.generate_form_8283_section_a()
    assert [e.property_description for e in section_a] == ["Painting", "Sofa"]
    first = section_a[0]
    assert first.donee_ein == "98-7654321"
    assert first.how_property_was_acquired == "purchase"
    assert first.requires_appraisal
    assert first.appraised_value == 650_000
    assert first.donee_acknowledgment is False
    assert first.appraiser_name == ""
    second = section_a[1]
    assert second.donee_ein == "55-1234567"
    assert second.how_property_was_acquired == "other"
    assert second.date_of_acquisition == ""
    assert second.cost_or_adjusted_basis == 0
    assert not second.requires_appraisal

    section_b = calc.generate_form_8283_section_b()
    assert len(section_b) == 1
    assert section_b[0].appraised_value == 650_000
    assert section_b[0].appraisal_date == "2024-04-20"


def test_section_b_appraised_value_defaults_to_fmv():
    entry = TaxFormCalculator([goods(800_000)], 2024).generate_form_8283_section_b()[0]
    assert entry.appraised_value == 800_000
    assert entry.appraisal_date == ""
    assert entry.donee_signature == ""


def test_tax_form_data_bundle():
    small = TaxFormCalculator([cash(5_000)], 2024)
    data = small.generate_tax_form_data(PERSON)
    assert data.form_8283_section_a is None
    assert data.form_8283_section_b is None
    assert data.summary == small.calculate_summary()
    assert data.personal_info is PERSON

    mid = TaxFormCalculator([goods(60_000)], 2024).generate_tax_form_data(PERSON)
    assert len(mid.form_8283_section_a) == 1
    assert mid.form_8283_section_b is None

    big = TaxFormCalculator([goods(600_000)], 2024).generate_tax_form_data(PERSON)
    assert len(big.form_8283_section_a) == 1
    assert len(big.form_8283_section_b) == 1


def test_calculator_does_not_mutate_input():
    donations = [cash(30_000, has_acknowledgment=False), goods(600_000)]
    before = [repr(d) for d in donations]
    calc = TaxFormCalculator(donations, 2024)
    calc.generate_tax_form_data(PERSON)
    calc.validate_donations(today=date(2024, 12, 31))
    calc.get_optimization_recommendations()
    assert [repr(d) for d in donations] == before
    assert calc.calculate_summary() == calc.calculate_summary()


def test_validation_future_and_old_dates():
    print("\n" + "=" * 60)
    print("Test: Validation - future and stale dates")
    print("=" * 60)

    today = date(2024, 6, 15)
    tomorrow = (today + timedelta(days=1)).isoformat()
    eight_years_ago = today.replace(year=today.year - 8).isoformat()

    report = TaxFormCalculator([cash(5_000, date=tomorrow)], 2024).validate_donations(today=today)
    assert not report.is_valid
    assert any("cannot be in the future" in e for e in report.errors), report.errors

    report = TaxFormCalculator([cash(5_000, date=eight_years_ago)], 2024).validate_donations(today=today)
    assert any("too far in the past" in e for e in report.errors), report.errors

    report = TaxFormCalculator([cash(5_000, date=today.isoformat())], 2024).validate_donations(today=today)
    assert report.is_valid
    assert report.errors == []
    print("  [PASS] Future and stale dates flagged")


def test_validation_collects_all_errors():
    bad = cash(0, date="03/15/2024", charity_ein="", is_irs_qualified=True)
    bad_ein = goods(10_000, charity_ein="12-34567")
    unqualified_no_ein = cash(1_000, charity_ein="  ", is_irs_qualified=False)
    report = TaxFormCalculator([bad, bad_ein, unqualified_no_ein], 2024).validate_donations(
        today=date(2024, 12, 31)
    )

    assert report.errors == [
        "Donation 1: EIN is required for IRS qualified donations",
        "Donation 1: Invalid date format. Use YYYY-MM-DD",
        "Donation 1: Amount must be greater than $0.01",
        "Donation 2: Invalid EIN format. Use format XX-XXXXXXX or XXXXXXXXX",
    ]


def test_recommendations():
    donations = [
        cash(30_000, has_acknowledgment=False),
        goods(600_000),
        cash(2_500, id="nq", is_irs_qualified=False),
    ]
    recs = TaxFormCalculator(donations, 2024).get_optimization_recommendations()
    assert recs == [
        "Consider the standard deduction ($14600.00) instead of itemizing charitable contributions",
        "Obtain acknowledgments for 1 donations to maximize deductions",
        "Obtain appraisals for 1 high-value donations to support deductions",
        "Verify that non-qualified donations ($25.00) are properly documented",
    ]

    # 2023 has its own table entry; unknown years use 2024
    recs_2023 = TaxFormCalculator([cash(5_000)], 2023).get_optimization_recommendations()
    assert "$13850.00" in recs_2023[0]
    recs_2030 = TaxFormCalculator([cash(5_000)], 2030).get_optimization_recommendations()
    assert "$14600.00" in recs_2030[0]

    # Nothing to say when charitable total beats the standard deduction
    assert TaxFormCalculator([cash(1_500_000)], 2024).get_optimization_recommendations() == []


def test_custom_rules():
    rules = IRSRules(form_8283_threshold=10_000, appraisal_threshold=20_000)
    summary = TaxFormCalculator([goods(15_000)], 2024, rules=rules).calculate_summary()
    assert summary.requires_form_8283_section_a
    assert not summary.requires_form_8283_section_b


def test_ein_helpers():
    assert normalize_ein("123456789") == "12-3456789"
    assert normalize_ein("12-3456789") == "12-3456789"
    assert normalize_ein("12345") == "12345"
    assert normalize_ein("") == ""
    assert normalize_ein(None) == ""
    assert is_valid_ein("12-3456789")
    assert is_valid_ein("12 3456789")
    assert is_valid_ein("123456789")
    assert not is_valid_ein("1-23456789")
    assert not is_valid_ein("")


def test_check_form_request():
    today = date(2024, 12, 31)
    assert check_form_request([cash(100)], 2024, PERSON, today=today) == []
    errors = check_form_request([], 2019, PersonalInfo(name="X"), today=today)
    assert errors == [
        "Donations are required and cannot be empty",
        "Valid tax year is required",
        "Personal information (name and SSN) is required",
    ]
    assert check_form_request([cash(100)], 2025, PERSON, today=today) == ["Valid tax year is required"]


def test_report_generation():
    calc = TaxFormCalculator([cash(30_000, has_acknowledgment=False), goods(600_000)], 2024)
    data = calc.generate_tax_form_data(PERSON)
    report = generate_full_report(data, calc.get_optimization_recommendations())

    assert "CHARITABLE CONTRIBUTIONS SUMMARY - Tax Year 2024" in report
    assert "SCHEDULE A" in report
    assert "FORM 8283" in report
    assert "Section B" in report
    assert "$6,300.00" in report
    assert "Missing acknowledgments" in report
    assert "RECOMMENDATIONS" in report
    assert fmt_cents(123_456) == "$1,234.56"
    assert fmt_cents(-5) == "-$0.05"


if __name__ == "__main__":
    test_single_small_cash_donation()
    test_high_value_non_cash_without_appraisal()
    test_acknowledgment_threshold_is_inclusive()
    test_form_8283_threshold_is_strict()
    test_appraisal_threshold_just_over()
    test_totals_exclude_non_qualified()
    test_schedule_a()
    test_form_8283_entries()
    test_section_b_appraised_value_defaults_to_fmv()
    test_tax_form_data_bundle()
    test_calculator_does_not_mutate_input()
    test_validation_future_and_old_dates()
    test_validation_collects_all_errors()
    test_recommendations()
    test_custom_rules()
    test_ein_helpers()
    test_check_form_request()
    test_report_generation()

    print("\n" + "=" * 60)
    print("  ALL TESTS PASSED!")
    print("=" * 60)
