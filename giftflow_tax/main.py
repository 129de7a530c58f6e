"""Main entry point for the charitable tax tool."""

import argparse
import logging
import sys
from typing import List, Optional

from .calculator import TaxFormCalculator, check_form_request
from .config_loader import DonorProfile, load_donation_ledger, load_profile, load_wish
from .form_filler import generate_all_forms, list_fields
from .models import (
    AcquisitionMethod, CashDonation, Donation, NonCashDonation, PersonalInfo, TaxFormData,
)
from .pipeline import VerificationPipeline, status_for
from .report_generator import generate_full_report, generate_verification_report


def build_demo_profile() -> DonorProfile:
    """Sample donor covering acknowledgment, Form 8283 and appraisal cases."""
    donations: List[Donation] = [
        CashDonation(
            id="cash-1", date="2024-03-15", charity_name="Springfield Food Bank",
            charity_ein="12-3456789", amount=5_000, is_irs_qualified=True,
            has_acknowledgment=True,
        ),
        CashDonation(
            id="cash-2", date="2024-06-01", charity_name="Children's Hospital Fund",
            charity_ein="987654321", amount=30_000, is_irs_qualified=True,
            has_acknowledgment=False,
        ),
        CashDonation(
            id="cash-3", date="2024-07-04", charity_name="Neighborhood Block Party",
            charity_ein="", amount=10_000, is_irs_qualified=False,
        ),
        NonCashDonation(
            id="goods-1", date="2024-09-10", charity_name="Habitat ReStore",
            charity_ein="55-1234567", description="Used furniture (sofa, dining set)",
            fair_market_value=80_000, is_irs_qualified=True,
            acquisition_date="2016-05-01", acquisition_cost=250_000,
            method_of_acquisition=AcquisitionMethod.PURCHASE,
        ),
        NonCashDonation(
            id="art-1", date="2024-11-20", charity_name="City Art Museum",
            charity_ein="331234567", description="Oil painting, 1962",
            fair_market_value=600_000, is_irs_qualified=True, has_appraisal=False,
            method_of_acquisition=AcquisitionMethod.INHERITANCE,
        ),
    ]
    return DonorProfile(
        tax_year=2024,
        personal_info=PersonalInfo(
            name="Jane Donor", ssn="000-00-0000", address="1 Main St",
            city="Springfield", state="IL", zip="62701",
        ),
        donations=donations,
    )


def run_tax_forms(
    profile: DonorProfile,
    pdf: bool = False,
    pdf_output: str = "",
) -> Optional[TaxFormData]:
    """Validate the donations, print the report and optionally fill PDFs.

    Returns:
        The form bundle, or None when the request or donations are invalid.
    """
    errors = check_form_request(profile.donations, profile.tax_year, profile.personal_info)
    if errors:
        print("\nCannot generate tax forms:")
        for e in errors:
            print(f"  - {e}")
        return None

    calculator = TaxFormCalculator(profile.donations, profile.tax_year)
    validation = calculator.validate_donations()
    if not validation.is_valid:
        print("\nPlease fix the validation errors before generating tax forms:")
        for e in validation.errors:
            print(f"  - {e}")
        return None

    data = calculator.generate_tax_form_data(profile.personal_info)
    recommendations = calculator.get_optimization_recommendations()
    print(generate_full_report(data, recommendations, validation))

    if pdf:
        generate_all_forms(data, output_dir=pdf_output)
    return data


def run_wish_verification(path: str) -> None:
    """Verify a wish described in a YAML file and print the decision."""
    wish = load_wish(path)
    pipeline = VerificationPipeline()
    result = pipeline.run(wish)
    print(generate_verification_report(wish.wish_id, result.verification))
    print(f"  Wish status: {status_for(result.result).value}")
    if result.processed_documents:
        print(f"  Documents processed: {len(result.processed_documents)} "
              f"(document score {result.document_confidence:.2f})")


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Charitable tax tool - wish eligibility and donation tax forms"
    )
    parser.add_argument(
        "--config",
        help="Path to YAML donor profile (personal info, donations, ledger)"
    )
    parser.add_argument(
        "--ledger",
        help="CSV/Excel donation ledger (added to the profile's donations)"
    )
    parser.add_argument(
        "--tax-year", type=int, default=None,
        help="Tax year (overrides the profile)"
    )
    parser.add_argument(
        "--verify-wish",
        help="YAML wish submission to verify for tax deductibility"
    )
    parser.add_argument(
        "--demo", action="store_true",
        help="Run with sample donation data"
    )
    parser.add_argument(
        "--pdf", action="store_true",
        help="Generate filled PDF forms (requires templates in pdf_templates/)"
    )
    parser.add_argument(
        "--pdf-output", default="",
        help="Output directory for PDF forms (default: output/<year>/)"
    )
    parser.add_argument(
        "--list-fields",
        help="List the AcroForm fields of a fillable PDF and exit"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Show debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_fields:
        rows = list_fields(args.list_fields)
        if not rows:
            print("No AcroForm fields found (the PDF may use XFA forms).")
        for i, (name, field_type, value) in enumerate(rows, 1):
            print(f"{i:<5} {name:<60} {field_type:<12} {value}")
        return

    if args.verify_wish:
        run_wish_verification(args.verify_wish)
        return

    if args.demo:
        profile = build_demo_profile()
    elif args.config:
        profile = load_profile(args.config)
        if profile is None:
            sys.exit(1)
        print(f"\nLoaded profile: {args.config}")
        print(f"  Taxpayer: {profile.personal_info.name}")
        print(f"  Tax year: {profile.tax_year}")
        print(f"  Donations: {len(profile.donations)}")
    else:
        profile = DonorProfile()

    if args.ledger:
        profile.donations.extend(load_donation_ledger(args.ledger))
    if args.tax_year:
        profile.tax_year = args.tax_year

    if run_tax_forms(profile, pdf=args.pdf, pdf_output=args.pdf_output) is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
