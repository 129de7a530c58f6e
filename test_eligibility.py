import unittest

from giftflow_tax.eligibility import (
    EXCLUSIONS_POLICY_REF, GENERAL_POLICY_REF, EligibilityPolicy, WishVerifier,
    analyze_documents, get_vendor_type, verify_wish_eligibility,
)
from giftflow_tax.models import (
    DocumentType, VendorInfo, VerificationContext, VerificationOutcome, WishDocument,
)

MEDICAL_REF = "IRC Section 213 - Medical and Dental Expenses"


def context(category, description="Wheelchair ramp for home", vendor=None):
    return VerificationContext(category=category, description=description, vendor_info=vendor)


class TestVerifyWishEligibility(unittest.TestCase):

    def test_denied_category_rejected(self):
        result = verify_wish_eligibility(context("entertainment", "Concert tickets"))
        self.assertEqual(result.result, VerificationOutcome.REJECT)
        self.assertEqual(result.confidence, 1.0)
        self.assertEqual(result.reasons, ['Category "entertainment" is not tax-deductible'])
        self.assertEqual(result.policy_refs, [EXCLUSIONS_POLICY_REF])

    def test_denied_word_in_description_beats_preverified_category(self):
        vendor = VendorInfo(name="Clinic", npi="1234567890")
        result = verify_wish_eligibility(
            context("medical-expenses", "Alcohol swabs and tobacco cessation", vendor)
        )
        self.assertEqual(result.result, VerificationOutcome.REJECT)
        self.assertEqual(result.confidence, 1.0)
        self.assertEqual(result.reasons, ['Category "alcohol" is not tax-deductible'])

    def test_preverified_without_vendor_goes_to_review(self):
        result = verify_wish_eligibility(context("medical-expenses"))
        self.assertEqual(result.result, VerificationOutcome.REVIEW)
        self.assertEqual(result.confidence, 0.7)
        self.assertEqual(result.reasons, ["Requires manual review for tax deductibility"])
        self.assertEqual(result.policy_refs, [MEDICAL_REF, GENERAL_POLICY_REF])

    def test_preverified_with_valid_npi_is_eligible(self):
        vendor = VendorInfo(name="City Hospital", type="hospital", npi="1234567890")
        result = verify_wish_eligibility(context("medical-expenses", vendor=vendor))
        self.assertEqual(result.result, VerificationOutcome.ELIGIBLE)
        self.assertEqual(result.confidence, 0.9)
        self.assertEqual(result.reasons, ["Pre-verified category: medical-expenses"])
        self.assertEqual(result.policy_refs, [MEDICAL_REF])

    def test_preverified_with_bad_npi_goes_to_review(self):
        vendor = VendorInfo(name="City Hospital", npi="12345")
        result = verify_wish_eligibility(context("medical-expenses", vendor=vendor))
        self.assertEqual(result.result, VerificationOutcome.REVIEW)
        self.assertEqual(result.confidence, 0.4)
        self.assertEqual(result.reasons, [
            "Invalid or missing NPI for medical provider",
            "Requires manual review for tax deductibility",
        ])

    def test_educational_vendor_ein(self):
        good = VendorInfo(name="Lincoln Elementary", type="school", ein="12-3456789")
        result = verify_wish_eligibility(context("educational-materials", "Textbooks", good))
        self.assertEqual(result.result, VerificationOutcome.ELIGIBLE)
        self.assertEqual(result.policy_refs, ["IRC Section 117 - Qualified Scholarships"])

        # The verifier does not strip whitespace from vendor EINs
        spaced = VendorInfo(name="Lincoln Elementary", type="school", ein="12 3456789")
        result = verify_wish_eligibility(context("educational-materials", "Textbooks", spaced))
        self.assertEqual(result.result, VerificationOutcome.REVIEW)
        self.assertIn("Invalid or missing EIN for educational institution", result.reasons)

    def test_501c3_vendor(self):
        partner = VendorInfo(name="Habitat", is_501c3=True, ein="123456789")
        result = verify_wish_eligibility(context("housing-assistance", "Rent deposit", partner))
        self.assertEqual(result.result, VerificationOutcome.ELIGIBLE)
        self.assertEqual(result.confidence, 0.9)

        no_ein = VendorInfo(name="Habitat", is_501c3=True)
        result = verify_wish_eligibility(context("housing-assistance", "Rent deposit", no_ein))
        self.assertEqual(result.result, VerificationOutcome.REVIEW)
        self.assertIn("Invalid or missing EIN for 501(c)(3) organization", result.reasons)

    def test_general_vendor_leaves_score_unchanged(self):
        vendor = VendorInfo(name="Corner Grocery", type="store")
        self.assertEqual(get_vendor_type(vendor), "general")
        result = verify_wish_eligibility(context("food-assistance", "Groceries", vendor))
        self.assertEqual(result.result, VerificationOutcome.REVIEW)
        self.assertEqual(result.confidence, 0.7)

    def test_vendor_type_classification(self):
        self.assertEqual(get_vendor_type(VendorInfo(npi="1234567890", is_501c3=True)), "medical")
        self.assertEqual(get_vendor_type(VendorInfo(is_501c3=True, type="school")), "501c3")
        self.assertEqual(get_vendor_type(VendorInfo(type="higher-education")), "educational")
        self.assertEqual(get_vendor_type(VendorInfo()), "general")

    def test_unknown_category_goes_to_review(self):
        result = verify_wish_eligibility(context("community-garden", "Seeds and soil"))
        self.assertEqual(result.result, VerificationOutcome.REVIEW)
        self.assertEqual(result.confidence, 0.5)
        self.assertEqual(result.policy_refs, [GENERAL_POLICY_REF])

    def test_suspicious_description_rejected(self):
        result = verify_wish_eligibility(context("general", "New PlayStation for the lounge"))
        self.assertEqual(result.result, VerificationOutcome.REJECT)
        self.assertEqual(result.confidence, 0.9)
        self.assertEqual(result.reasons, ["Contains non-deductible items or personal expenses"])
        self.assertEqual(result.policy_refs, [EXCLUSIONS_POLICY_REF])

    def test_suspicious_description_on_unverified_preverified_category(self):
        result = verify_wish_eligibility(context("medical-expenses", "Private room upgrade"))
        self.assertEqual(result.result, VerificationOutcome.REJECT)
        self.assertEqual(result.confidence, 0.9)

    def test_eligible_check_runs_before_suspicious_patterns(self):
        vendor = VendorInfo(npi="1234567890")
        result = verify_wish_eligibility(context("medical-expenses", "Private room upgrade", vendor))
        self.assertEqual(result.result, VerificationOutcome.ELIGIBLE)

    def test_category_match_is_case_insensitive(self):
        result = verify_wish_eligibility(context("Medical-Expenses"))
        self.assertEqual(result.confidence, 0.7)

    def test_same_input_same_result(self):
        ctx = context("medical-expenses", vendor=VendorInfo(npi="12345"))
        self.assertEqual(verify_wish_eligibility(ctx), verify_wish_eligibility(ctx))

    def test_injected_policy(self):
        strict = EligibilityPolicy(eligible_threshold=0.95)
        verifier = WishVerifier(strict)
        result = verifier.verify(context("medical-expenses", vendor=VendorInfo(npi="1234567890")))
        self.assertEqual(result.result, VerificationOutcome.REVIEW)
        self.assertEqual(result.confidence, 0.9)

        lenient = EligibilityPolicy(denied_categories=())
        result = verify_wish_eligibility(context("entertainment", "Museum field trip"), lenient)
        self.assertEqual(result.result, VerificationOutcome.REVIEW)


class TestAnalyzeDocuments(unittest.TestCase):

    def test_no_documents(self):
        analysis = analyze_documents([])
        self.assertIsNone(analysis.category)
        self.assertIsNone(analysis.vendor_info)
        self.assertEqual(analysis.confidence, 0.0)
        self.assertEqual(analysis.conflicting_categories, [])

    def test_medical_document_with_npi(self):
        doc = WishDocument(DocumentType.MEDICAL, "City Hospital statement\nProvider NPI: 1234567890")
        analysis = analyze_documents([doc])
        self.assertEqual(analysis.category, "medical-expenses")
        self.assertEqual(analysis.vendor_info.npi, "1234567890")
        self.assertEqual(analysis.confidence, 0.5)

    def test_enrollment_document_with_ein(self):
        doc = WishDocument(DocumentType.ENROLLMENT, "Enrollment confirmation, EIN 12-3456789")
        analysis = analyze_documents([doc])
        self.assertEqual(analysis.category, "educational-materials")
        self.assertEqual(analysis.vendor_info.ein, "12-3456789")
        self.assertEqual(analysis.confidence, 0.5)

    def test_invoice_vendor_name_keeps_case(self):
        doc = WishDocument(DocumentType.INVOICE, "INVOICE 1001\nVendor: Acme Supply Co\nTotal: 40.00")
        analysis = analyze_documents([doc])
        self.assertIsNone(analysis.category)
        self.assertEqual(analysis.vendor_info.name, "Acme Supply Co")
        self.assertEqual(analysis.confidence, 0.2)

    def test_conflicting_documents_last_match_wins(self):
        docs = [
            WishDocument(DocumentType.MEDICAL, "hospital discharge summary"),
            WishDocument(DocumentType.ENROLLMENT, "school enrollment form"),
        ]
        with self.assertLogs("giftflow_tax.eligibility", level="WARNING"):
            analysis = analyze_documents(docs)
        self.assertEqual(analysis.category, "educational-materials")
        self.assertEqual(analysis.conflicting_categories,
                         ["medical-expenses", "educational-materials"])
        self.assertEqual(analysis.confidence, 0.6)
        self.assertIsNone(analysis.vendor_info)


if __name__ == "__main__":
    unittest.main()
