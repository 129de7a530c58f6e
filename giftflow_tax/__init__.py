"""Charitable tax tool: wish eligibility checks and donation tax forms."""

from .calculator import TaxFormCalculator
from .eligibility import analyze_documents, verify_wish_eligibility

__all__ = ["TaxFormCalculator", "analyze_documents", "verify_wish_eligibility"]
