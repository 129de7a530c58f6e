"""Load donor profiles, donation ledgers and wish submissions from files.

Profile and wish files are YAML. Donation ledgers are CSV or Excel with
one row per donation. Dollar amounts in files are converted to cents here.

Example profile::

    tax_year: 2024
    taxpayer:
      name: Jane Donor
      ssn: 123-45-6789
      address: 1 Main St
      city: Springfield
      state: IL
      zip: "62701"
    ledger: donations.csv
    donations:
      - kind: cash
        id: d1
        date: 2024-03-15
        charity_name: Food Bank
        charity_ein: 12-3456789
        amount: 50.00
        is_irs_qualified: true
        has_acknowledgment: true
"""

import numbers
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import List, Optional

import pandas as pd
import yaml

from .models import (
    AcquisitionMethod, CashDonation, Donation, NonCashDonation, PersonalInfo,
)
from .pipeline import WishType, WishVerificationInput

LEDGER_EXTENSIONS = {'.csv', '.xlsx', '.xls'}


@dataclass
class DonorProfile:
    """Donor profile loaded from YAML."""
    tax_year: int = 2024
    personal_info: PersonalInfo = field(default_factory=lambda: PersonalInfo(name="Taxpayer"))
    donations: List[Donation] = field(default_factory=list)
    ledger: Optional[str] = None  # Path to a CSV/Excel donation ledger


def to_cents(value) -> int:
    """
    Convert a dollar amount ("1,250.50", 1250.5, "$40") to integer cents.

    Raises:
        ValueError: if the value is not a number.
    """
    if value is None or value == "":
        return 0
    text = str(value).replace("$", "").replace(",", "").strip()
    try:
        dollars = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Not a dollar amount: {value!r}") from None
    return int((dollars * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _amount(raw: dict, key: str) -> Optional[int]:
    """Read '<key>_cents' as-is, or '<key>' in dollars."""
    cents = raw.get(f"{key}_cents")
    if _present(cents):
        return int(cents)
    dollars = raw.get(key)
    if _present(dollars):
        return to_cents(dollars)
    return None


def _present(value) -> bool:
    if value is None:
        return False
    if not isinstance(value, str) and pd.api.types.is_scalar(value) and pd.isna(value):
        # NaN and NaT from empty spreadsheet cells
        return False
    return str(value).strip() != ""


def _text(raw: dict, key: str, default: Optional[str] = None) -> Optional[str]:
    value = raw.get(key)
    if not _present(value):
        return default
    if hasattr(value, "strftime"):
        # YAML and Excel hand back dates as date/datetime objects
        return value.strftime("%Y-%m-%d")
    return str(value).strip()


def _ein(raw: dict) -> str:
    value = raw.get("charity_ein")
    if isinstance(value, numbers.Real) and not isinstance(value, bool) and _present(value):
        # Excel stores an undashed EIN as a number and drops its leading zero
        return f"{int(value):09d}"
    return _text(raw, "charity_ein", "")


def _flag(raw: dict, key: str) -> bool:
    value = raw.get(key)
    if not _present(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "y", "1")
    return bool(value)


def donation_from_dict(raw: dict) -> Donation:
    """
    Build a donation from a profile entry or ledger row.

    ``kind`` selects the variant: 'cash' (default) or 'noncash'.

    Raises:
        ValueError: for an unknown kind or a missing amount.
    """
    kind = (_text(raw, "kind", "cash") or "cash").lower().replace("-", "").replace("_", "")
    common = dict(
        id=_text(raw, "id", ""),
        date=_text(raw, "date", ""),
        charity_name=_text(raw, "charity_name", ""),
        charity_ein=_ein(raw),
        is_irs_qualified=_flag(raw, "is_irs_qualified"),
    )

    if kind == "cash":
        amount = _amount(raw, "amount")
        if amount is None:
            raise ValueError(f"Cash donation {common['id']!r} has no amount")
        return CashDonation(
            amount=amount,
            has_acknowledgment=_flag(raw, "has_acknowledgment"),
            acknowledgment_date=_text(raw, "acknowledgment_date"),
            description=_text(raw, "description"),
            **common,
        )

    if kind == "noncash":
        fmv = _amount(raw, "fair_market_value")
        if fmv is None:
            raise ValueError(f"Non-cash donation {common['id']!r} has no fair_market_value")
        method = _text(raw, "method_of_acquisition")
        return NonCashDonation(
            description=_text(raw, "description", ""),
            fair_market_value=fmv,
            has_appraisal=_flag(raw, "has_appraisal"),
            appraisal_date=_text(raw, "appraisal_date"),
            appraisal_value=_amount(raw, "appraisal_value"),
            acquisition_date=_text(raw, "acquisition_date"),
            acquisition_cost=_amount(raw, "acquisition_cost"),
            method_of_acquisition=AcquisitionMethod(method.lower()) if method else None,
            **common,
        )

    raise ValueError(f"Unknown donation kind: {raw.get('kind')!r}")


def load_donation_ledger(path: str) -> List[Donation]:
    """
    Load donations from a CSV or Excel ledger.

    Column names match the profile keys (kind, id, date, charity_name, ...).

    Raises:
        ValueError: for an unsupported file type or a bad row (the message
                    carries the 1-based row number).
    """
    extension = Path(path).suffix.lower()
    if extension not in LEDGER_EXTENSIONS:
        raise ValueError(f"Unsupported ledger type: {extension}")

    if extension == '.csv':
        # Keep EINs and zip codes as text
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    else:
        # object keeps date cells as Timestamps and numbers as numbers
        df = pd.read_excel(path, dtype=object)

    df.columns = [str(c).strip().lower() for c in df.columns]

    donations = []
    for row_number, row in enumerate(df.to_dict(orient="records"), 1):
        try:
            donations.append(donation_from_dict(row))
        except ValueError as e:
            raise ValueError(f"{path} row {row_number}: {e}") from e
    return donations


def load_profile(path: str) -> Optional[DonorProfile]:
    """
    Load a donor profile from a YAML file.

    Donations from the profile's ledger file (resolved relative to the
    profile) are appended after the inline donations.

    Returns:
        DonorProfile if the file exists and is not empty, None otherwise.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError:
        print(f"Profile file not found: {path}")
        return None

    if not raw:
        return None

    taxpayer = raw.get("taxpayer", {}) or {}
    personal_info = PersonalInfo(
        name=str(taxpayer.get("name", "Taxpayer")),
        ssn=str(taxpayer.get("ssn", "") or ""),
        address=str(taxpayer.get("address", "") or ""),
        city=str(taxpayer.get("city", "") or ""),
        state=str(taxpayer.get("state", "") or ""),
        zip=str(taxpayer.get("zip", "") or ""),
    )

    donations = [donation_from_dict(d) for d in raw.get("donations", []) or []]

    ledger = raw.get("ledger")
    if ledger:
        ledger_path = Path(ledger)
        if not ledger_path.is_absolute():
            ledger_path = Path(path).parent / ledger_path
        ledger = str(ledger_path)
        donations.extend(load_donation_ledger(ledger))

    profile = DonorProfile(
        tax_year=int(raw.get("tax_year", 2024)),
        personal_info=personal_info,
        donations=donations,
        ledger=ledger,
    )

    if profile.personal_info.ssn:
        print("\n  WARNING: Profile contains SSN data. "
              "Ensure the profile file is gitignored and not shared.")

    return profile


def load_wish(path: str) -> WishVerificationInput:
    """
    Load a wish submission from YAML.

    Document paths are resolved relative to the wish file.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    base = Path(path).parent
    documents = []
    for doc in raw.get("documents", []) or []:
        doc_path = Path(str(doc))
        documents.append(str(doc_path if doc_path.is_absolute() else base / doc_path))

    return WishVerificationInput(
        wish_id=str(raw.get("id", Path(path).stem)),
        wish_type=WishType(str(raw.get("type", "CUSTOM")).upper()),
        title=str(raw.get("title", "")),
        description=str(raw.get("description", "")),
        category=str(raw.get("category", "general")),
        documents=documents,
    )
