"""Field mapping for IRS Form 8283 (Noncash Charitable Contributions).

Section A, line 1 has five property rows (A-E) on page 1; Section B,
Part I line 5 has three rows (A-C) on page 2. Property beyond the
printed rows goes on a continuation sheet and is reported, not mapped.

Row/column layout follows the Rev. 12-2023 fillable PDF (f8283.pdf).
Confirm the names for a new revision with ``--list-fields``.
"""

import logging
from typing import Dict, List

from ..models import TaxFormData
from . import dollars, register

logger = logging.getLogger(__name__)

_P1 = "topmostSubform[0].Page1[0]"
_P2 = "topmostSubform[0].Page2[0]"

SECTION_A_ROWS = "ABCDE"
SECTION_B_ROWS = "ABC"

# Column order within a Section A row (line 1, columns a-i)
SECTION_A_COLUMNS = [
    "donee",          # (a) Name and address of the donee organization
    "description",    # (c) Description of donated property
    "date_contributed",  # (d)
    "date_acquired",  # (e)
    "how_acquired",   # (f)
    "cost_basis",     # (g)
    "fair_market_value",  # (h)
]

# Column order within a Section B row (line 5, columns a-f)
SECTION_B_COLUMNS = [
    "description",    # (a)
    "appraised_value",  # (b)
    "date_acquired",  # (d)
    "how_acquired",   # (e)
    "cost_basis",     # (f)
]


def _row_fields(page: str, field_prefix: str, table: str, row: str, columns: List[str], first: int) -> Dict[str, str]:
    """Field names for one table row; fields are numbered across the page."""
    return {
        col: f"{page}.{table}[0].Row{row}[0].{field_prefix}_{first + i}[0]"
        for i, col in enumerate(columns)
    }


def _section_a_fields() -> Dict[str, Dict[str, str]]:
    rows = {}
    first = 3  # f1_1 / f1_2 are the name and identifying number
    for row in SECTION_A_ROWS:
        rows[row] = _row_fields(_P1, "f1", "Table_Line1", row, SECTION_A_COLUMNS, first)
        first += len(SECTION_A_COLUMNS)
    return rows


def _section_b_fields() -> Dict[str, Dict[str, str]]:
    rows = {}
    first = 3
    for row in SECTION_B_ROWS:
        rows[row] = _row_fields(_P2, "f2", "Table_Line5", row, SECTION_B_COLUMNS, first)
        first += len(SECTION_B_COLUMNS)
    return rows


HEADER_FIELDS = {
    "name": f"{_P1}.f1_1[0]",
    "ssn": f"{_P1}.f1_2[0]",
    "name_p2": f"{_P2}.f2_1[0]",
    "ssn_p2": f"{_P2}.f2_2[0]",
}
SECTION_A_FIELDS = _section_a_fields()
SECTION_B_FIELDS = _section_b_fields()


@register("f8283", "f8283.pdf")
def map_form_8283(data: TaxFormData) -> Dict[str, str]:
    """Map Form 8283 Section A / B entries to PDF field values."""
    section_a = data.form_8283_section_a or []
    section_b = data.form_8283_section_b or []
    if not section_a and not section_b:
        return {}

    info = data.personal_info
    result = {HEADER_FIELDS["name"]: info.name}
    if info.ssn:
        result[HEADER_FIELDS["ssn"]] = info.ssn

    for row, entry in zip(SECTION_A_ROWS, section_a):
        fields = SECTION_A_FIELDS[row]
        donee = entry.donee_name
        if entry.donee_ein:
            donee += f" ({entry.donee_ein})"
        result[fields["donee"]] = donee
        result[fields["description"]] = entry.property_description
        result[fields["date_contributed"]] = entry.date_of_contribution
        result[fields["date_acquired"]] = entry.date_of_acquisition
        result[fields["how_acquired"]] = entry.how_property_was_acquired
        if entry.cost_or_adjusted_basis:
            result[fields["cost_basis"]] = dollars(entry.cost_or_adjusted_basis)
        result[fields["fair_market_value"]] = dollars(entry.fair_market_value)

    if section_b:
        result[HEADER_FIELDS["name_p2"]] = info.name
        if info.ssn:
            result[HEADER_FIELDS["ssn_p2"]] = info.ssn
    for row, entry in zip(SECTION_B_ROWS, section_b):
        fields = SECTION_B_FIELDS[row]
        result[fields["description"]] = entry.property_description
        result[fields["appraised_value"]] = dollars(entry.appraised_value)
        result[fields["date_acquired"]] = entry.date_of_acquisition
        result[fields["how_acquired"]] = entry.how_property_was_acquired
        if entry.cost_or_adjusted_basis:
            result[fields["cost_basis"]] = dollars(entry.cost_or_adjusted_basis)

    if len(section_a) > len(SECTION_A_ROWS) or len(section_b) > len(SECTION_B_ROWS):
        logger.warning(
            "Form 8283 has %d Section A and %d Section B items; "
            "items past the printed rows need a continuation sheet",
            len(section_a), len(section_b),
        )

    return result
