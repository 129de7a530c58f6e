"""Schedule A (Form 1040) fields for Gifts to Charity.

Only the taxpayer header and lines 11-17 are filled; medical, taxes and
interest sections stay blank for the preparer. Names are from the 2024
fillable sa.pdf, which the 2025 revision kept.
"""

from typing import Dict

from ..models import TaxFormData
from . import dollars, register

_PAGE = "form1[0].Page1[0]"

SCHEDULE_A_FIELDS = {
    "name": f"{_PAGE}.f1_1[0]",
    "ssn": f"{_PAGE}.f1_2[0]",
    "line_11": f"{_PAGE}.f1_23[0]",  # by cash or check
    "line_12": f"{_PAGE}.f1_24[0]",  # other than by cash or check
    "line_14": f"{_PAGE}.f1_26[0]",  # total gifts (line 13 carryover left blank)
    "line_16": f"{_PAGE}.f1_29[0]",  # other itemized deductions
    "line_17": f"{_PAGE}.f1_30[0]",  # total itemized deductions
}


@register("schedule_a", "sa.pdf")
def map_schedule_a(data: TaxFormData) -> Dict[str, str]:
    """Schedule A charitable lines; empty when no qualified gifts were made."""
    sa = data.schedule_a
    if sa.total_charitable_contributions <= 0:
        return {}

    values = {SCHEDULE_A_FIELDS["name"]: sa.name}
    if sa.ssn:
        values[SCHEDULE_A_FIELDS["ssn"]] = sa.ssn

    amounts = {
        "line_11": sa.cash_contributions,
        "line_12": sa.non_cash_contributions,
        "line_16": sa.other_deductions,
    }
    for line, cents in amounts.items():
        if cents > 0:
            values[SCHEDULE_A_FIELDS[line]] = dollars(cents)

    values[SCHEDULE_A_FIELDS["line_14"]] = dollars(sa.total_charitable_contributions)
    values[SCHEDULE_A_FIELDS["line_17"]] = dollars(sa.total_itemized_deductions)
    return values
