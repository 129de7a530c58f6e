"""Fill IRS fillable PDFs (Schedule A, Form 8283) with computed form data.

Blank templates are downloaded from irs.gov and placed under
pdf_templates/<year>/. Filled drafts are written as draft_<template>.

Usage:
    from giftflow_tax.form_filler import generate_all_forms
    generate_all_forms(tax_form_data, output_dir="output/2024")
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pypdf import PdfReader, PdfWriter

from .field_mappings import get_mapper
from .models import TaxFormData

logger = logging.getLogger(__name__)

# Relative to the working directory, where the user keeps templates and drafts
TEMPLATES_DIR = Path("pdf_templates")
OUTPUT_DIR = Path("output")

# Earlier years' templates are tried when the tax year's is missing
TEMPLATE_YEARS_BACK = 2


@dataclass
class FormRun:
    """What generate_all_forms did for each requested form."""
    generated: Dict[str, str] = field(default_factory=dict)  # form -> output path
    skipped: List[str] = field(default_factory=list)  # nothing to fill
    missing_templates: Dict[str, str] = field(default_factory=dict)  # form -> message


def get_template_path(form_name: str, tax_year: int, templates_dir: Optional[Path] = None) -> Path:
    """
    Find the blank template for a form.

    Tries <templates_dir>/<tax_year>/ first, then up to two earlier years.

    Raises:
        FileNotFoundError: when no year has the template.
    """
    template_file = get_mapper(form_name).template_file
    base = templates_dir or TEMPLATES_DIR

    candidates = [base / str(tax_year - back) / template_file
                  for back in range(TEMPLATE_YEARS_BACK + 1)]
    for candidate in candidates:
        if candidate.is_file():
            return candidate

    raise FileNotFoundError(
        f"No {template_file} template for {form_name}; "
        f"download it from irs.gov to {candidates[0]}"
    )


def fill_form(
    form_name: str,
    data: TaxFormData,
    templates_dir: Optional[Path] = None,
) -> Optional[PdfWriter]:
    """Return a PdfWriter with the form's fields filled, or None if there is nothing to fill."""
    values = get_mapper(form_name).mapper(data)
    if not values:
        return None

    writer = PdfWriter()
    writer.append(PdfReader(str(get_template_path(form_name, data.tax_year, templates_dir))))
    for page in writer.pages:
        writer.update_page_form_field_values(page, values, auto_regenerate=False)
    return writer


def fill_and_save(
    form_name: str,
    data: TaxFormData,
    output_path: str,
    templates_dir: Optional[Path] = None,
) -> bool:
    """Fill a form and write it to ``output_path``; False when there was nothing to fill."""
    writer = fill_form(form_name, data, templates_dir)
    if writer is None:
        return False

    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "wb") as out:
        writer.write(out)
    return True


def auto_select_forms(data: TaxFormData) -> List[str]:
    """Schedule A always; Form 8283 when any non-cash gift is over $500."""
    forms = ["schedule_a"]
    if data.summary.requires_form_8283:
        forms.append("f8283")
    return forms


def generate_all_forms(
    data: TaxFormData,
    output_dir: str = "",
    forms: Optional[List[str]] = None,
    templates_dir: Optional[Path] = None,
) -> FormRun:
    """
    Fill every applicable form into ``output_dir``.

    A missing template is reported in the result and printed; the other
    forms are still generated.
    """
    out_dir = Path(output_dir) if output_dir else OUTPUT_DIR / str(data.tax_year)
    out_dir.mkdir(parents=True, exist_ok=True)

    run = FormRun()
    for form_name in forms if forms is not None else auto_select_forms(data):
        try:
            get_template_path(form_name, data.tax_year, templates_dir)
        except FileNotFoundError as e:
            run.missing_templates[form_name] = str(e)
            continue

        target = out_dir / f"draft_{get_mapper(form_name).template_file}"
        if fill_and_save(form_name, data, str(target), templates_dir):
            run.generated[form_name] = str(target)
            logger.info("Filled %s -> %s", form_name, target)
        else:
            run.skipped.append(form_name)

    _print_run(run, out_dir)
    return run


def _print_run(run: FormRun, out_dir: Path) -> None:
    if run.generated:
        print(f"\nDraft PDF forms written to {out_dir}:")
        for form_name, path in run.generated.items():
            print(f"  {form_name:<12} {Path(path).name}")
    if run.skipped:
        print(f"\nNo data to fill for: {', '.join(run.skipped)}")
    if run.missing_templates:
        print("\nTemplates not found:")
        for form_name, message in run.missing_templates.items():
            print(f"  {form_name}: {message}")


FIELD_TYPES = {"/Tx": "Text", "/Btn": "Checkbox", "/Ch": "Choice"}


def list_fields(pdf_path: str) -> List[Tuple[str, str, str]]:
    """
    List the AcroForm fields of a fillable PDF as (name, type, value).

    Used to check field names in ``field_mappings`` against a new form
    revision. XFA-only PDFs return an empty list.
    """
    fields = PdfReader(pdf_path).get_fields() or {}
    rows = []
    for name in sorted(fields):
        field_obj = fields[name]
        raw_type = str(field_obj.get("/FT", "?"))
        value = field_obj.get("/V")
        rows.append((name, FIELD_TYPES.get(raw_type, raw_type), str(value)[:40] if value else ""))
    return rows
