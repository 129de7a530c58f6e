"""AcroForm field mappings for the charitable contribution forms.

A mapper turns a TaxFormData bundle into {pdf field name: value}. Mappers
register themselves with the blank template they fill; templates live in
pdf_templates/<year>/.
"""

from typing import Callable, Dict, List, NamedTuple

from ..models import TaxFormData

MapperFn = Callable[[TaxFormData], Dict[str, str]]


class FormMapper(NamedTuple):
    mapper: MapperFn
    template_file: str


_MAPPERS: Dict[str, FormMapper] = {}


def register(form_name: str, template_file: str):
    """Register the decorated function as the mapper for ``form_name``."""
    def decorator(fn: MapperFn) -> MapperFn:
        _MAPPERS[form_name] = FormMapper(fn, template_file)
        return fn
    return decorator


def get_mapper(form_name: str) -> FormMapper:
    """
    Look up a registered form.

    Raises:
        ValueError: if no mapper is registered under ``form_name``.
    """
    try:
        return _MAPPERS[form_name]
    except KeyError:
        raise ValueError(
            f"No field mapping for form {form_name!r} (known: {', '.join(_MAPPERS)})"
        ) from None


def available_forms() -> List[str]:
    return list(_MAPPERS)


def dollars(cents: int) -> str:
    """Whole dollars, as the IRS forms expect."""
    return str(round(cents / 100))


# Mapper modules register on import
from . import schedule_a  # noqa: E402, F401
from . import f8283  # noqa: E402, F401
