"""Income tax slab calculation package."""

from fin_assistant.tax.calculator import (
    TaxCalculator,
    compute_tax,
    describe_slab,
    select_age_category,
)
from fin_assistant.tax.slabs import load_tax_configuration, parse_tax_configuration

__all__ = [
    "TaxCalculator",
    "compute_tax",
    "describe_slab",
    "load_tax_configuration",
    "parse_tax_configuration",
    "select_age_category",
]
