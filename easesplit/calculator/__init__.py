"""Bill-splitting computation engine."""

from easesplit.calculator.numeric import to_safe_number
from easesplit.calculator.split_calculator import (
    SplitCalculator,
    compute_grand_total,
    compute_item_base,
    compute_item_tax,
    compute_item_total,
    compute_per_person_totals,
)

__all__ = [
    "SplitCalculator",
    "compute_grand_total",
    "compute_item_base",
    "compute_item_tax",
    "compute_item_total",
    "compute_per_person_totals",
    "to_safe_number",
]
