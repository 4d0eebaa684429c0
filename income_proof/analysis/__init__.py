"""Income analysis over transaction feeds."""

from income_proof.analysis.aggregator import (
    aggregate,
    classify_frequency,
    ensure_unique_ids,
    month_keys,
    monthly_totals,
)

__all__ = [
    "aggregate",
    "classify_frequency",
    "ensure_unique_ids",
    "month_keys",
    "monthly_totals",
]
