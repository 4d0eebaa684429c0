"""Income profile derived from a transaction set."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from income_proof.models.enums import PaymentFrequency
from income_proof.models.transaction import Transaction


@dataclass(frozen=True)
class IncomeProfile:
    """Snapshot of income metrics for one scan of a wallet."""

    total_income: Decimal
    average_monthly_income: Decimal
    payment_count: int
    employer_count: int
    payment_frequency: PaymentFrequency
    transactions: tuple[Transaction, ...]  # newest first
    last_updated: datetime
    distinct_months: int = 0
