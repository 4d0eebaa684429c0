"""Income aggregation and payment frequency classification."""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from income_proof.exceptions import ValidationError
from income_proof.models import IncomeProfile, PaymentFrequency, Transaction

logger = logging.getLogger(__name__)

# Lower bounds on payments per month, checked top to bottom.
FREQUENCY_THRESHOLDS: list[tuple[float, PaymentFrequency]] = [
    (4.0, PaymentFrequency.WEEKLY),
    (2.0, PaymentFrequency.BI_WEEKLY),
    (0.8, PaymentFrequency.MONTHLY),
]


def classify_frequency(payments_per_month: float) -> PaymentFrequency:
    """Map an average payment rate to a frequency class.

    Parameters
    ----------
    payments_per_month : float
        Payment count divided by distinct calendar months.

    Returns
    -------
    PaymentFrequency
        First class whose lower bound is met, ``IRREGULAR`` otherwise.
    """
    for lower_bound, frequency in FREQUENCY_THRESHOLDS:
        if payments_per_month >= lower_bound:
            return frequency
    return PaymentFrequency.IRREGULAR


def month_keys(transactions: Iterable[Transaction]) -> set[tuple[int, int]]:
    """Distinct (year, month) pairs present in the transactions."""
    return {tx.month_key for tx in transactions}


def monthly_totals(transactions: Iterable[Transaction]) -> dict[tuple[int, int], Decimal]:
    """Income per calendar month, in chronological order."""
    totals: dict[tuple[int, int], Decimal] = {}
    for tx in transactions:
        totals[tx.month_key] = totals.get(tx.month_key, Decimal("0")) + tx.amount
    return dict(sorted(totals.items()))


def ensure_unique_ids(transactions: Iterable[Transaction]) -> None:
    """Raise ValidationError if a feed repeats a transaction id."""
    seen: set[str] = set()
    for tx in transactions:
        if tx.tx_id in seen:
            raise ValidationError(f"Duplicate transaction id {tx.tx_id}")
        seen.add(tx.tx_id)


def aggregate(transactions: Sequence[Transaction], now: datetime | None = None) -> IncomeProfile:
    """Derive an income profile from a set of inbound payments.

    Total over its input: an empty sequence yields a zero profile
    classified as irregular.

    Parameters
    ----------
    transactions : Sequence[Transaction]
        Payments in any order.
    now : datetime | None
        Timestamp for ``last_updated`` (default: current time).

    Returns
    -------
    IncomeProfile
        Profile with transactions ordered newest first.
    """
    txs = list(transactions)
    months = len(month_keys(txs))
    total = sum((tx.amount for tx in txs), Decimal("0"))

    if months > 0:
        average = total / months
        payments_per_month = len(txs) / months
    else:
        average = Decimal("0")
        payments_per_month = 0.0

    frequency = classify_frequency(payments_per_month)
    employers = {tx.from_address for tx in txs}

    # sorted() is stable with reverse=True, so equal timestamps keep input order
    ordered = tuple(sorted(txs, key=lambda tx: tx.timestamp, reverse=True))

    logger.debug(
        "Aggregated %d payments over %d months from %d payers: %s",
        len(txs),
        months,
        len(employers),
        frequency.value,
    )

    return IncomeProfile(
        total_income=total,
        average_monthly_income=average,
        payment_count=len(txs),
        employer_count=len(employers),
        payment_frequency=frequency,
        transactions=ordered,
        last_updated=now or datetime.now(),
        distinct_months=months,
    )
