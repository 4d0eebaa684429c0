"""Synthetic payroll feed for demos and local development."""

import random
from datetime import datetime
from decimal import Decimal

from faker import Faker

from income_proof.feeds.base import TransactionFeed
from income_proof.models import Transaction

EMPLOYER_NAMES = [
    "NeuraTech Labs",
    "DeFi Protocol Inc",
    "Web3 Ventures",
    "Crypto Consulting",
]

MEMOS = [
    "Monthly salary payment",
    "Project milestone completion",
    "Freelance development work",
    "Smart contract audit",
    "UI/UX design services",
    "Technical consultation",
    "Bug bounty reward",
    "Protocol integration work",
]


def _shift_months(moment: datetime, months_back: int) -> tuple[int, int]:
    """(year, month) that lies ``months_back`` calendar months before ``moment``."""
    index = moment.year * 12 + (moment.month - 1) - months_back
    return index // 12, index % 12 + 1


class SyntheticTransactionFeed(TransactionFeed):
    """Generate plausible payroll history for any wallet.

    Each wallet receives ``months`` months of history ending at the
    reference date, with 2-4 payments per month from a small set of
    employers. Output is reproducible for a fixed seed, wallet and
    reference date.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    months : int
        Months of history to generate (default 6).
    reference_date : datetime | None
        Most recent month of history (default: now).
    locale : str
        Faker locale (default ``en_US``).
    """

    MIN_PAYMENTS_PER_MONTH = 2
    MAX_PAYMENTS_PER_MONTH = 4
    MIN_AMOUNT = 1500
    MAX_AMOUNT = 6499

    def __init__(
        self,
        seed: int | None = None,
        months: int = 6,
        reference_date: datetime | None = None,
        locale: str = "en_US",
    ) -> None:
        self.seed = seed
        self.months = months
        self.reference_date = reference_date
        self.fake = Faker(locale)

    def fetch(self, wallet_address: str) -> list[Transaction]:
        """Generate the payment history of a wallet, newest first."""
        rng = random.Random(f"{self.seed}:{wallet_address.lower()}" if self.seed is not None else None)
        self.fake.seed_instance(rng.getrandbits(32))

        reference = self.reference_date or datetime.now()
        employers = [self._hex_address() for _ in EMPLOYER_NAMES]

        transactions = []
        for month in range(self.months):
            year, month_number = _shift_months(reference, month)
            payments = rng.randint(self.MIN_PAYMENTS_PER_MONTH, self.MAX_PAYMENTS_PER_MONTH)

            for i in range(payments):
                timestamp = datetime(
                    year,
                    month_number,
                    rng.randint(1, 28),
                    rng.randint(8, 18),
                    rng.randint(0, 59),
                    rng.randint(0, 59),
                )
                transactions.append(
                    Transaction(
                        tx_id=f"tx-{month}-{i}",
                        from_address=rng.choice(employers),
                        to_address=wallet_address,
                        amount=Decimal(rng.randint(self.MIN_AMOUNT, self.MAX_AMOUNT)),
                        timestamp=timestamp,
                        memo=rng.choice(MEMOS),
                        tx_hash="0x" + self.fake.hexify(text="^" * 64),
                    )
                )

        return sorted(transactions, key=lambda tx: tx.timestamp, reverse=True)

    def employer_directory(self, wallet_address: str) -> dict[str, str]:
        """Map the generated employer addresses of a wallet to display names."""
        rng = random.Random(f"{self.seed}:{wallet_address.lower()}" if self.seed is not None else None)
        self.fake.seed_instance(rng.getrandbits(32))
        return {self._hex_address(): name for name in EMPLOYER_NAMES}

    def _hex_address(self) -> str:
        return "0x" + self.fake.hexify(text="^" * 40)
