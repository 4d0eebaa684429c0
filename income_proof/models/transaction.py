"""Inbound payment model."""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from income_proof.exceptions import ValidationError


@dataclass(frozen=True)
class Transaction:
    """Single inbound payment to a wallet.

    Timestamps are stored naive in UTC: an aware ``timestamp`` is
    converted on construction so feeds mixing both forms stay comparable.
    """

    tx_id: str
    from_address: str  # payer
    to_address: str  # payee
    amount: Decimal
    timestamp: datetime
    memo: str = ""
    tx_hash: str = ""

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValidationError(f"Transaction {self.tx_id} has negative amount {self.amount}")
        if self.timestamp.tzinfo is not None:
            naive_utc = self.timestamp.astimezone(timezone.utc).replace(tzinfo=None)
            object.__setattr__(self, "timestamp", naive_utc)

    @property
    def month_key(self) -> tuple[int, int]:
        """Calendar month bucket of the payment."""
        return (self.timestamp.year, self.timestamp.month)
