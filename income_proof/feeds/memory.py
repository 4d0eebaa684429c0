"""In-memory transaction feed."""

from collections.abc import Iterable

from income_proof.exceptions import FeedUnavailableError
from income_proof.feeds.base import TransactionFeed
from income_proof.models import Transaction


class InMemoryTransactionFeed(TransactionFeed):
    """Serve pre-loaded transactions keyed by payee address.

    Addresses are matched case-insensitively. Setting ``available`` to
    False makes every fetch fail, which simulates an outage.
    """

    def __init__(self, transactions: Iterable[Transaction] = (), available: bool = True) -> None:
        self.available = available
        self.fetch_count = 0
        self._by_wallet: dict[str, list[Transaction]] = {}
        for tx in transactions:
            self.add(tx)

    def add(self, transaction: Transaction) -> None:
        """Add a transaction to its payee's feed."""
        self._by_wallet.setdefault(transaction.to_address.lower(), []).append(transaction)

    def fetch(self, wallet_address: str) -> list[Transaction]:
        self.fetch_count += 1
        if not self.available:
            raise FeedUnavailableError("Transaction feed is unavailable", wallet_address)
        return list(self._by_wallet.get(wallet_address.strip().lower(), []))
