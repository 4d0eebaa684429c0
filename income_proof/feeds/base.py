"""Transaction feed interface."""

from abc import ABC, abstractmethod

from income_proof.models import Transaction


class TransactionFeed(ABC):
    """Source of inbound payments for a wallet.

    Implementations may block (network calls); callers that need a
    timeout wrap them in :class:`income_proof.feeds.client.FeedClient`.
    """

    @abstractmethod
    def fetch(self, wallet_address: str) -> list[Transaction]:
        """Return the payments received by ``wallet_address``.

        Raises
        ------
        FeedUnavailableError
            If the feed cannot be reached.
        """
