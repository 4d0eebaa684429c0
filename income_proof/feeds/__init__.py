"""Transaction feeds supplying inbound payments."""

from income_proof.feeds.base import TransactionFeed
from income_proof.feeds.client import FeedClient
from income_proof.feeds.memory import InMemoryTransactionFeed
from income_proof.feeds.synthetic import SyntheticTransactionFeed

__all__ = [
    "FeedClient",
    "InMemoryTransactionFeed",
    "SyntheticTransactionFeed",
    "TransactionFeed",
]
