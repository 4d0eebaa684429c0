"""Asynchronous feed access with timeout and retry."""

import asyncio
import logging

from income_proof.config import FeedConfig
from income_proof.exceptions import FeedUnavailableError
from income_proof.feeds.base import TransactionFeed
from income_proof.models import Transaction

logger = logging.getLogger(__name__)


class FeedClient:
    """Call a blocking feed from async code with a bounded retry policy.

    Each attempt runs ``feed.fetch`` in a worker thread and is cut off
    after ``config.timeout_seconds``. Timeouts, ``FeedUnavailableError``
    and ``OSError`` count as failed attempts and are retried
    ``config.retries`` times with exponential backoff. Cancellation of
    the calling task is never retried.
    """

    def __init__(self, feed: TransactionFeed, config: FeedConfig | None = None) -> None:
        self.feed = feed
        self.config = config or FeedConfig()

    async def fetch(self, wallet_address: str) -> list[Transaction]:
        """Fetch a wallet's payments.

        Raises
        ------
        FeedUnavailableError
            If every attempt fails or times out.
        """
        attempts = self.config.retries + 1
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(
                    asyncio.to_thread(self.feed.fetch, wallet_address),
                    timeout=self.config.timeout_seconds,
                )
            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning(
                    "Feed fetch for %s timed out after %.1fs (attempt %d/%d)",
                    wallet_address,
                    self.config.timeout_seconds,
                    attempt,
                    attempts,
                )
            except (FeedUnavailableError, OSError) as e:
                last_error = e
                logger.warning(
                    "Feed unavailable for %s: %s (attempt %d/%d)",
                    wallet_address,
                    e,
                    attempt,
                    attempts,
                )

            if attempt < attempts:
                await asyncio.sleep(self.config.backoff_seconds * 2 ** (attempt - 1))

        raise FeedUnavailableError(
            f"Transaction feed unavailable for {wallet_address} after {attempts} attempts",
            wallet_address,
        ) from last_error
