"""Tests for transaction feeds."""

import asyncio
import time
from datetime import datetime

import pytest

from income_proof.analysis import aggregate, month_keys
from income_proof.config import FeedConfig
from income_proof.exceptions import FeedUnavailableError
from income_proof.feeds import FeedClient, InMemoryTransactionFeed, SyntheticTransactionFeed
from income_proof.feeds.synthetic import EMPLOYER_NAMES, MEMOS, _shift_months
from income_proof.models import PaymentFrequency, Transaction

REFERENCE = datetime(2026, 6, 15)
FAST = FeedConfig(timeout_seconds=1.0, retries=2, backoff_seconds=0.0)


class FlakyFeed(InMemoryTransactionFeed):
    """Feed that fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, transactions=()) -> None:
        super().__init__(transactions)
        self.failures = failures

    def fetch(self, wallet_address: str) -> list[Transaction]:
        if self.fetch_count < self.failures:
            self.fetch_count += 1
            raise FeedUnavailableError("temporarily down", wallet_address)
        return super().fetch(wallet_address)


class ConnectionDroppingFeed(InMemoryTransactionFeed):
    """Feed whose transport fails a fixed number of times."""

    def __init__(self, failures: int, transactions=()) -> None:
        super().__init__(transactions)
        self.failures = failures

    def fetch(self, wallet_address: str) -> list[Transaction]:
        if self.fetch_count < self.failures:
            self.fetch_count += 1
            raise ConnectionResetError("connection reset by peer")
        return super().fetch(wallet_address)


class SlowFeed(InMemoryTransactionFeed):
    """Feed that never answers within the timeout."""

    def fetch(self, wallet_address: str) -> list[Transaction]:
        self.fetch_count += 1
        time.sleep(0.2)
        return []


class TestSyntheticTransactionFeed:
    """Tests for SyntheticTransactionFeed."""

    def test_reproducible_with_seed(self, seed: int, wallet_address: str) -> None:
        feed1 = SyntheticTransactionFeed(seed=seed, reference_date=REFERENCE)
        feed2 = SyntheticTransactionFeed(seed=seed, reference_date=REFERENCE)

        assert feed1.fetch(wallet_address) == feed2.fetch(wallet_address)

    def test_wallet_address_case_does_not_matter(self, seed: int, wallet_address: str) -> None:
        feed = SyntheticTransactionFeed(seed=seed, reference_date=REFERENCE)
        upper = [tx.amount for tx in feed.fetch(wallet_address.upper())]
        lower = [tx.amount for tx in feed.fetch(wallet_address.lower())]
        assert upper == lower

    def test_wallets_differ(self, seed: int) -> None:
        feed = SyntheticTransactionFeed(seed=seed, reference_date=REFERENCE)
        assert feed.fetch("0xaaa") != feed.fetch("0xbbb")

    def test_shape(self, seed: int, wallet_address: str) -> None:
        feed = SyntheticTransactionFeed(seed=seed, reference_date=REFERENCE)
        txs = feed.fetch(wallet_address)

        assert month_keys(txs) == {(2026, m) for m in range(1, 7)}
        assert 12 <= len(txs) <= 24
        assert len({tx.tx_id for tx in txs}) == len(txs)
        assert [tx.timestamp for tx in txs] == sorted((tx.timestamp for tx in txs), reverse=True)
        for tx in txs:
            assert tx.to_address == wallet_address
            assert 1500 <= tx.amount <= 6499
            assert tx.memo in MEMOS
            assert tx.tx_hash.startswith("0x") and len(tx.tx_hash) == 66

    def test_payers_come_from_directory(self, seed: int, wallet_address: str) -> None:
        feed = SyntheticTransactionFeed(seed=seed, reference_date=REFERENCE)
        directory = feed.employer_directory(wallet_address)

        assert sorted(directory.values()) == sorted(EMPLOYER_NAMES)
        assert {tx.from_address for tx in feed.fetch(wallet_address)} <= set(directory)

    def test_aggregates_without_errors(self, seed: int, wallet_address: str) -> None:
        txs = SyntheticTransactionFeed(seed=seed, reference_date=REFERENCE).fetch(wallet_address)
        profile = aggregate(txs)
        assert profile.payment_frequency in (PaymentFrequency.BI_WEEKLY, PaymentFrequency.WEEKLY)
        assert 1 <= profile.employer_count <= 4

    @pytest.mark.parametrize(
        "months_back,expected",
        [(0, (2026, 6)), (5, (2026, 1)), (6, (2025, 12)), (18, (2024, 12))],
    )
    def test_shift_months(self, months_back: int, expected: tuple[int, int]) -> None:
        assert _shift_months(REFERENCE, months_back) == expected


class TestInMemoryTransactionFeed:
    """Tests for InMemoryTransactionFeed."""

    def test_lookup_by_payee(self, six_month_feed: list[Transaction], wallet_address: str) -> None:
        feed = InMemoryTransactionFeed(six_month_feed)
        assert len(feed.fetch(wallet_address.lower())) == 10
        assert feed.fetch("0xsomeoneelse") == []
        assert feed.fetch_count == 2

    def test_unavailable(self, wallet_address: str) -> None:
        feed = InMemoryTransactionFeed(available=False)
        with pytest.raises(FeedUnavailableError):
            feed.fetch(wallet_address)


class TestFeedClient:
    """Tests for FeedClient retry and timeout handling."""

    def test_success(self, six_month_feed: list[Transaction], wallet_address: str) -> None:
        client = FeedClient(InMemoryTransactionFeed(six_month_feed), FAST)
        txs = asyncio.run(client.fetch(wallet_address))
        assert len(txs) == 10

    def test_retries_until_success(self, six_month_feed: list[Transaction], wallet_address: str) -> None:
        feed = FlakyFeed(failures=2, transactions=six_month_feed)
        txs = asyncio.run(FeedClient(feed, FAST).fetch(wallet_address))
        assert len(txs) == 10
        assert feed.fetch_count == 3

    def test_gives_up_after_retries(self, wallet_address: str) -> None:
        feed = InMemoryTransactionFeed(available=False)
        with pytest.raises(FeedUnavailableError) as exc_info:
            asyncio.run(FeedClient(feed, FAST).fetch(wallet_address))

        assert feed.fetch_count == 3
        assert exc_info.value.wallet_address == wallet_address
        assert "after 3 attempts" in str(exc_info.value)

    def test_network_errors_are_retried(
        self, six_month_feed: list[Transaction], wallet_address: str
    ) -> None:
        feed = ConnectionDroppingFeed(failures=1, transactions=six_month_feed)
        txs = asyncio.run(FeedClient(feed, FAST).fetch(wallet_address))
        assert len(txs) == 10
        assert feed.fetch_count == 2

    def test_persistent_network_error_becomes_feed_unavailable(self, wallet_address: str) -> None:
        feed = ConnectionDroppingFeed(failures=10)
        with pytest.raises(FeedUnavailableError) as exc_info:
            asyncio.run(FeedClient(feed, FAST).fetch(wallet_address))

        assert feed.fetch_count == 3
        assert isinstance(exc_info.value.__cause__, ConnectionResetError)

    def test_timeout(self, wallet_address: str) -> None:
        feed = SlowFeed()
        config = FeedConfig(timeout_seconds=0.05, retries=1, backoff_seconds=0.0)
        with pytest.raises(FeedUnavailableError):
            asyncio.run(FeedClient(feed, config).fetch(wallet_address))
        assert feed.fetch_count == 2
