"""Pytest configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal
from itertools import count

import pytest

from income_proof.analysis import aggregate
from income_proof.models import IncomeProfile, Transaction, WalletContext
from income_proof.proofs import ProofIssuer
from income_proof.store import ProofRegistry

EMPLOYER_A = "0x1111111111111111111111111111111111111111"
EMPLOYER_B = "0x2222222222222222222222222222222222222222"
EMPLOYER_C = "0x3333333333333333333333333333333333333333"


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def wallet_address() -> str:
    """Sample wallet address."""
    return "0x742d35Cc6634C0532925a3b844Bc9e7595f1E123"


@pytest.fixture
def wallet(wallet_address: str) -> WalletContext:
    """Connected wallet context."""
    return WalletContext(address=wallet_address, chain_id=267, network_name="Neura Testnet")


@pytest.fixture
def make_tx(wallet_address: str) -> Callable[..., Transaction]:
    """Factory for transactions with sequential ids."""
    ids = count(1)

    def _make(
        timestamp: datetime,
        amount: str | Decimal = "1000.00",
        from_address: str = EMPLOYER_A,
        tx_id: str | None = None,
    ) -> Transaction:
        n = next(ids)
        return Transaction(
            tx_id=tx_id or f"tx-{n:03d}",
            from_address=from_address,
            to_address=wallet_address,
            amount=Decimal(str(amount)),
            timestamp=timestamp,
            memo="Monthly salary payment",
            tx_hash=f"0x{n:064x}",
        )

    return _make


@pytest.fixture
def six_month_feed(make_tx: Callable[..., Transaction]) -> list[Transaction]:
    """10 payments across 6 distinct months from 3 payers."""
    plan = [
        (datetime(2026, 1, 5), "3000.00", EMPLOYER_A),
        (datetime(2026, 1, 20), "1500.00", EMPLOYER_B),
        (datetime(2026, 2, 5), "3000.00", EMPLOYER_A),
        (datetime(2026, 3, 5), "3000.00", EMPLOYER_A),
        (datetime(2026, 3, 18), "750.50", EMPLOYER_C),
        (datetime(2026, 4, 5), "3000.00", EMPLOYER_A),
        (datetime(2026, 5, 5), "3000.00", EMPLOYER_A),
        (datetime(2026, 5, 25), "1500.00", EMPLOYER_B),
        (datetime(2026, 6, 5), "3000.00", EMPLOYER_A),
        (datetime(2026, 6, 28), "250.25", EMPLOYER_C),
    ]
    return [make_tx(ts, amount, payer) for ts, amount, payer in plan]


@pytest.fixture
def profile(six_month_feed: list[Transaction]) -> IncomeProfile:
    """Profile of the six month feed."""
    return aggregate(six_month_feed, now=datetime(2026, 7, 1))


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Clock that advances one second per call."""
    ticks = count()
    start = datetime(2026, 7, 1, 12, 0, 0)
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def registry() -> ProofRegistry:
    """Create a fresh registry for each test."""
    return ProofRegistry()


@pytest.fixture
def issuer(registry: ProofRegistry, clock: Callable[[], datetime]) -> ProofIssuer:
    """Issuer bound to the test registry and clock."""
    return ProofIssuer(registry, clock=clock)
