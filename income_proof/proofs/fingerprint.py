"""Verification hash derivation for proof records."""

import hashlib
import json
from datetime import datetime
from decimal import Decimal

from income_proof.models.enums import PaymentFrequency

HASH_PREFIX = "0x"


def _canonical_decimal(value: Decimal) -> str:
    # 3000, 3000.0 and 3000.00 must fingerprint identically
    return format(Decimal(value).normalize(), "f")


def canonical_payload(
    token_id: int,
    wallet_address: str,
    average_monthly_income: Decimal,
    payment_frequency: PaymentFrequency | str,
    employer_count: int,
    verification_timestamp: datetime,
) -> str:
    """Deterministic JSON encoding of the fingerprinted fields."""
    data = {
        "token_id": int(token_id),
        "wallet_address": wallet_address,
        "average_monthly_income": _canonical_decimal(average_monthly_income),
        "payment_frequency": PaymentFrequency(payment_frequency).value,
        "employer_count": int(employer_count),
        "verification_timestamp": verification_timestamp.isoformat(),
    }
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def compute_verification_hash(
    token_id: int,
    wallet_address: str,
    average_monthly_income: Decimal,
    payment_frequency: PaymentFrequency | str,
    employer_count: int,
    verification_timestamp: datetime,
) -> str:
    """SHA-256 fingerprint of a proof record, as ``0x`` + 64 hex digits."""
    payload = canonical_payload(
        token_id,
        wallet_address,
        average_monthly_income,
        payment_frequency,
        employer_count,
        verification_timestamp,
    )
    return HASH_PREFIX + hashlib.sha256(payload.encode("utf-8")).hexdigest()
