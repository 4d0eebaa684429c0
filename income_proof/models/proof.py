"""Proof record and verification result models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from income_proof.models.enums import PaymentFrequency


@dataclass(frozen=True)
class ProofRecord:
    """Non-transferable attestation of a wallet's income at issuance time.

    All fields are fixed at issuance. Revocation does not mutate a record;
    the registry stores a copy with ``is_valid=False`` instead, so the
    fingerprint (which excludes ``is_valid``) stays intact.
    """

    token_id: int
    wallet_address: str
    verification_timestamp: datetime
    average_monthly_income: Decimal
    payment_frequency: PaymentFrequency
    employer_count: int
    verification_hash: str
    is_valid: bool = True
    token_uri: str = ""

    def compute_hash(self) -> str:
        """Recompute the fingerprint from the record's other fields."""
        from income_proof.proofs.fingerprint import compute_verification_hash

        return compute_verification_hash(
            token_id=self.token_id,
            wallet_address=self.wallet_address,
            average_monthly_income=self.average_monthly_income,
            payment_frequency=self.payment_frequency,
            employer_count=self.employer_count,
            verification_timestamp=self.verification_timestamp,
        )

    def is_intact(self) -> bool:
        """Check the stored fingerprint against the record's fields."""
        return self.compute_hash() == self.verification_hash


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a verification query.

    ``found`` tells whether a record exists; ``is_valid`` tells whether the
    found record is unrevoked and its fingerprint matches.
    """

    found: bool
    record: ProofRecord | None = None
    is_valid: bool = False
    error: str | None = None

    @classmethod
    def not_found(cls, error: str | None = None) -> "VerificationResult":
        return cls(found=False, record=None, is_valid=False, error=error)

    @classmethod
    def for_record(cls, record: ProofRecord) -> "VerificationResult":
        if not record.is_intact():
            return cls(found=True, record=record, is_valid=False, error="Fingerprint mismatch")
        if not record.is_valid:
            return cls(found=True, record=record, is_valid=False, error="Proof has been revoked")
        return cls(found=True, record=record, is_valid=True)
