"""Domain models for income analysis and proof issuance."""

from income_proof.models.base import Event, Notification
from income_proof.models.enums import (
    JurisdictionStatus,
    NotificationKind,
    PaymentFrequency,
    QueryKind,
)
from income_proof.models.income import IncomeProfile
from income_proof.models.proof import ProofRecord, VerificationResult
from income_proof.models.transaction import Transaction
from income_proof.models.wallet import Jurisdiction, WalletContext

__all__ = [
    "Event",
    "IncomeProfile",
    "Jurisdiction",
    "JurisdictionStatus",
    "Notification",
    "NotificationKind",
    "PaymentFrequency",
    "ProofRecord",
    "QueryKind",
    "Transaction",
    "VerificationResult",
    "WalletContext",
]
