"""Proof issuance with jurisdiction gating."""

import logging
from collections.abc import Callable
from datetime import datetime

from income_proof.exceptions import JurisdictionBlockedError, ValidationError
from income_proof.models import IncomeProfile, ProofRecord, WalletContext
from income_proof.proofs.fingerprint import compute_verification_hash
from income_proof.proofs.jurisdictions import JurisdictionTable
from income_proof.store.registry import ProofRegistry

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URI_PREFIX = "ipfs://QmNeuraProof"


class ProofIssuer:
    """Turn income profiles into registered proof records."""

    def __init__(
        self,
        registry: ProofRegistry,
        jurisdictions: JurisdictionTable | None = None,
        token_uri_prefix: str = DEFAULT_TOKEN_URI_PREFIX,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the issuer.

        Parameters
        ----------
        registry : ProofRegistry
            Registry that receives issued records.
        jurisdictions : JurisdictionTable | None
            Policy table (default: the standard table).
        token_uri_prefix : str
            Prefix of the off-record metadata reference.
        clock : Callable[[], datetime]
            Source of issuance timestamps.
        """
        self.registry = registry
        self.jurisdictions = jurisdictions or JurisdictionTable.default()
        self.token_uri_prefix = token_uri_prefix
        self.clock = clock

    def build(self, profile: IncomeProfile, wallet_address: str, token_id: int) -> ProofRecord:
        """Create a proof record without registering it."""
        timestamp = self.clock()
        verification_hash = compute_verification_hash(
            token_id=token_id,
            wallet_address=wallet_address,
            average_monthly_income=profile.average_monthly_income,
            payment_frequency=profile.payment_frequency,
            employer_count=profile.employer_count,
            verification_timestamp=timestamp,
        )
        return ProofRecord(
            token_id=token_id,
            wallet_address=wallet_address,
            verification_timestamp=timestamp,
            average_monthly_income=profile.average_monthly_income,
            payment_frequency=profile.payment_frequency,
            employer_count=profile.employer_count,
            verification_hash=verification_hash,
            is_valid=True,
            token_uri=f"{self.token_uri_prefix}{token_id}",
        )

    def issue(
        self,
        profile: IncomeProfile | None,
        wallet: WalletContext | str | None,
        jurisdiction: str,
        next_token_id: int | None = None,
    ) -> ProofRecord:
        """Issue and register a proof for a scanned wallet.

        Every call mints a new record with a new token id and timestamp.

        Parameters
        ----------
        profile : IncomeProfile | None
            Result of a completed scan.
        wallet : WalletContext | str | None
            Connected wallet or its address.
        jurisdiction : str
            Jurisdiction code of the holder.
        next_token_id : int | None
            Token id to use; allocated by the registry when omitted.

        Returns
        -------
        ProofRecord
            The registered record.

        Raises
        ------
        ValidationError
            If no profile or no connected wallet is supplied.
        JurisdictionBlockedError
            If the jurisdiction is blocked. Nothing is registered.
        """
        if profile is None:
            raise ValidationError("An income scan is required before issuing a proof")

        address = wallet.address if isinstance(wallet, WalletContext) else wallet
        if not address or not address.strip():
            raise ValidationError("A connected wallet is required to issue a proof")
        address = address.strip()

        if self.jurisdictions.is_blocked(jurisdiction):
            logger.warning(
                "Issuance for %s rejected: jurisdiction %s blocked",
                address,
                jurisdiction,
                extra={"wallet_address": address, "jurisdiction": jurisdiction.strip().upper()},
            )
            raise JurisdictionBlockedError(jurisdiction.strip().upper())

        if next_token_id is None:
            record = self.registry.append_next(lambda tid: self.build(profile, address, tid))
        else:
            record = self.build(profile, address, next_token_id)
            self.registry.append(record)

        logger.info(
            "Issued proof %d for %s: %s income %s/month from %d payers",
            record.token_id,
            address,
            record.payment_frequency.value,
            record.average_monthly_income,
            record.employer_count,
            extra={"token_id": record.token_id, "wallet_address": address},
        )
        return record
