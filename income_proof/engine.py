"""Income proof engine: scan, mint, revoke and verify entry points."""

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from income_proof.analysis import aggregate, ensure_unique_ids
from income_proof.config import IncomeProofConfig
from income_proof.exceptions import SinkError
from income_proof.feeds import FeedClient, TransactionFeed
from income_proof.models import (
    Event,
    IncomeProfile,
    ProofRecord,
    QueryKind,
    VerificationResult,
    WalletContext,
)
from income_proof.proofs import JurisdictionTable, ProofIssuer
from income_proof.sinks.serialization import dataclass_to_dict
from income_proof.store import ProofRegistry
from income_proof.verification import VerificationResolver

logger = logging.getLogger(__name__)

EVENT_SOURCE = "income-proof.engine"


class IncomeProofEngine:
    """Coordinate feed retrieval, aggregation, issuance and verification.

    The engine holds no session state: wallets, profiles and jurisdictions
    are passed to each call. The registry is the only shared state and is
    injected by the caller.
    """

    def __init__(
        self,
        registry: ProofRegistry,
        feed_client: FeedClient,
        issuer: ProofIssuer | None = None,
        resolver: VerificationResolver | None = None,
        sinks: Iterable[Any] = (),
    ) -> None:
        self.registry = registry
        self.feed_client = feed_client
        self.issuer = issuer or ProofIssuer(registry)
        self.resolver = resolver or VerificationResolver(registry)
        self.sinks = list(sinks)

    @classmethod
    def from_config(
        cls,
        config: IncomeProofConfig,
        feed: TransactionFeed,
        registry: ProofRegistry | None = None,
        sinks: Iterable[Any] = (),
    ) -> "IncomeProofEngine":
        """Wire an engine from configuration.

        A Kafka sink is added when bootstrap servers are configured.
        """
        registry = registry if registry is not None else ProofRegistry()
        jurisdictions = JurisdictionTable.default(config.registry.blocked_jurisdictions)
        issuer = ProofIssuer(
            registry,
            jurisdictions=jurisdictions,
            token_uri_prefix=config.registry.token_uri_prefix,
        )

        all_sinks = list(sinks)
        if config.kafka.bootstrap_servers:
            from income_proof.sinks.kafka import KafkaSink

            all_sinks.append(KafkaSink(config.kafka))

        return cls(
            registry=registry,
            feed_client=FeedClient(feed, config.feed),
            issuer=issuer,
            resolver=VerificationResolver(registry),
            sinks=all_sinks,
        )

    async def scan(self, wallet: WalletContext) -> IncomeProfile:
        """Fetch a wallet's payments and aggregate them.

        Raises
        ------
        FeedUnavailableError
            If the feed cannot be reached within the retry policy.
        ValidationError
            If the feed repeats a transaction id.
        """
        logger.info("Scanning income for %s", wallet.address, extra={"wallet_address": wallet.address})
        transactions = await self.feed_client.fetch(wallet.address)
        ensure_unique_ids(transactions)
        profile = aggregate(transactions)
        logger.info(
            "Scan of %s: %d payments, %s/month average, %s",
            wallet.address,
            profile.payment_count,
            profile.average_monthly_income,
            profile.payment_frequency.value,
        )
        return profile

    def mint(
        self,
        profile: IncomeProfile | None,
        wallet: WalletContext,
        jurisdiction: str,
    ) -> ProofRecord:
        """Issue a proof and publish a ``proof.issued`` event."""
        record = self.issuer.issue(profile, wallet, jurisdiction)
        self._publish(
            "proof.issued",
            record,
            metadata={"jurisdiction": jurisdiction.strip().upper(), "chain_id": wallet.chain_id},
        )
        return record

    def revoke(self, token_id: int, reason: str = "") -> ProofRecord:
        """Revoke a proof and publish a ``proof.revoked`` event."""
        record = self.registry.revoke(token_id, reason)
        self._publish("proof.revoked", record, metadata={"reason": reason})
        return record

    def verify(self, kind: QueryKind | str, value: str) -> VerificationResult:
        return self.resolver.verify(kind, value)

    def history(self, wallet: WalletContext | str) -> list[ProofRecord]:
        """Proofs issued to a wallet, oldest first."""
        address = wallet.address if isinstance(wallet, WalletContext) else wallet
        return self.registry.get_by_wallet(address)

    def close(self) -> None:
        for sink in self.sinks:
            sink.close()

    def _publish(self, event_type: str, record: ProofRecord, metadata: dict | None = None) -> None:
        # The record is already registered; a failing sink must not undo issuance.
        if not self.sinks:
            return

        event = Event(
            event_id=uuid.uuid4().hex,
            event_type=event_type,
            event_time=datetime.now(),
            source=EVENT_SOURCE,
            subject=str(record.token_id),
            data=dataclass_to_dict(record),
            metadata=metadata or {},
        )
        for sink in self.sinks:
            try:
                sink.write_batch(event_type, [event])
            except SinkError as e:
                logger.error(
                    "Failed to publish %s for proof %d: %s",
                    event_type,
                    record.token_id,
                    e,
                    extra={"token_id": record.token_id, "event_type": event_type},
                )
