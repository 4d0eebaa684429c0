"""Append-only proof registry with lookup indexes."""

import logging
import threading
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime

from income_proof.exceptions import DuplicateTokenIdError, ProofNotFoundError, ValidationError
from income_proof.models import Event, ProofRecord

logger = logging.getLogger(__name__)

EVENT_SOURCE = "income-proof.registry"


def _wallet_key(address: str) -> str:
    return address.strip().lower()


def _hash_key(verification_hash: str) -> str:
    return verification_hash.strip().lower()


@dataclass
class ProofRegistry:
    """In-memory store of issued proofs keyed by token id.

    ``records`` is authoritative; the hash and wallet indexes are derived
    from it and can be rebuilt at any time. Allocation and append share
    one lock so concurrent issuers never receive the same token id.
    """

    _records: dict[int, ProofRecord] = field(default_factory=dict)

    # Derived indexes
    _hash_index: dict[str, int] = field(default_factory=dict)
    _wallet_index: dict[str, list[int]] = field(default_factory=dict)

    audit_log: list[Event] = field(default_factory=list)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @classmethod
    def from_records(cls, records: Iterable[ProofRecord]) -> "ProofRegistry":
        """Rebuild a registry from its primary records alone."""
        registry = cls()
        for record in sorted(records, key=lambda r: r.token_id):
            registry.append(record)
        return registry

    def next_token_id(self) -> int:
        """Smallest id greater than every issued id."""
        with self._lock:
            return max(self._records, default=0) + 1

    def append(self, record: ProofRecord) -> None:
        """Add an issued proof to the registry.

        Token ids must be strictly increasing: a record whose id is not
        above every stored id raises ``DuplicateTokenIdError``.
        """
        with self._lock:
            self._append_locked(record)

    def append_next(self, build: Callable[[int], ProofRecord]) -> ProofRecord:
        """Allocate the next token id, build the record and append it atomically.

        Parameters
        ----------
        build : Callable[[int], ProofRecord]
            Receives the allocated token id and returns the record to store.

        Returns
        -------
        ProofRecord
            The appended record.
        """
        with self._lock:
            token_id = self.next_token_id()
            record = build(token_id)
            if record.token_id != token_id:
                raise ValidationError(
                    f"Built record has token {record.token_id}, expected {token_id}"
                )
            self._append_locked(record)
            return record

    def _append_locked(self, record: ProofRecord) -> None:
        if record.token_id <= 0:
            raise ValidationError(f"Token id must be positive, got {record.token_id}")
        if record.token_id in self._records:
            raise DuplicateTokenIdError(record.token_id)
        last_token_id = max(self._records, default=0)
        if record.token_id < last_token_id:
            raise DuplicateTokenIdError(
                record.token_id,
                f"Token {record.token_id} is not greater than last issued token {last_token_id}",
            )

        hash_key = _hash_key(record.verification_hash)
        if hash_key in self._hash_index:
            raise DuplicateTokenIdError(
                record.token_id,
                f"Verification hash {record.verification_hash} already issued "
                f"as token {self._hash_index[hash_key]}",
            )

        self._records[record.token_id] = record
        self._hash_index[hash_key] = record.token_id
        self._wallet_index.setdefault(_wallet_key(record.wallet_address), []).append(record.token_id)
        logger.debug("Registered proof %d for %s", record.token_id, record.wallet_address)

    # Query methods
    def get_by_id(self, token_id: int) -> ProofRecord | None:
        """Get a proof by token id."""
        with self._lock:
            return self._records.get(token_id)

    def get_by_hash(self, verification_hash: str) -> ProofRecord | None:
        """Get a proof by its verification hash."""
        with self._lock:
            token_id = self._hash_index.get(_hash_key(verification_hash))
            return self._records[token_id] if token_id is not None else None

    def get_by_wallet(self, address: str) -> list[ProofRecord]:
        """Get all proofs of a wallet, oldest first."""
        with self._lock:
            token_ids = self._wallet_index.get(_wallet_key(address), [])
            records = [self._records[tid] for tid in token_ids]
        return sorted(records, key=lambda r: (r.verification_timestamp, r.token_id))

    def latest_for_wallet(self, address: str) -> ProofRecord | None:
        """Get the most recently issued proof of a wallet."""
        records = self.get_by_wallet(address)
        return records[-1] if records else None

    def records(self) -> list[ProofRecord]:
        """All proofs ordered by token id."""
        with self._lock:
            return [self._records[tid] for tid in sorted(self._records)]

    def revoke(self, token_id: int, reason: str = "") -> ProofRecord:
        """Mark a proof invalid and record an audit event.

        Only ``is_valid`` changes; the stored record is replaced by a copy,
        so every other field and the fingerprint stay as issued.
        """
        with self._lock:
            record = self._records.get(token_id)
            if record is None:
                raise ProofNotFoundError(f"Proof {token_id} not found")

            revoked = replace(record, is_valid=False)
            self._records[token_id] = revoked
            self.audit_log.append(
                Event(
                    event_id=uuid.uuid4().hex,
                    event_type="proof.revoked",
                    event_time=datetime.now(),
                    source=EVENT_SOURCE,
                    subject=str(token_id),
                    data={
                        "token_id": token_id,
                        "wallet_address": record.wallet_address,
                        "was_valid": record.is_valid,
                        "reason": reason,
                    },
                )
            )

        logger.info(
            "Revoked proof %d (%s)",
            token_id,
            reason or "no reason given",
            extra={"token_id": token_id, "wallet_address": revoked.wallet_address},
        )
        return revoked

    def rebuild_indexes(self) -> None:
        """Recompute hash and wallet indexes from the primary records."""
        with self._lock:
            self._hash_index.clear()
            self._wallet_index.clear()
            for tid in sorted(self._records):
                record = self._records[tid]
                self._hash_index[_hash_key(record.verification_hash)] = tid
                self._wallet_index.setdefault(_wallet_key(record.wallet_address), []).append(tid)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def summary(self) -> dict[str, int]:
        """Return summary counts of registry contents."""
        with self._lock:
            valid = sum(1 for r in self._records.values() if r.is_valid)
            return {
                "proofs": len(self._records),
                "valid": valid,
                "revoked": len(self._records) - valid,
                "wallets": len(self._wallet_index),
                "audit_events": len(self.audit_log),
            }
