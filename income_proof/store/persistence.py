"""JSON file persistence for the proof registry.

Layout::

    {"records": {"1": {...ProofRecord...}, "2": {...}}, "audit_log": [...]}

Only primary records and audit events are written; indexes are rebuilt
on load. Writers that allocate token ids go through ``locked_registry``
so concurrent processes never mint the same id from one file.
"""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from income_proof.exceptions import RegistryLockedError, ValidationError
from income_proof.models import Event, PaymentFrequency, ProofRecord
from income_proof.sinks.serialization import dataclass_to_dict
from income_proof.store.registry import ProofRegistry

logger = logging.getLogger(__name__)


def record_from_dict(data: dict[str, Any]) -> ProofRecord:
    """Parse a serialized proof record."""
    try:
        return ProofRecord(
            token_id=int(data["token_id"]),
            wallet_address=data["wallet_address"],
            verification_timestamp=datetime.fromisoformat(data["verification_timestamp"]),
            average_monthly_income=Decimal(str(data["average_monthly_income"])),
            payment_frequency=PaymentFrequency(data["payment_frequency"]),
            employer_count=int(data["employer_count"]),
            verification_hash=data["verification_hash"],
            is_valid=bool(data.get("is_valid", True)),
            token_uri=data.get("token_uri", ""),
        )
    except (KeyError, ValueError, ArithmeticError) as e:
        raise ValidationError(f"Malformed proof record: {e}") from e


def event_from_dict(data: dict[str, Any]) -> Event:
    """Parse a serialized audit event."""
    try:
        return Event(
            event_id=data["event_id"],
            event_type=data["event_type"],
            event_time=datetime.fromisoformat(data["event_time"]),
            source=data["source"],
            subject=data["subject"],
            data=data.get("data", {}),
            metadata=data.get("metadata", {}),
        )
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Malformed audit event: {e}") from e


def save_registry(registry: ProofRegistry, path: str | Path, pretty: bool = True) -> None:
    """Write the registry's primary records to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "records": {str(r.token_id): dataclass_to_dict(r) for r in registry.records()},
        "audit_log": [dataclass_to_dict(e) for e in registry.audit_log],
    }

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        if pretty:
            json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            json.dump(data, f, ensure_ascii=False)
    tmp_path.replace(path)

    logger.info("Saved %d proofs to %s", len(data["records"]), path)


def load_registry(path: str | Path) -> ProofRegistry:
    """Load a registry from a JSON file, or an empty one if it does not exist."""
    path = Path(path)
    if not path.exists():
        logger.info("No registry at %s; starting empty", path)
        return ProofRegistry()

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    records = []
    for key, value in data.get("records", {}).items():
        record = record_from_dict(value)
        if str(record.token_id) != key:
            raise ValidationError(f"Record key {key} does not match token id {record.token_id}")
        records.append(record)

    registry = ProofRegistry.from_records(records)
    registry.audit_log.extend(event_from_dict(e) for e in data.get("audit_log", []))
    logger.info("Loaded %d proofs from %s", len(registry), path)
    return registry


def lock_path(path: str | Path) -> Path:
    path = Path(path)
    return path.with_name(path.name + ".lock")


@contextmanager
def locked_registry(path: str | Path, timeout: float = 10.0) -> Iterator[ProofRegistry]:
    """Load, modify and save a registry file under an exclusive lock.

    The registry is saved when the block exits normally. If the block
    raises, nothing is written and the file keeps its previous contents.

    Parameters
    ----------
    path : str | Path
        Registry JSON file.
    timeout : float
        Seconds to wait for another holder of the lock.

    Raises
    ------
    RegistryLockedError
        If the lock cannot be acquired within ``timeout``.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(str(lock_path(path)), timeout=timeout)
    try:
        lock.acquire()
    except Timeout as e:
        raise RegistryLockedError(f"Registry {path} is locked by another process") from e

    try:
        registry = load_registry(path)
        yield registry
        save_registry(registry, path)
    finally:
        lock.release()
