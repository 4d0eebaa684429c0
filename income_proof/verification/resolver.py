"""Resolve verification queries against the proof registry."""

import logging

from income_proof.exceptions import ValidationError
from income_proof.models import ProofRecord, QueryKind, VerificationResult
from income_proof.store.registry import ProofRegistry

logger = logging.getLogger(__name__)

# Registry ids fit a signed 64-bit column
MAX_TOKEN_ID = 2**63 - 1


def parse_token_id(value: str) -> int:
    """Parse a positive integer token id.

    Raises
    ------
    ValidationError
        If the value is not a positive decimal integer.
    """
    text = value.strip()
    if text.startswith("#"):
        text = text[1:]
    if not (text.isascii() and text.isdigit()):
        raise ValidationError(f"Invalid token id: {value!r}")
    digits = text.lstrip("0") or "0"
    if len(digits) > len(str(MAX_TOKEN_ID)):
        raise ValidationError(f"Token id out of range: {digits[:20]}...")
    token_id = int(digits)
    if token_id <= 0:
        raise ValidationError(f"Token id must be positive: {value!r}")
    if token_id > MAX_TOKEN_ID:
        raise ValidationError(f"Token id out of range: {token_id}")
    return token_id


def parse_query_kind(kind: QueryKind | str) -> QueryKind:
    try:
        return QueryKind(kind)
    except ValueError as e:
        raise ValidationError(f"Unknown query kind: {kind!r}") from e


class VerificationResolver:
    """Read-only lookups of issued proofs by token id, hash or wallet."""

    def __init__(self, registry: ProofRegistry) -> None:
        self.registry = registry

    def verify(self, kind: QueryKind | str, value: str) -> VerificationResult:
        """Look up a single proof.

        Malformed input resolves to a not-found result carrying an error
        message; it never raises. Wallet queries return the wallet's most
        recent proof.
        """
        try:
            records = self._lookup(kind, value)
        except ValidationError as e:
            logger.debug("Verification query rejected: %s", e)
            return VerificationResult.not_found(str(e))

        if not records:
            logger.info("No proof found for %s=%s", kind, value)
            return VerificationResult.not_found("No income proof found for the given input")

        result = VerificationResult.for_record(records[-1])
        if not result.is_valid:
            logger.info("Proof %d found but invalid: %s", result.record.token_id, result.error)
        return result

    def verify_all(self, kind: QueryKind | str, value: str) -> list[VerificationResult]:
        """Look up every matching proof, oldest first."""
        try:
            records = self._lookup(kind, value)
        except ValidationError as e:
            logger.debug("Verification query rejected: %s", e)
            return []
        return [VerificationResult.for_record(record) for record in records]

    def _lookup(self, kind: QueryKind | str, value: str) -> list[ProofRecord]:
        query_kind = parse_query_kind(kind)
        if value is None or not str(value).strip():
            raise ValidationError("Please enter a value to search")
        value = str(value).strip()

        if query_kind == QueryKind.TOKEN_ID:
            record = self.registry.get_by_id(parse_token_id(value))
            return [record] if record else []
        elif query_kind == QueryKind.HASH:
            record = self.registry.get_by_hash(value)
            return [record] if record else []
        else:
            return self.registry.get_by_wallet(value)
