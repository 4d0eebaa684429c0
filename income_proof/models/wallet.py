"""Wallet and jurisdiction context models."""

from dataclasses import dataclass

from income_proof.models.enums import JurisdictionStatus


@dataclass(frozen=True)
class WalletContext:
    """Connected wallet passed explicitly to engine entry points."""

    address: str
    chain_id: int | None = None
    network_name: str | None = None


@dataclass(frozen=True)
class Jurisdiction:
    """Entry of the static jurisdiction policy table."""

    code: str  # ISO-like region code (US, UK, EU, ...)
    name: str
    status: JurisdictionStatus

    @property
    def is_blocked(self) -> bool:
        return self.status == JurisdictionStatus.BLOCKED
