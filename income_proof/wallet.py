"""Wallet capability interface."""

from abc import ABC, abstractmethod

from income_proof.exceptions import ValidationError
from income_proof.models import WalletContext


class WalletProvider(ABC):
    """Supplies the connected wallet address and network."""

    @abstractmethod
    def get_connected_address(self) -> str | None:
        """Address of the connected wallet, or None if disconnected."""

    @abstractmethod
    def get_network(self) -> int | None:
        """Chain id the wallet is connected to."""


class StaticWalletProvider(WalletProvider):
    """Wallet provider with a fixed address, for CLIs and tests."""

    def __init__(self, address: str | None, chain_id: int | None = None) -> None:
        self.address = address
        self.chain_id = chain_id

    def get_connected_address(self) -> str | None:
        return self.address

    def get_network(self) -> int | None:
        return self.chain_id


def wallet_context(provider: WalletProvider, network_name: str | None = None) -> WalletContext:
    """Capture the provider's current wallet as an explicit context.

    Raises
    ------
    ValidationError
        If no wallet is connected.
    """
    address = provider.get_connected_address()
    if not address or not address.strip():
        raise ValidationError("No wallet connected")
    return WalletContext(
        address=address.strip(),
        chain_id=provider.get_network(),
        network_name=network_name,
    )


def shorten_address(address: str) -> str:
    """Abbreviate an address as ``0x1234...abcd``."""
    if not address:
        return ""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
