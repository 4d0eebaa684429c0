"""Proof storage: in-memory registry and its persistence backends."""

from income_proof.store.persistence import load_registry, locked_registry, save_registry
from income_proof.store.registry import ProofRegistry

__all__ = ["ProofRegistry", "load_registry", "locked_registry", "save_registry"]
