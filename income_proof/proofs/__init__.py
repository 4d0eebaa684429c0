"""Proof fingerprinting, jurisdiction policy and issuance."""

from income_proof.proofs.fingerprint import compute_verification_hash
from income_proof.proofs.issuer import ProofIssuer
from income_proof.proofs.jurisdictions import JurisdictionTable

__all__ = ["JurisdictionTable", "ProofIssuer", "compute_verification_hash"]
