"""Verification of issued proofs."""

from income_proof.verification.resolver import VerificationResolver, parse_token_id

__all__ = ["VerificationResolver", "parse_token_id"]
