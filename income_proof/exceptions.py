"""Custom exception hierarchy for income-proof."""


class IncomeProofError(Exception):
    """Base exception for all income-proof errors."""


class ValidationError(IncomeProofError):
    """Raised when input is malformed or a precondition is not met."""


class JurisdictionBlockedError(IncomeProofError):
    """Raised when issuance is requested for a blocked jurisdiction."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Jurisdiction {code} is blocked from proof issuance")
        self.code = code


class FeedUnavailableError(IncomeProofError):
    """Raised when a transaction feed cannot supply transactions."""

    def __init__(self, message: str, wallet_address: str | None = None) -> None:
        super().__init__(message)
        self.wallet_address = wallet_address


class DuplicateTokenIdError(IncomeProofError):
    """Raised when a proof record collides with an already issued one."""

    def __init__(self, token_id: int, message: str | None = None) -> None:
        super().__init__(message or f"Token {token_id} already issued")
        self.token_id = token_id


class ProofNotFoundError(IncomeProofError):
    """Raised when a referenced proof record does not exist."""


class ConfigurationError(IncomeProofError):
    """Raised when configuration is invalid or missing."""


class SinkError(IncomeProofError):
    """Raised when a sink operation fails."""


class RegistryLockedError(IncomeProofError):
    """Raised when another process holds the registry file lock too long."""
