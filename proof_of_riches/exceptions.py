"""
Exceptions for the Proof of Riches service.

Each exception carries the HTTP status the API layer answers with, so the
orchestration code can raise domain errors without knowing about HTTP.
"""
from typing import Optional


class ProofOfRichesError(Exception):
    """Base exception for all proof-service errors."""
    http_status = 500


class InvalidInputError(ProofOfRichesError):
    """Raised for malformed addresses, amounts or transaction hashes."""
    http_status = 400


class InsufficientBalanceError(InvalidInputError):
    """Raised when the proved balance is below the requested minimum."""

    def __init__(self, message: str, balance: Optional[int] = None, required: Optional[int] = None):
        self.balance = balance
        self.required = required
        super().__init__(message)


class PaymentNotVerifiedError(ProofOfRichesError):
    """
    Raised when the payment transaction is absent, sent to the wrong
    recipient, too small, unconfirmed or reverted.
    """
    http_status = 402


class NotFoundError(ProofOfRichesError):
    """Raised when a share identifier does not match any stored proof."""
    http_status = 404


class UpstreamUnavailableError(ProofOfRichesError):
    """
    Raised when the RPC node or the prover could not be reached.

    This is distinct from a legitimate negative result such as an
    unverified payment.
    """
    http_status = 500


class ProverError(UpstreamUnavailableError):
    """Raised when the proving service returns an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ProverTimeoutError(ProverError):
    """Raised when the proving service does not answer within the deadline."""
    pass


class ConfigurationError(ProofOfRichesError):
    """Raised when a required credential or address is not configured."""
    http_status = 503
