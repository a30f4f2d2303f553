"""
Proof of Riches - paid, shareable proofs of token holdings.
"""
from .balance_proof import BalanceProofService
from .config import Networks, Settings
from .exceptions import (
    ConfigurationError,
    InsufficientBalanceError,
    InvalidInputError,
    NotFoundError,
    PaymentNotVerifiedError,
    ProofOfRichesError,
    ProverError,
    ProverTimeoutError,
    UpstreamUnavailableError,
)
from .issuer import IssuanceOutcome, ProofIssuer, StageResult, generate_verification_code
from .models import (
    NetworkConfig,
    NetworkName,
    PaymentReceipt,
    ProofKind,
    ProofMetadata,
    ProofRecord,
    ProofStatus,
    ProverMode,
    ProverOutput,
    StorageProof,
    TokenDescriptor,
    VerificationResult,
)
from .network import NetworkResolver
from .oracle import BalanceOracle, derive_slot
from .payment import PaymentVerifier
from .prover import LiveProver, MockProver, ProverClient, get_prover
from .store import ProofStore
from .validator import ProofValidator
from .version import __version__

__all__ = [
    "BalanceOracle",
    "BalanceProofService",
    "ConfigurationError",
    "InsufficientBalanceError",
    "InvalidInputError",
    "IssuanceOutcome",
    "LiveProver",
    "MockProver",
    "NetworkConfig",
    "NetworkName",
    "NetworkResolver",
    "Networks",
    "NotFoundError",
    "PaymentNotVerifiedError",
    "PaymentReceipt",
    "PaymentVerifier",
    "ProofIssuer",
    "ProofKind",
    "ProofMetadata",
    "ProofOfRichesError",
    "ProofRecord",
    "ProofStatus",
    "ProofStore",
    "ProofValidator",
    "ProverClient",
    "ProverError",
    "ProverMode",
    "ProverOutput",
    "ProverTimeoutError",
    "Settings",
    "StageResult",
    "StorageProof",
    "TokenDescriptor",
    "UpstreamUnavailableError",
    "VerificationResult",
    "derive_slot",
    "generate_verification_code",
    "get_prover",
    "__version__",
]
