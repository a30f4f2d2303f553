"""
Structural verification of previously issued proofs.

This is a placeholder contract: it checks that the artifact is well formed,
not that it is cryptographically sound. A production deployment has to call
a real verifier with the artifact's verification key.
"""
import logging
import re
from typing import Optional

from .models import ProofMetadata, VerificationResult
from .utils import is_valid_address

MIN_ARTIFACT_LENGTH = 10
HEX_PREFIX = "0x"
_HEX_BODY_RE = re.compile(r"^[0-9a-fA-F]*$")


class ProofValidator:
    """Checks proof artifacts presented for verification, independent of the store."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def validate(
        self,
        proof: Optional[str],
        public_inputs: Optional[str],
        wallet: Optional[str],
        token: Optional[str],
        metadata: Optional[ProofMetadata] = None
    ) -> VerificationResult:
        """
        Validate a proof artifact

        Args:
            proof: Hex-encoded proof artifact
            public_inputs: Hex-encoded public inputs
            wallet: Wallet address the proof is about
            token: Token contract address
            metadata: Optional presentation fields to echo back

        Returns:
            VerificationResult; never raises for malformed input
        """
        metadata = metadata or ProofMetadata()
        self.logger.info(f"Verifying proof for wallet: {wallet}")

        def reject(message: str) -> VerificationResult:
            self.logger.info(f"Proof rejected for wallet {wallet}: {message}")
            return VerificationResult(is_valid=False, message=message, wallet=wallet, token=token, metadata=metadata)

        if not is_valid_address(wallet):
            return reject("Invalid wallet address")
        if not is_valid_address(token):
            return reject("Invalid token address")

        if not isinstance(proof, str) or len(proof) < MIN_ARTIFACT_LENGTH:
            return reject("Invalid proof format")
        if not isinstance(public_inputs, str) or len(public_inputs) < MIN_ARTIFACT_LENGTH:
            return reject("Invalid public inputs")

        if not proof.startswith(HEX_PREFIX) or not _HEX_BODY_RE.match(proof[2:]):
            return reject("Invalid proof format: expected 0x-prefixed hex")
        if not public_inputs.startswith(HEX_PREFIX) or not _HEX_BODY_RE.match(public_inputs[2:]):
            return reject("Invalid public inputs format: expected 0x-prefixed hex")

        return VerificationResult(
            is_valid=True,
            message="Proof is valid",
            wallet=wallet,
            token=token,
            metadata=metadata,
        )
