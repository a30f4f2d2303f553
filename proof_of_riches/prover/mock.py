"""
Deterministic stand-in for the proving network.

Produces fixed-shape placeholder output with the same byte length as a real
proof, so integration tests and local development run without a prover.
"""
import logging
from typing import Any, Dict, Optional

from .._rate_limited_log import rate_limited_log
from ..models import ProverMode, ProverOutput
from .base import ProverClient

# 256 bytes each, hex encoded
MOCK_PROOF = "0x" + "a" * 256 + "b" * 256
MOCK_PUBLIC_INPUTS = "0x" + "c" * 256 + "d" * 256
MOCK_VKEY_HASH = "0x" + "e" * 64


class MockProver(ProverClient):
    """
    Prover that always returns the same placeholder artifact.

    The output is marked with ProverMode.MOCK so consumers can tell it apart
    from a live proof.
    """

    mode = ProverMode.MOCK

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def is_configured(self) -> bool:
        """
        Returns:
            Always True since the mock prover has no dependencies
        """
        return True

    def prove(self, inputs: Dict[str, Any]) -> ProverOutput:
        rate_limited_log("Using mock prover; proofs are placeholders", logger_instance=self.logger)
        self.logger.debug(f"MockProver.prove called for wallet {str(inputs.get('wallet', ''))[:8]}...")
        return ProverOutput(
            proof=MOCK_PROOF,
            public_inputs=MOCK_PUBLIC_INPUTS,
            vkey_hash=MOCK_VKEY_HASH,
            mode=self.mode,
        )
