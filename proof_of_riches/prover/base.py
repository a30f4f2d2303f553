"""
Prover interface.

A prover turns balance-claim inputs into an opaque proof artifact. Concrete
implementations talk to a remote proving network or synthesize a placeholder.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict

from ..models import ProverMode, ProverOutput

# Hard upper bound on a single proving request, in seconds
PROVER_TIMEOUT_SECONDS = 120


class ProverClient(ABC):
    """
    Abstract base class for prover implementations.

    The implementation is chosen once at startup and injected into the
    issuer, so request handling never branches on configuration flags.
    """

    mode: ProverMode

    @abstractmethod
    def is_configured(self) -> bool:
        """
        Check whether the prover has what it needs to produce artifacts.

        Returns:
            True if prove() can be called, False otherwise
        """
        pass

    @abstractmethod
    def prove(self, inputs: Dict[str, Any]) -> ProverOutput:
        """
        Generate a proof for a balance claim.

        Args:
            inputs: {"wallet": address without 0x, "balance": str, "min_amount": str}

        Returns:
            ProverOutput tagged with this prover's mode

        Raises:
            ProverError: If the prover rejects the request
            ProverTimeoutError: If no answer arrives within the deadline
        """
        pass

    def close(self) -> None:
        """Release any open connections."""
        pass
