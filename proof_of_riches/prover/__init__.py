"""
Prover implementations and startup-time selection.
"""
import logging
from typing import Optional

from ..config import Settings
from .base import PROVER_TIMEOUT_SECONDS, ProverClient
from .live import LiveProver
from .mock import MOCK_PROOF, MOCK_PUBLIC_INPUTS, MOCK_VKEY_HASH, MockProver

__all__ = [
    'ProverClient',
    'LiveProver',
    'MockProver',
    'get_prover',
    'PROVER_TIMEOUT_SECONDS',
    'MOCK_PROOF',
    'MOCK_PUBLIC_INPUTS',
    'MOCK_VKEY_HASH',
]

logger = logging.getLogger(__name__)


def get_prover(settings: Settings, logger_instance: Optional[logging.Logger] = None) -> ProverClient:
    """
    Select the prover for this process.

    The mock prover is used when no credential is configured or MOCK_SP1 is set.

    Args:
        settings: Process settings

    Returns:
        Prover implementation
    """
    log = logger_instance or logger
    if settings.mock_prover or not settings.prover_configured:
        reason = "MOCK_SP1 is set" if settings.mock_prover else "SP1_API_KEY not configured"
        if settings.is_production:
            log.warning(f"Using mock prover in production ({reason})")
        else:
            log.info(f"Using mock prover ({reason})")
        return MockProver()

    log.info(f"Using live prover at {settings.sp1_prover_url}")
    return LiveProver(settings.sp1_prover_url, settings.sp1_api_key)
