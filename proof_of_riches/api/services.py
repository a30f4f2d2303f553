"""
Service wiring for the HTTP layer.

Everything the routes need is built once per application and reached through
the `get_services` dependency; there are no module-level singletons.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from ..balance_proof import BalanceProofService
from ..config import Settings
from ..issuer import ProofIssuer
from ..network import NetworkResolver, Web3Factory
from ..oracle import BalanceOracle
from ..payment import PaymentVerifier
from ..prover import ProverClient, get_prover
from ..store import ProofStore
from ..validator import ProofValidator

logger = logging.getLogger(__name__)


@dataclass
class ProofServices:
    settings: Settings
    resolver: NetworkResolver
    store: ProofStore
    prover: ProverClient
    issuer: ProofIssuer
    validator: ProofValidator
    balance_proofs: BalanceProofService


def build_services(
    settings: Settings,
    web3_factory: Optional[Web3Factory] = None,
    prover: Optional[ProverClient] = None,
    store: Optional[ProofStore] = None
) -> ProofServices:
    """
    Build the service graph for one application instance

    Args:
        settings: Process settings
        web3_factory: Optional Web3 handle factory (tests inject mocks here)
        prover: Optional prover; selected from settings when omitted
        store: Optional proof store; a fresh one is created when omitted
    """
    resolver = NetworkResolver(settings, web3_factory=web3_factory)
    store = store if store is not None else ProofStore()
    prover = prover if prover is not None else get_prover(settings)
    oracle = BalanceOracle(resolver)
    issuer = ProofIssuer(
        settings=settings,
        resolver=resolver,
        payment_verifier=PaymentVerifier(resolver),
        oracle=oracle,
        prover=prover,
        store=store,
    )
    balance_proofs = BalanceProofService(
        settings=settings,
        oracle=BalanceOracle(resolver, rpc_url=settings.balance_proof_rpc_url),
        store=store,
    )
    logger.debug(f"Built proof services (prover mode: {prover.mode.value})")
    return ProofServices(
        settings=settings,
        resolver=resolver,
        store=store,
        prover=prover,
        issuer=issuer,
        validator=ProofValidator(),
        balance_proofs=balance_proofs,
    )


def get_services(request: Request) -> ProofServices:
    """Dependency: the services attached to the running application."""
    return request.app.state.services
