"""
Paid proof endpoints: issue, verify, and report network and health status.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..exceptions import InvalidInputError
from ..models import ProofRecord
from ..utils import is_valid_address
from .schemas import GenerateProofRequest, VerifyProofRequest
from .services import ProofServices, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


def _issued_proof_body(record: ProofRecord) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": True,
        "proof": record.proof_artifact,
        "publicInputs": record.public_inputs,
        "wallet": record.wallet_address,
        "minAmount": str(record.min_amount_required),
        "token": record.token.contract_address,
        "paymentTxHash": record.payment_tx_hash,
        "timestamp": record.created_at,
        "network": record.network.value,
        "verificationCode": record.verification_code,
        "shareId": record.share_id,
        "proverMode": record.prover_mode.value if record.prover_mode else None,
        "expiresAt": record.expires_at,
    }
    body.update(record.metadata.to_response())
    return body


@router.post("/generate-proof")
def generate_proof(body: GenerateProofRequest, services: ProofServices = Depends(get_services)):
    """
    Issue a proof after verifying the caller's payment.
    402 when the payment does not check out.
    """
    if not body.wallet or not body.token or body.min_amount is None or body.min_amount == "" or not body.tx_hash:
        raise InvalidInputError("Missing required fields: wallet, token, minAmount, txHash")

    record = services.issuer.issue(
        wallet=body.wallet,
        token=body.token,
        min_amount=body.min_amount,
        payment_tx_ref=body.tx_hash,
        metadata=body.metadata(),
    )
    return _issued_proof_body(record)


@router.post("/verify-proof")
def verify_proof(body: VerifyProofRequest, services: ProofServices = Depends(get_services)):
    """Structurally validate a proof artifact."""
    if (not body.proof or not body.public_inputs or not body.wallet or not body.token
            or body.min_amount is None or body.min_amount == ""):
        raise InvalidInputError("Missing required fields for verification")

    result = services.validator.validate(
        body.proof,
        body.public_inputs,
        body.wallet,
        body.token,
        metadata=body.metadata(),
    )
    return result.to_response()


@router.get("/network")
def network_info(services: ProofServices = Depends(get_services)):
    settings = services.settings
    network = services.resolver.resolve().name.value
    return {
        "network": network,
        "nodeEnv": settings.environment,
        "message": f"Using {network} network ({settings.environment} environment)",
    }


@router.get("/health")
def health(services: ProofServices = Depends(get_services)):
    """Report readiness; 503 unless both the prover and the payment wallet are configured."""
    settings = services.settings
    sp1_configured = settings.prover_configured
    wallet_configured = is_valid_address(settings.backend_wallet)
    healthy = sp1_configured and wallet_configured

    if not healthy:
        logger.warning(f"Health check degraded: sp1Configured={sp1_configured}, walletConfigured={wallet_configured}")

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "error",
            "network": settings.network_name.value,
            "sp1Configured": sp1_configured,
            "walletConfigured": wallet_configured,
            "message": "Proof service is ready" if healthy else "Proof service is not fully configured",
        },
    )
