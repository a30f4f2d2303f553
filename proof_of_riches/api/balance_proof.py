"""
Direct balance-proof endpoints: USDT storage proofs shared by share id.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from ..exceptions import InvalidInputError, NotFoundError
from ..models import ProofKind, ProofRecord, ProofStatus
from ..utils import is_valid_address
from .schemas import BalanceProofRequest
from .services import ProofServices, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


def _proved_balance(record: ProofRecord) -> Optional[str]:
    # Only storage-backed claims disclose the balance they were built on
    if record.kind != ProofKind.STORAGE or record.balance_as_proved is None:
        return None
    return str(record.balance_as_proved)


def _block_number(record: ProofRecord) -> Optional[int]:
    return record.storage_proof.block_number if record.storage_proof else None


@router.post("/generate")
def generate_balance_proof(body: BalanceProofRequest, services: ProofServices = Depends(get_services)):
    if not body.wallet_address or body.min_balance_usdt is None:
        raise InvalidInputError("Missing required fields: walletAddress, minBalanceUSDT")

    record = services.balance_proofs.generate(body.wallet_address, body.min_balance_usdt)
    return {
        "success": True,
        "proof": {
            "shareId": record.share_id,
            "claimText": record.claim_text,
            "balance": _proved_balance(record),
            "message": services.balance_proofs.success_message(record),
            "blockNumber": _block_number(record),
        },
    }


@router.get("/wallet/{address}")
def list_wallet_proofs(address: str, services: ProofServices = Depends(get_services)):
    """List the completed proofs issued for one wallet."""
    if not is_valid_address(address):
        raise InvalidInputError("Invalid wallet address")

    proofs = [
        {
            "shareId": record.share_id,
            "claimText": record.claim_text,
            "balanceUSDT": _proved_balance(record),
            "minRequired": record.min_amount_required,
            "timestamp": record.created_at,
        }
        for record in services.store.get_by_wallet(address)
        if record.status == ProofStatus.COMPLETED
    ]
    return {"success": True, "proofs": proofs}


@router.get("/{share_id}")
def get_balance_proof(share_id: str, services: ProofServices = Depends(get_services)):
    record = services.store.get_by_share_id(share_id)
    if record is None:
        raise NotFoundError("Proof not found")

    proof: Dict[str, Any] = {
        "claimText": record.claim_text,
        "balanceUSDT": _proved_balance(record),
        "minRequired": record.min_amount_required,
        "blockNumber": _block_number(record),
        "timestamp": record.created_at,
        "status": record.status.value,
        "expiresAt": record.expires_at,
    }
    return {"success": True, "proof": proof}


@router.delete("/{share_id}")
def delete_balance_proof(share_id: str, services: ProofServices = Depends(get_services)):
    if not services.store.delete(share_id):
        raise NotFoundError("Proof not found")
    logger.info(f"Deleted proof {share_id}")
    return {"success": True, "message": "Proof deleted"}
