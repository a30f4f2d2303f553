"""
Data models for the Proof of Riches service.
"""
import time
import uuid
from enum import Enum
from typing import Dict, Any, Optional, List

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Current wall-clock time in integer milliseconds."""
    return int(time.time() * 1000)


class NetworkName(str, Enum):
    """Supported Ethereum networks. Sepolia is the test network."""
    SEPOLIA = "sepolia"
    MAINNET = "mainnet"


class ProofStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class ProofKind(str, Enum):
    """How the balance claim is backed: a prover artifact or a raw storage proof."""
    ZK = "zk"
    STORAGE = "storage"


# Allowed forward moves of the record state machine
_TRANSITIONS = {
    ProofStatus.PENDING: {ProofStatus.GENERATING, ProofStatus.COMPLETED, ProofStatus.FAILED},
    ProofStatus.GENERATING: {ProofStatus.COMPLETED, ProofStatus.FAILED},
    ProofStatus.COMPLETED: set(),
    ProofStatus.FAILED: set(),
}


class NetworkConfig(BaseModel):
    """Network selected for this process"""
    model_config = ConfigDict(frozen=True)

    name: NetworkName
    rpc_endpoint: str
    chain_id: int

    @property
    def is_production(self) -> bool:
        return self.name == NetworkName.MAINNET


class PaymentReceipt(BaseModel):
    """A confirmed payment transaction"""
    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str = Field(..., alias="txHash")
    from_address: Optional[str] = Field(None, alias="from")
    to_address: str = Field(..., alias="to")
    value_wei: int = Field(..., alias="valueWei")
    confirmed: bool = True
    block_number: Optional[int] = Field(None, alias="blockNumber")


class TokenDescriptor(BaseModel):
    """Token whose balance is being proved"""
    model_config = ConfigDict(frozen=True)

    symbol: str = "TOKEN"
    contract_address: str
    decimals: int = 18
    network: NetworkName = NetworkName.SEPOLIA
    balance_slot: Optional[int] = None


class StorageProof(BaseModel):
    """Attestation that a storage slot held a value at a given block"""
    model_config = ConfigDict(frozen=True)

    contract_address: str
    storage_slot_hash: str
    raw_value_wei: int
    merkle_path: List[str]
    block_number: int

    def artifact_hex(self) -> str:
        """Concatenate the proof nodes into a single hex string."""
        return "0x" + "".join(node[2:] if node.startswith("0x") else node for node in self.merkle_path)

    def public_inputs_hex(self) -> str:
        """Encode slot, value and block as 32-byte words."""
        slot = self.storage_slot_hash[2:] if self.storage_slot_hash.startswith("0x") else self.storage_slot_hash
        return (
            "0x"
            + slot.rjust(64, "0")
            + format(self.raw_value_wei, "064x")
            + format(self.block_number, "064x")
        )


class ProverMode(str, Enum):
    LIVE = "live"
    MOCK = "mock"


class ProverOutput(BaseModel):
    """Artifact returned by a prover, tagged with its provenance"""
    model_config = ConfigDict(frozen=True)

    proof: str
    public_inputs: str
    vkey_hash: str = ""
    mode: ProverMode


class ProofMetadata(BaseModel):
    """Optional presentation fields echoed back to the client"""
    model_config = ConfigDict(populate_by_name=True)

    social_provider: Optional[str] = Field(None, alias="socialProvider")
    social_handle: Optional[str] = Field(None, alias="socialHandle")
    social_display_name: Optional[str] = Field(None, alias="socialDisplayName")
    token_symbol: Optional[str] = Field(None, alias="tokenSymbol")
    display_amount: Optional[str] = Field(None, alias="displayAmount")

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ProofRecord(BaseModel):
    """An issued proof, owned by the ProofStore once saved"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    share_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    wallet_address: str
    token: TokenDescriptor
    min_amount_required: int
    balance_as_proved: Optional[int] = None
    proof_artifact: str = ""
    public_inputs: str = ""
    payment_tx_hash: Optional[str] = None
    verification_code: Optional[str] = None
    network: NetworkName
    status: ProofStatus = ProofStatus.PENDING
    kind: ProofKind = ProofKind.ZK
    prover_mode: Optional[ProverMode] = None
    storage_proof: Optional[StorageProof] = None
    claim_text: str = ""
    metadata: ProofMetadata = Field(default_factory=ProofMetadata)
    created_at: int = Field(default_factory=now_ms)
    expires_at: int
    error: Optional[str] = None

    def model_post_init(self, __context: Any) -> None:
        self.wallet_address = self.wallet_address.lower()
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be later than created_at")

    def advance(self, status: ProofStatus) -> None:
        """
        Move the record forward in its lifecycle.

        Raises:
            ValueError: If the move would regress or leave a terminal state
        """
        if status not in _TRANSITIONS[self.status]:
            raise ValueError(f"Invalid status transition {self.status.value} -> {status.value}")
        self.status = status

    def complete(self, proof_artifact: str, public_inputs: str, verification_code: Optional[str] = None) -> None:
        """Attach the final artifact and mark the record completed."""
        if not proof_artifact or not public_inputs:
            raise ValueError("Completed proofs require a non-empty artifact and public inputs")
        self.advance(ProofStatus.COMPLETED)
        self.proof_artifact = proof_artifact
        self.public_inputs = public_inputs
        self.verification_code = verification_code

    def fail(self, error: str) -> None:
        self.advance(ProofStatus.FAILED)
        self.error = error

    def is_expired(self, at_ms: Optional[int] = None) -> bool:
        return (at_ms if at_ms is not None else now_ms()) >= self.expires_at


class VerificationResult(BaseModel):
    """Outcome of a structural proof check"""
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(..., alias="isValid")
    message: str
    wallet: Optional[str] = None
    token: Optional[str] = None
    metadata: ProofMetadata = Field(default_factory=ProofMetadata)

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"isValid": self.is_valid, "message": self.message}
        if self.wallet is not None:
            body["wallet"] = self.wallet
        if self.token is not None:
            body["token"] = self.token
        body.update(self.metadata.to_response())
        return body
