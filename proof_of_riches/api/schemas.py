"""
Request bodies for the HTTP API.

Required fields are declared optional so that a missing field produces the
service's own 400 response rather than a framework validation error.
"""
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..models import ProofMetadata


class _MetadataFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    social_provider: Optional[str] = Field(None, alias="socialProvider")
    social_handle: Optional[str] = Field(None, alias="socialHandle")
    social_display_name: Optional[str] = Field(None, alias="socialDisplayName")
    token_symbol: Optional[str] = Field(None, alias="tokenSymbol")
    display_amount: Optional[str] = Field(None, alias="displayAmount")

    def metadata(self) -> ProofMetadata:
        return ProofMetadata(
            social_provider=self.social_provider,
            social_handle=self.social_handle,
            social_display_name=self.social_display_name,
            token_symbol=self.token_symbol,
            display_amount=self.display_amount,
        )


class GenerateProofRequest(_MetadataFields):
    """POST /api/proofs/generate-proof body"""
    wallet: Optional[str] = None
    token: Optional[str] = None
    min_amount: Optional[Union[str, int]] = Field(None, alias="minAmount")
    tx_hash: Optional[str] = Field(None, alias="txHash")


class VerifyProofRequest(_MetadataFields):
    """POST /api/proofs/verify-proof body"""
    proof: Optional[str] = None
    public_inputs: Optional[str] = Field(None, alias="publicInputs")
    wallet: Optional[str] = None
    min_amount: Optional[Union[str, int]] = Field(None, alias="minAmount")
    token: Optional[str] = None


class BalanceProofRequest(BaseModel):
    """POST /api/balance-proof/generate body"""
    model_config = ConfigDict(populate_by_name=True)

    wallet_address: Optional[str] = Field(None, alias="walletAddress")
    min_balance_usdt: Optional[int] = Field(None, alias="minBalanceUSDT")
