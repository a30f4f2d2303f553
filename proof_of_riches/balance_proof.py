"""
Direct balance proofs backed by an Ethereum storage proof.

This flow skips payment and the prover: it reads the USDT balance slot of a
wallet through eth_getProof and stores the resulting storage proof as a
shareable record.
"""
import logging
from typing import Optional, Union

from .config import Networks, Settings
from .exceptions import InsufficientBalanceError, InvalidInputError
from .models import NetworkName, ProofKind, ProofRecord, TokenDescriptor, now_ms
from .oracle import BalanceOracle, derive_slot, to_token_units
from .store import ProofStore
from .utils import is_valid_address

USDT_BALANCE_SLOT = 2
USDT_DECIMALS = 6

USDT_MAINNET = TokenDescriptor(
    symbol="USDT",
    contract_address=Networks.get_usdt_address(NetworkName.MAINNET.value),
    decimals=USDT_DECIMALS,
    network=NetworkName.MAINNET,
    balance_slot=USDT_BALANCE_SLOT,
)


class BalanceProofService:
    """
    Generates storage-proof-backed balance claims and stores them.
    """

    def __init__(
        self,
        settings: Settings,
        oracle: BalanceOracle,
        store: ProofStore,
        token: TokenDescriptor = USDT_MAINNET,
        logger: Optional[logging.Logger] = None
    ):
        self.settings = settings
        self.oracle = oracle
        self.store = store
        self.token = token
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, wallet_address: str, min_balance: Union[int, str]) -> ProofRecord:
        """
        Prove that a wallet holds at least min_balance whole tokens

        Args:
            wallet_address: Wallet to prove
            min_balance: Minimum balance in whole token units (positive integer)

        Returns:
            The stored, completed ProofRecord

        Raises:
            InvalidInputError: If the address or minimum is malformed
            InsufficientBalanceError: If the balance is below the minimum
            UpstreamUnavailableError: If the node could not be queried
        """
        if not is_valid_address(wallet_address):
            raise InvalidInputError("Invalid wallet address")
        if isinstance(min_balance, bool) or not isinstance(min_balance, int) or min_balance <= 0:
            raise InvalidInputError("Minimum balance must be a positive integer")

        block_number = self.oracle.get_block_number()
        slot_hash = derive_slot(wallet_address, self.token.balance_slot)
        storage_proof = self.oracle.fetch_storage_proof(self.token.contract_address, slot_hash, block_number)

        balance = to_token_units(storage_proof.raw_value_wei, self.token.decimals)
        symbol = self.token.symbol
        if balance < min_balance:
            self.logger.info(f"Balance proof rejected for {wallet_address}: {balance} < {min_balance} {symbol}")
            raise InsufficientBalanceError(
                f"Insufficient balance. Have {balance} {symbol}, need {min_balance} {symbol}",
                balance=balance,
                required=min_balance
            )

        created = now_ms()
        record = ProofRecord(
            wallet_address=wallet_address,
            token=self.token,
            min_amount_required=min_balance,
            balance_as_proved=balance,
            network=self.token.network,
            kind=ProofKind.STORAGE,
            storage_proof=storage_proof,
            claim_text=f"Proof that wallet has ≥ {min_balance} {symbol}",
            created_at=created,
            expires_at=created + self.settings.proof_ttl_seconds * 1000,
        )
        record.complete(storage_proof.artifact_hex(), storage_proof.public_inputs_hex())
        self.store.save(record)

        self.logger.info(f"Stored balance proof {record.share_id} for {wallet_address} at block {block_number}")
        return record

    @staticmethod
    def success_message(record: ProofRecord) -> str:
        return f"Successfully proved balance of {record.balance_as_proved} {record.token.symbol}"
