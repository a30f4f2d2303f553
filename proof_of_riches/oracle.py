"""
Storage-slot derivation and on-chain balance retrieval.

ERC-20 balances live in a `mapping(address => uint256)`. For a mapping at
slot index p, the value for key k is stored at keccak256(pad32(k) ++ pad32(p)).
"""
import logging
from typing import Optional

from web3 import Web3

from .exceptions import InvalidInputError, UpstreamUnavailableError
from .models import StorageProof
from .network import NetworkResolver
from .utils import hex_to_int, is_valid_address, strip_0x, to_hex_str

# Minimal ERC20 ABI for balanceOf
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    }
]


def derive_slot(account_address: str, mapping_slot: int) -> str:
    """
    Compute the storage key of an account's entry in a balance mapping

    Args:
        account_address: 20-byte account address (any case)
        mapping_slot: Storage index of the mapping in the contract

    Returns:
        0x-prefixed 32-byte slot hash

    Raises:
        InvalidInputError: If the address is malformed or the slot is negative
    """
    if not is_valid_address(account_address):
        raise InvalidInputError("Invalid address format")
    if mapping_slot < 0:
        raise InvalidInputError("Mapping slot must be non-negative")

    key = bytes.fromhex(strip_0x(account_address).lower()).rjust(32, b"\x00")
    slot = mapping_slot.to_bytes(32, "big")
    return Web3.to_hex(Web3.keccak(key + slot))


def to_token_units(raw_value: int, decimals: int) -> int:
    """Scale a raw on-chain amount down to whole token units (floor)."""
    return int(raw_value) // (10 ** decimals)


def format_units(raw_value: int, decimals: int) -> str:
    """
    Render a raw amount as an exact decimal string, e.g. 1500000 @ 6 -> "1.5".
    """
    raw_value = int(raw_value)
    sign = "-" if raw_value < 0 else ""
    whole, frac = divmod(abs(raw_value), 10 ** decimals)
    if decimals == 0 or frac == 0:
        return f"{sign}{whole}"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{frac_str}"


class BalanceOracle:
    """
    Reads token balances and storage proofs from an Ethereum node.
    """

    def __init__(
        self,
        resolver: NetworkResolver,
        rpc_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the oracle

        Args:
            resolver: Network resolver supplying pooled Web3 handles
            rpc_url: Pin the oracle to a specific endpoint instead of the resolved network
            logger: Optional logger instance
        """
        self.resolver = resolver
        self.rpc_url = rpc_url
        self.logger = logger or logging.getLogger(__name__)

    @property
    def w3(self) -> Web3:
        if self.rpc_url:
            return self.resolver.web3_for_url(self.rpc_url)
        return self.resolver.web3()

    derive_slot = staticmethod(derive_slot)

    def get_block_number(self) -> int:
        try:
            return int(self.w3.eth.block_number)
        except Exception as e:
            self.logger.error(f"Error fetching block number: {e}")
            raise UpstreamUnavailableError(f"Failed to fetch block number: {str(e)}")

    def get_token_balance(self, token_address: str, wallet_address: str, block: Optional[int] = None) -> int:
        """
        Fetch an ERC-20 balance in raw units

        Raises:
            InvalidInputError: If either address is malformed
            UpstreamUnavailableError: If the call fails
        """
        if not is_valid_address(token_address):
            raise InvalidInputError(f"Invalid token address: {token_address}")
        if not is_valid_address(wallet_address):
            raise InvalidInputError(f"Invalid wallet address: {wallet_address}")

        try:
            contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(token_address),
                abi=ERC20_ABI
            )
            call = contract.functions.balanceOf(Web3.to_checksum_address(wallet_address))
            balance = call.call() if block is None else call.call(block_identifier=block)
        except Exception as e:
            self.logger.error(f"Error fetching balance: {e}")
            raise UpstreamUnavailableError(f"Failed to fetch token balance: {str(e)}")

        balance = int(balance)
        self.logger.debug(f"Balance of {wallet_address} on token {token_address}: {balance}")
        return balance

    def fetch_storage_proof(self, token_contract: str, slot_hash: str, at_block: int) -> StorageProof:
        """
        Retrieve an eth_getProof storage proof for one slot

        Args:
            token_contract: Contract whose storage is proved
            slot_hash: 0x-prefixed storage key from derive_slot
            at_block: Block number the proof is anchored to

        Returns:
            StorageProof with the raw value and the Merkle path

        Raises:
            InvalidInputError: If the contract address is malformed
            UpstreamUnavailableError: If the RPC call fails or returns no storage proof
        """
        if not is_valid_address(token_contract):
            raise InvalidInputError(f"Invalid token address: {token_contract}")

        try:
            result = self.w3.eth.get_proof(
                Web3.to_checksum_address(token_contract),
                [hex_to_int(slot_hash)],
                at_block
            )
        except Exception as e:
            self.logger.error(f"Error fetching storage proof: {e}")
            raise UpstreamUnavailableError(f"Failed to fetch storage proof: {str(e)}")

        storage_proofs = result.get("storageProof") or []
        if not storage_proofs:
            raise UpstreamUnavailableError("Node returned no storage proof")

        entry = storage_proofs[0]
        merkle_path = [to_hex_str(node) for node in entry.get("proof") or []]
        if not merkle_path:
            raise UpstreamUnavailableError("Node returned an empty Merkle path for the storage proof")

        return StorageProof(
            contract_address=token_contract.lower(),
            storage_slot_hash=slot_hash.lower(),
            raw_value_wei=hex_to_int(entry.get("value", 0)),
            merkle_path=merkle_path,
            block_number=int(at_block),
        )

    def prove_balance(self, token_contract: str, wallet_address: str, mapping_slot: int,
                      at_block: Optional[int] = None) -> StorageProof:
        """Derive the wallet's slot and fetch its storage proof in one step."""
        slot_hash = derive_slot(wallet_address, mapping_slot)
        block = at_block if at_block is not None else self.get_block_number()
        return self.fetch_storage_proof(token_contract, slot_hash, block)
