"""
Verification of on-chain proof payments.
"""
import logging
from typing import Optional

from web3.exceptions import TransactionNotFound

from .exceptions import ConfigurationError, UpstreamUnavailableError
from .models import PaymentReceipt
from .network import NetworkResolver
from .utils import is_valid_address, to_hex_str


class PaymentVerifier:
    """
    Confirms that a transaction paid at least a given amount to a recipient.

    A negative result is returned as None. Failures to reach the node raise
    UpstreamUnavailableError, so callers can tell "the payment is wrong" apart
    from "the payment could not be checked".
    """

    def __init__(self, resolver: NetworkResolver, logger: Optional[logging.Logger] = None):
        self.resolver = resolver
        self.logger = logger or logging.getLogger(__name__)

    def verify(self, tx_ref: str, expected_recipient: str, min_value_wei: int) -> Optional[PaymentReceipt]:
        """
        Verify a payment transaction

        Args:
            tx_ref: Transaction hash (0x-prefixed hex)
            expected_recipient: Address that must have received the payment
            min_value_wei: Minimum transferred value in wei

        Returns:
            PaymentReceipt if the payment is confirmed and sufficient, else None

        Raises:
            ConfigurationError: If the expected recipient is not a valid address
            UpstreamUnavailableError: If the RPC node could not be queried
        """
        if not is_valid_address(expected_recipient):
            raise ConfigurationError(f"Invalid recipient address: {expected_recipient}")

        w3 = self.resolver.web3()

        try:
            tx = w3.eth.get_transaction(tx_ref)
        except TransactionNotFound:
            tx = None
        except Exception as e:
            self.logger.error(f"Error fetching transaction {tx_ref}: {e}")
            raise UpstreamUnavailableError(f"Failed to verify payment: {str(e)}")

        if not tx:
            self.logger.warning(f"Transaction not found: {tx_ref}")
            return None

        to_address = tx.get("to")
        if not to_address or to_address.lower() != expected_recipient.lower():
            self.logger.warning(
                f"Payment sent to wrong address. Expected: {expected_recipient}, Got: {to_address}"
            )
            return None

        value = int(tx.get("value", 0))
        if value < int(min_value_wei):
            self.logger.warning(f"Insufficient payment. Expected: {min_value_wei}, Got: {value}")
            return None

        try:
            receipt = w3.eth.get_transaction_receipt(tx_ref)
        except TransactionNotFound:
            receipt = None
        except Exception as e:
            self.logger.error(f"Error fetching receipt for {tx_ref}: {e}")
            raise UpstreamUnavailableError(f"Failed to verify payment: {str(e)}")

        if not receipt:
            self.logger.warning(f"Transaction not confirmed yet: {tx_ref}")
            return None

        if receipt.get("status") != 1:
            self.logger.warning(f"Transaction failed: {tx_ref}")
            return None

        self.logger.info(f"Payment verified: {tx_ref}")
        tx_hash = tx.get("hash", tx_ref)
        return PaymentReceipt(
            tx_hash=to_hex_str(tx_hash) if isinstance(tx_hash, (bytes, bytearray)) else tx_hash,
            from_address=tx.get("from"),
            to_address=to_address,
            value_wei=value,
            confirmed=True,
            block_number=receipt.get("blockNumber"),
        )
