"""
Utility functions for the Proof of Riches service.
"""
import re
import secrets
from typing import Any, Union

from web3 import Web3

from .exceptions import InvalidInputError

TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
DECIMAL_RE = re.compile(r"^[0-9]+$")
BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def is_valid_address(value: Any) -> bool:
    """Check that a value is a well-formed 20-byte account address."""
    return isinstance(value, str) and Web3.is_address(value)


def is_tx_hash(value: Any) -> bool:
    """Check that a value is a 0x-prefixed 32-byte transaction hash."""
    return isinstance(value, str) and bool(TX_HASH_RE.match(value))


def strip_0x(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value


def to_base36(number: int) -> str:
    """
    Encode a non-negative integer in lowercase base 36.

    Raises:
        ValueError: If number is negative
    """
    if number < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def parse_amount(value: Union[str, int], field: str = "amount") -> int:
    """
    Parse a wei or token amount into an integer without going through float.

    Accepts non-negative decimal integers given as int or str.

    Raises:
        InvalidInputError: If the value is not a non-negative integer
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid {field} format")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and DECIMAL_RE.match(value.strip()):
        amount = int(value.strip())
    else:
        raise InvalidInputError(f"Invalid {field} format")
    if amount < 0:
        raise InvalidInputError(f"Invalid {field} format")
    return amount


def hex_to_int(value: Any) -> int:
    """Convert an RPC quantity (int, bytes or hex string) to an integer."""
    if isinstance(value, bool):
        raise TypeError("Boolean is not an RPC quantity")
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big") if value else 0
    if isinstance(value, str):
        stripped = strip_0x(value)
        return int(stripped, 16) if stripped else 0
    raise TypeError(f"Unsupported quantity type: {type(value).__name__}")


def to_hex_str(value: Any) -> str:
    """Render bytes or a hex string as a 0x-prefixed lowercase hex string."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, str):
        return "0x" + strip_0x(value).lower()
    raise TypeError(f"Unsupported hex value type: {type(value).__name__}")
