"""Shared type definitions for exchange models.

These types are used by the core (address validation) and by the service
request/response models (pydantic field types).
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from exchange.constants import ZERO_ADDRESS
from exchange.errors import InvalidAddress
from exchange.safe_int import UINT256_MAX


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


# Ethereum-style address (40 hex chars after 0x prefix)
ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
Address = Annotated[str, Field(pattern=ADDRESS_PATTERN)]

# Non-negative decimal integer (range checked separately)
UINT256_PATTERN = r"^[0-9]+$"

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with a 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a well-formed address.

    Args:
        address: String to validate

    Returns:
        True if 0x followed by 40 hex characters
    """
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_zero_address(address: str | None) -> bool:
    """True for None, the empty string, or the all-zero address."""
    if not address:
        return True
    return normalize_address(address) == ZERO_ADDRESS


def require_address(address: str | None, role: str = "address") -> str:
    """Normalize an address that must identify a concrete party.

    Args:
        address: Address to check
        role: What the address is used as (for the error message)

    Returns:
        Normalized (lowercase) address

    Raises:
        InvalidAddress: If the address is missing, malformed or the zero address
    """
    if not isinstance(address, str) or not is_valid_address(normalize_address(address)):
        raise InvalidAddress(f"Invalid {role}: {address!r}")
    if is_zero_address(address):
        raise InvalidAddress(f"Zero address is not a valid {role}")
    return normalize_address(address)
