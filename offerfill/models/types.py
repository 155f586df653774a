"""Shared type definitions for offer models.

These types are used across offer, state and relay models.
"""

from typing import Annotated, Any

from eth_utils import is_hex_address, to_normalized_address
from pydantic import BeforeValidator, Field, PlainSerializer

from offerfill.constants import ZERO_ADDRESS
from offerfill.safe_int import UINT256_MAX


def validate_uint256(value: Any) -> int:
    """Validate that a value is a valid uint256.

    Args:
        value: Value to validate (decimal string or int)

    Returns:
        The value as an int

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 cannot be a bool")

    if isinstance(value, str):
        try:
            value = int(value, 0) if value.startswith("0x") else int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err

    if not isinstance(value, int):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return value


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer; accepts decimal strings, JSON-serializes as decimal string
Uint256 = Annotated[
    int,
    BeforeValidator(validate_uint256),
    PlainSerializer(str, return_type=str, when_used="json"),
    Field(description="256-bit unsigned integer"),
]

# 32-byte value as 0x-prefixed hex (pool ids, typed offer hashes)
Bytes32 = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{64}$")]


def normalize_address(address: str) -> str:
    """Lowercase 0x-prefixed form of an address, for comparisons and dict keys.

    Raises:
        ValueError: If `address` is not 20 bytes of hex
    """
    return to_normalized_address(address)


def is_valid_address(address: object) -> bool:
    return isinstance(address, str) and is_hex_address(address)


def is_zero_address(address: str) -> bool:
    """True for the all-zero address (the "anyone" taker)."""
    return normalize_address(address) == ZERO_ADDRESS


def same_address(a: str, b: str) -> bool:
    """Compare two addresses ignoring checksum casing."""
    return normalize_address(a) == normalize_address(b)
