"""Parsing utilities for hex-encoded JSON-RPC values."""

import re

from typing import Any


HEX_QUANTITY_PATTERN = re.compile(r"^0x[0-9a-fA-F]+$")
ZERO_HASH_PATTERN = re.compile(r"^0x0*$")


def parse_hex_int(hex_value: str | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string or None
        default: Default value if hex_value is None

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None:
        return default
    return int(hex_value, 16)


def to_hex(value: int) -> str:
    """Encode a non-negative integer as a minimal JSON-RPC quantity.

    Example:
        >>> to_hex(256)
        '0x100'
        >>> to_hex(0)
        '0x0'
    """
    if value < 0:
        msg = f"Cannot encode negative quantity: {value}"
        raise ValueError(msg)
    return hex(value)


def is_hex_quantity(value: Any) -> bool:
    """Check whether a value is a ``0x``-prefixed hex string with digits.

    Example:
        >>> is_hex_quantity("0x00")
        True
        >>> is_hex_quantity("latest")
        False
    """
    return isinstance(value, str) and HEX_QUANTITY_PATTERN.match(value) is not None


def canonical_hex(value: str) -> str:
    """Re-encode a hex quantity without leading zeros.

    Example:
        >>> canonical_hex("0x0100")
        '0x100'
        >>> canonical_hex("0x00")
        '0x0'
    """
    return to_hex(int(value, 16))


def is_zero_hash(value: Any) -> bool:
    """Check whether a value is an all-zero hash.

    Any string made of the ``0x`` prefix followed only by zero digits counts,
    whatever its length, since nodes are not consistent about padding.

    Example:
        >>> is_zero_hash("0x" + "0" * 64)
        True
        >>> is_zero_hash("0x100")
        False
    """
    return isinstance(value, str) and ZERO_HASH_PATTERN.match(value) is not None


__all__ = [
    "canonical_hex",
    "is_hex_quantity",
    "is_zero_hash",
    "parse_hex_int",
    "to_hex",
]
