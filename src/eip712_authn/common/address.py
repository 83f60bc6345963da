"""Account address helpers."""

import re
from typing import Any

from web3 import Web3

ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")


def is_address(value: Any) -> bool:
    """Check if value is a syntactically valid account address.

    All-lowercase and all-uppercase hex are accepted; mixed case must carry
    a valid EIP-55 checksum.
    """
    if not isinstance(value, str) or not ADDRESS_PATTERN.fullmatch(value):
        return False

    digits = value[2:]
    if digits == digits.lower() or digits == digits.upper():
        return True
    return Web3.is_checksum_address(value)


def to_checksum_address(address: str) -> str:
    """Normalize address to checksum format.

    Raises:
        ValueError: If the address is not valid
    """
    if not is_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return Web3.to_checksum_address(address)


def same_address(left: str, right: str) -> bool:
    """Case-insensitive address comparison."""
    return left.lower() == right.lower()
