"""Types shared by the client and server halves."""

from eip712_authn.common.address import is_address, same_address, to_checksum_address
from eip712_authn.common.types import (
    AUTHENTICATION_FIELDS,
    PRIMARY_TYPE,
    AuthTypes,
    EIP712AuthChallenge,
    EIP712AuthMessage,
    EIP712Domain,
    TypedDataField,
)

__all__ = [
    # Typed data
    "AUTHENTICATION_FIELDS",
    "PRIMARY_TYPE",
    "AuthTypes",
    "EIP712AuthChallenge",
    "EIP712AuthMessage",
    "EIP712Domain",
    "TypedDataField",
    # Addresses
    "is_address",
    "same_address",
    "to_checksum_address",
]
