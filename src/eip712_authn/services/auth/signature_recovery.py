"""Signer recovery for EIP-712 typed-data signatures."""

import logging
from typing import Any, Protocol

from eth_account import Account
from eth_account.messages import encode_typed_data

from eip712_authn.services.auth.errors import SignatureRecoveryError

logger = logging.getLogger(__name__)


class SignatureRecovery(Protocol):
    """Recovers the signing address of a typed-data signature."""

    def recover(
        self,
        domain: dict[str, Any],
        types: dict[str, Any],
        message: dict[str, Any],
        signature: str,
    ) -> str:
        ...


class TypedDataSignatureRecovery:
    """Recover signers with eth_account's EIP-712 encoder."""

    def recover(
        self,
        domain: dict[str, Any],
        types: dict[str, Any],
        message: dict[str, Any],
        signature: str,
    ) -> str:
        """Recover wallet address from a typed-data signature.

        Args:
            domain: EIP-712 domain values
            types: Struct types, excluding EIP712Domain
            message: Message values for the primary type
            signature: Hex-encoded 65-byte signature

        Returns:
            Recovered checksum address

        Raises:
            SignatureRecoveryError: If the signature cannot be recovered
        """
        try:
            signable = encode_typed_data(
                domain_data=domain,
                message_types=types,
                message_data=message,
            )
            return Account.recover_message(signable, signature=signature)
        except Exception as e:
            logger.debug(f"Typed-data signature recovery failed: {e}")
            raise SignatureRecoveryError(str(e)) from e
