"""Stateless EIP-712 challenge issuance and verification.

The server keeps no per-challenge state: freshness comes entirely from the
expiry of the signed token embedded in the envelope, so a captured
(envelope, signature) pair can be replayed until the token expires.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from eip712_authn.common.address import is_address, same_address
from eip712_authn.common.types import (
    AUTHENTICATION_FIELDS,
    PRIMARY_TYPE,
    AuthTypes,
    EIP712AuthChallenge,
    EIP712AuthMessage,
    EIP712Domain,
    TypedDataField,
)
from eip712_authn.core.config import get_settings
from eip712_authn.services.auth.errors import (
    AuthError,
    InvalidMessageError,
    InvalidSignatureError,
    InvalidTokenError,
    SignatureMismatchError,
    SignatureRecoveryError,
    TokenError,
)
from eip712_authn.services.auth.signature_recovery import (
    SignatureRecovery,
    TypedDataSignatureRecovery,
)
from eip712_authn.services.auth.token_service import JWTTokenService, TokenService

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30


class ChallengeIssuer:
    """Builds typed-data envelopes carrying a fresh challenge token."""

    def __init__(self, token_service: TokenService):
        """Initialize challenge issuer.

        Args:
            token_service: Service used to sign challenge tokens
        """
        self.token_service = token_service

    def issue(
        self,
        address: str,
        domain: EIP712Domain,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> EIP712AuthMessage:
        """Issue an authentication envelope for an address.

        Args:
            address: Account address being challenged
            domain: EIP-712 signing domain
            ttl_seconds: Challenge lifetime in seconds

        Returns:
            Envelope to be signed by the wallet

        Raises:
            ValueError: If the address is invalid or ttl_seconds is not positive
        """
        if not is_address(address):
            raise ValueError(f"Invalid address: {address!r}")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        token = self.token_service.sign({"address": address}, ttl_seconds)

        return EIP712AuthMessage(
            domain=domain,
            types=AuthTypes(
                eip712_domain=domain.type_fields(),
                authentication=AUTHENTICATION_FIELDS,
            ),
            primary_type=PRIMARY_TYPE,
            message=EIP712AuthChallenge(challenge=token),
        )


class ChallengeVerifier:
    """Decides whether a signed envelope proves control of its address."""

    def __init__(
        self,
        token_service: TokenService,
        signature_recovery: SignatureRecovery | None = None,
    ):
        """Initialize challenge verifier.

        Args:
            token_service: Service used to verify challenge tokens
            signature_recovery: Typed-data signer recovery backend
        """
        self.token_service = token_service
        self.signature_recovery = signature_recovery or TypedDataSignatureRecovery()

    def verify(
        self,
        envelope: EIP712AuthMessage | Mapping[str, Any],
        signature: str,
    ) -> str:
        """Verify a signed challenge envelope.

        Args:
            envelope: Envelope as issued, or its JSON mapping
            signature: Wallet signature over the envelope

        Returns:
            Recovered signer address

        Raises:
            InvalidMessageError: Envelope lacks a domain or message
            InvalidTokenError: Challenge token is invalid, expired or lacks an address
            InvalidSignatureError: Signer cannot be recovered
            SignatureMismatchError: Signer differs from the challenged address
        """
        try:
            return self._verify(envelope, signature)
        except AuthError as e:
            logger.warning(f"Challenge verification failed [{e.code}]: {e.message}")
            raise

    def _verify(
        self,
        envelope: EIP712AuthMessage | Mapping[str, Any],
        signature: str,
    ) -> str:
        raw_domain, raw_types, message = self._split_envelope(envelope)

        try:
            claims = self.token_service.verify(message.get("challenge"))
        except TokenError as e:
            raise InvalidTokenError() from e

        expected_address = claims.get("address")
        if not is_address(expected_address):
            raise InvalidTokenError("Challenge token does not contain a valid address")

        domain, authentication = self._parse_typed_data(raw_domain, raw_types)

        try:
            signer_address = self.signature_recovery.recover(
                domain.to_typed_data(),
                {"Authentication": [field.model_dump() for field in authentication]},
                message,
                signature,
            )
        except SignatureRecoveryError as e:
            raise InvalidSignatureError() from e

        if not is_address(signer_address):
            raise InvalidSignatureError(
                "Signature verification did not return a valid address"
            )
        if not same_address(signer_address, expected_address):
            raise SignatureMismatchError()

        logger.info(f"Challenge verified for {signer_address}")
        return signer_address

    def _split_envelope(
        self,
        envelope: EIP712AuthMessage | Mapping[str, Any],
    ) -> tuple[Any, Any, dict[str, Any]]:
        """Split an envelope into raw domain, raw types and message.

        Only presence is checked here; the typed-data parts are parsed after
        the challenge token has been verified.
        """
        if isinstance(envelope, EIP712AuthMessage):
            envelope = envelope.to_typed_data()

        if not isinstance(envelope, Mapping):
            raise InvalidMessageError()

        raw_domain = envelope.get("domain")
        raw_message = envelope.get("message")
        if not raw_domain or not raw_message or not isinstance(raw_message, Mapping):
            raise InvalidMessageError()

        return raw_domain, envelope.get("types"), dict(raw_message)

    def _parse_typed_data(
        self,
        raw_domain: Any,
        raw_types: Any,
    ) -> tuple[EIP712Domain, tuple[TypedDataField, ...]]:
        """Parse the signing domain and Authentication type of an envelope.

        Raises:
            InvalidSignatureError: If either cannot be used to recover a signer
        """
        if not isinstance(raw_types, Mapping) or "Authentication" not in raw_types:
            raise InvalidSignatureError("EIP-712 message has no Authentication type")

        try:
            domain = EIP712Domain.model_validate(raw_domain)
            authentication = tuple(
                TypedDataField.model_validate(field)
                for field in raw_types["Authentication"]
            )
        except (ValidationError, TypeError) as e:
            raise InvalidSignatureError(
                "EIP-712 domain or types cannot be used for recovery"
            ) from e

        return domain, authentication


class AuthServer:
    """Issues and verifies challenges for one application domain."""

    def __init__(
        self,
        secret_key: str,
        app_name: str,
        app_version: str,
        algorithm: str = "HS256",
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        verifying_contract: str | None = None,
        signature_recovery: SignatureRecovery | None = None,
    ):
        """Initialize auth server.

        Args:
            secret_key: Secret used to sign challenge tokens
            app_name: Domain name shown by the wallet
            app_version: Domain version
            algorithm: JWT algorithm
            default_ttl_seconds: Challenge lifetime when none is given
            verifying_contract: Optional domain verifyingContract
            signature_recovery: Override for the signer recovery backend
        """
        self.app_name = app_name
        self.app_version = app_version
        self.default_ttl_seconds = default_ttl_seconds
        self.verifying_contract = verifying_contract

        token_service = JWTTokenService(secret_key, algorithm=algorithm)
        self.issuer = ChallengeIssuer(token_service)
        self.verifier = ChallengeVerifier(token_service, signature_recovery)

    def domain_for(self, network_id: int) -> EIP712Domain:
        """Build the signing domain for a chain."""
        return EIP712Domain(
            name=self.app_name,
            version=self.app_version,
            chain_id=network_id,
            verifying_contract=self.verifying_contract,
        )

    def create_challenge(
        self,
        address: str,
        network_id: int,
        expires_in: int | None = None,
    ) -> EIP712AuthMessage:
        """Create a challenge envelope for an address on a chain."""
        return self.issuer.issue(
            address,
            self.domain_for(network_id),
            self.default_ttl_seconds if expires_in is None else expires_in,
        )

    def verify_challenge(
        self,
        message: EIP712AuthMessage | Mapping[str, Any],
        signature: str,
    ) -> str:
        """Verify a signed challenge and return the authenticated address."""
        return self.verifier.verify(message, signature)


# Singleton instance
_auth_server: AuthServer | None = None


def get_auth_server() -> AuthServer:
    """Get or create auth server singleton from settings."""
    global _auth_server
    if _auth_server is None:
        settings = get_settings()
        settings.require_production_secret()
        _auth_server = AuthServer(
            secret_key=settings.secret_key,
            app_name=settings.app_name,
            app_version=settings.app_version,
            algorithm=settings.jwt_algorithm,
            default_ttl_seconds=settings.challenge_ttl_seconds,
            verifying_contract=settings.verifying_contract,
        )
    return _auth_server
