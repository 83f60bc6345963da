"""Authentication services module."""

from eip712_authn.services.auth.challenge import (
    DEFAULT_TTL_SECONDS,
    AuthServer,
    ChallengeIssuer,
    ChallengeVerifier,
    get_auth_server,
)
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

__all__ = [
    # Challenges
    "DEFAULT_TTL_SECONDS",
    "AuthServer",
    "ChallengeIssuer",
    "ChallengeVerifier",
    "get_auth_server",
    # Capabilities
    "JWTTokenService",
    "TokenService",
    "SignatureRecovery",
    "TypedDataSignatureRecovery",
    # Errors
    "AuthError",
    "InvalidMessageError",
    "InvalidTokenError",
    "InvalidSignatureError",
    "SignatureMismatchError",
    "TokenError",
    "SignatureRecoveryError",
]
