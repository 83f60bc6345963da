"""Challenge verification errors.

Each failure mode is a distinct type with a stable ``code`` so callers can
tell an expired challenge from a forged signature or a wrong signer.
"""


class AuthError(Exception):
    """Base class for challenge verification failures."""

    code = "auth_error"
    default_message = "Authentication failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidMessageError(AuthError):
    """Envelope is missing its domain or message, or is malformed."""

    code = "invalid_message"
    default_message = "Invalid EIP-712 message"


class InvalidTokenError(AuthError):
    """Challenge token is undecodable, tampered, expired, or lacks an address."""

    code = "invalid_token"
    default_message = "Invalid challenge token"


class InvalidSignatureError(AuthError):
    """Signature cannot be recovered to a valid address."""

    code = "invalid_signature"
    default_message = "Invalid signature"


class SignatureMismatchError(AuthError):
    """Recovered signer differs from the address embedded in the challenge."""

    code = "signature_mismatch"
    default_message = "Signature does not match expected address"


class TokenError(Exception):
    """Raised by a token service when a token cannot be verified."""


class SignatureRecoveryError(Exception):
    """Raised by a signature recovery backend when recovery fails."""
