"""Challenge token service backed by JWT."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from jose import JWTError, jwt

from eip712_authn.services.auth.errors import TokenError

logger = logging.getLogger(__name__)


class TokenService(Protocol):
    """Signs claims into an opaque, expiring token and verifies it back."""

    def sign(self, claims: dict[str, Any], ttl_seconds: int) -> str:
        ...

    def verify(self, token: str) -> dict[str, Any]:
        ...


class JWTTokenService:
    """Service for creating and validating challenge JWTs."""

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        """Initialize JWT token service.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT algorithm (default: HS256)
        """
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self.secret_key = secret_key
        self.algorithm = algorithm

    def sign(self, claims: dict[str, Any], ttl_seconds: int) -> str:
        """Create a signed token.

        Args:
            claims: Claims to embed
            ttl_seconds: Token lifetime in seconds

        Returns:
            Encoded JWT
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
            # Unique per issuance so same-second challenges still differ
            "jti": secrets.token_hex(16),
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Verify and decode a token.

        Args:
            token: JWT to verify

        Returns:
            Decoded claims

        Raises:
            TokenError: If the token is malformed, tampered or expired
        """
        if not isinstance(token, str) or not token:
            raise TokenError("Token must be a non-empty string")

        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug(f"Challenge token rejected: {e}")
            raise TokenError(str(e)) from e
