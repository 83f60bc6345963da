"""Client for the challenge/verify authentication flow."""

import logging

import httpx

from eip712_authn.client.errors import AuthRequestError, NoActiveSessionError
from eip712_authn.client.session import WalletSession
from eip712_authn.common.types import EIP712AuthMessage

logger = logging.getLogger(__name__)

AUTH_SCHEME = "EIP712"


class AuthClient:
    """Requests a challenge, has the wallet sign it, and submits it.

    Endpoints:
    - challenge_url: GET with ``address`` and ``networkId`` query params
    - auth_url: POST with the unsigned envelope as body and the signature
      in the ``Authorization`` header
    """

    def __init__(
        self,
        session: WalletSession,
        challenge_url: str,
        auth_url: str,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize auth client.

        Args:
            session: Connected (or connectable) wallet session
            challenge_url: Challenge endpoint
            auth_url: Verification endpoint
            http_client: Optional shared HTTP client; owned one is created otherwise
        """
        self.session = session
        self.challenge_url = challenge_url
        self.auth_url = auth_url
        self._http_client = http_client
        self._owns_http_client = http_client is None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "AuthClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _require_address(self) -> str:
        address = self.session.get_address()
        if not address:
            raise NoActiveSessionError()
        return address

    async def request_challenge(self) -> EIP712AuthMessage:
        """Request an authentication challenge from the server.

        Raises:
            NoActiveSessionError: If no wallet is connected
            AuthRequestError: If the server rejects the request
        """
        address = self._require_address()
        chain_id = await self.session.get_chain_id()

        client = await self._get_http_client()
        response = await client.get(
            self.challenge_url,
            params={"address": address, "networkId": str(chain_id)},
        )

        if response.is_error:
            raise AuthRequestError(
                f"Failed to fetch authentication challenge: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        return EIP712AuthMessage.model_validate(response.json())

    async def sign_challenge(self, message: EIP712AuthMessage) -> str:
        """Sign a challenge with the connected wallet.

        Raises:
            NoActiveSessionError: If no wallet is connected
        """
        self._require_address()
        return await self.session.sign_typed_data(message)

    async def authenticate(self, message: EIP712AuthMessage, signature: str) -> bool:
        """Submit a signed challenge.

        Raises:
            AuthRequestError: If the server rejects the signature
        """
        client = await self._get_http_client()
        response = await client.post(
            self.auth_url,
            content=message.to_json(),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"{AUTH_SCHEME} {signature}",
            },
        )

        if response.is_error:
            logger.warning(f"Authentication rejected with status {response.status_code}")
            raise AuthRequestError(
                f"Authentication failed: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        return True

    async def authenticate_with_wallet(self) -> bool:
        """Complete authentication flow in one step."""
        challenge = await self.request_challenge()
        signature = await self.sign_challenge(challenge)
        return await self.authenticate(challenge, signature)
