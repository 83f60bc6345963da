"""Tests for the authentication client flow."""

import json

import httpx
import pytest
from eth_account import Account

from eip712_authn.client import (
    AuthClient,
    AuthRequestError,
    InMemoryStore,
    InProcessAnnouncementChannel,
    NoActiveSessionError,
    ProviderDetail,
    ProviderInfo,
    ProviderRegistry,
    WalletSession,
)
from eip712_authn.common.types import EIP712AuthMessage
from eip712_authn.services.auth import get_auth_server

BASE_URL = "http://testserver"
CHALLENGE_URL = f"{BASE_URL}/api/v1/auth/challenge"
AUTH_URL = f"{BASE_URL}/api/v1/auth/verify"


@pytest.fixture
def session():
    return WalletSession(ProviderRegistry(InProcessAnnouncementChannel()), InMemoryStore())


@pytest.fixture
def asgi_client(app, auth_server):
    """HTTP client talking to the application in process."""
    app.dependency_overrides[get_auth_server] = lambda: auth_server
    yield httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL)
    app.dependency_overrides.clear()


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def connect(session, provider) -> None:
    detail = ProviderDetail(
        info=ProviderInfo(uuid="p1", name="Test Wallet"),
        provider=provider,
    )
    await session.connect(detail)


class TestAuthClient:
    """Tests for AuthClient against the real endpoints."""

    @pytest.mark.asyncio
    async def test_authenticate_with_wallet(self, session, asgi_client, make_provider, account):
        """Test the full challenge, sign, verify flow succeeds."""
        await connect(session, make_provider(accounts=[account.address], signer=account))
        client = AuthClient(session, CHALLENGE_URL, AUTH_URL, http_client=asgi_client)

        assert await client.authenticate_with_wallet() is True
        await asgi_client.aclose()

    @pytest.mark.asyncio
    async def test_request_challenge(self, session, asgi_client, make_provider, account):
        """Test the challenge targets the wallet's address and chain."""
        await connect(session, make_provider(accounts=[account.address], chain_id="0x38"))
        client = AuthClient(session, CHALLENGE_URL, AUTH_URL, http_client=asgi_client)

        challenge = await client.request_challenge()

        assert isinstance(challenge, EIP712AuthMessage)
        assert challenge.domain.chain_id == 56
        assert challenge.message.challenge
        await asgi_client.aclose()

    @pytest.mark.asyncio
    async def test_wrong_account_is_rejected(self, session, asgi_client, make_provider, account):
        """Test a wallet signing with another key is refused by the server."""
        provider = make_provider(accounts=[account.address], signer=Account.create())
        await connect(session, provider)
        client = AuthClient(session, CHALLENGE_URL, AUTH_URL, http_client=asgi_client)

        with pytest.raises(AuthRequestError) as exc_info:
            await client.authenticate_with_wallet()

        assert exc_info.value.status_code == 401
        assert "signature_mismatch" in exc_info.value.body
        await asgi_client.aclose()


class TestAuthClientTransport:
    """Tests for AuthClient request handling."""

    @pytest.mark.asyncio
    async def test_request_challenge_requires_wallet(self, session):
        """Test requesting a challenge needs a connected wallet."""
        client = AuthClient(session, CHALLENGE_URL, AUTH_URL)

        with pytest.raises(NoActiveSessionError):
            await client.request_challenge()

    @pytest.mark.asyncio
    async def test_sign_challenge_requires_wallet(self, session, auth_server):
        """Test signing a challenge needs a connected wallet."""
        client = AuthClient(session, CHALLENGE_URL, AUTH_URL)
        envelope = auth_server.create_challenge("0x" + "1" * 40, 1)

        with pytest.raises(NoActiveSessionError):
            await client.sign_challenge(envelope)

    @pytest.mark.asyncio
    async def test_request_challenge_query(self, session, make_provider, auth_server):
        """Test address and networkId are sent as query params."""
        address = "0x" + "1" * 40
        seen = {}
        envelope = auth_server.create_challenge(address, 5)

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=envelope.to_typed_data())

        await connect(session, make_provider(accounts=[address], chain_id="0x5"))
        client = AuthClient(session, CHALLENGE_URL, AUTH_URL, http_client=mock_client(handler))

        result = await client.request_challenge()

        assert seen == {"address": address, "networkId": "5"}
        assert result == envelope

    @pytest.mark.asyncio
    async def test_request_challenge_server_error(self, session, make_provider):
        """Test a failed challenge request raises with the server text."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        await connect(session, make_provider(accounts=["0x" + "1" * 40]))
        client = AuthClient(session, CHALLENGE_URL, AUTH_URL, http_client=mock_client(handler))

        with pytest.raises(AuthRequestError) as exc_info:
            await client.request_challenge()

        assert exc_info.value.status_code == 500
        assert "boom" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_authenticate_sends_signature_header(self, session, auth_server):
        """Test the envelope is the body and the signature the header."""
        envelope = auth_server.create_challenge("0x" + "1" * 40, 1)
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"address": "0x" + "1" * 40})

        client = AuthClient(session, CHALLENGE_URL, AUTH_URL, http_client=mock_client(handler))

        assert await client.authenticate(envelope, "0xsig") is True
        assert seen["authorization"] == "EIP712 0xsig"
        assert seen["body"] == envelope.to_typed_data()

    @pytest.mark.asyncio
    async def test_authenticate_rejected(self, session, auth_server):
        """Test a rejected signature raises."""
        envelope = auth_server.create_challenge("0x" + "1" * 40, 1)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"detail": {"error": "invalid_token"}})

        client = AuthClient(session, CHALLENGE_URL, AUTH_URL, http_client=mock_client(handler))

        with pytest.raises(AuthRequestError) as exc_info:
            await client.authenticate(envelope, "0xsig")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_owned_client_closed(self, session):
        """Test the context manager closes a client it created."""
        async with AuthClient(session, CHALLENGE_URL, AUTH_URL) as client:
            http_client = await client._get_http_client()

        assert http_client.is_closed
