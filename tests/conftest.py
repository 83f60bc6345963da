"""Pytest configuration and fixtures."""

import json
from collections import defaultdict
from typing import Any

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data
from fastapi.testclient import TestClient
from web3 import Web3

TEST_SECRET = "test-secret-key-for-testing-only"


class FakeProvider:
    """In-memory EIP-1193 provider backed by a local key."""

    def __init__(
        self,
        accounts: list[str] | None = None,
        chain_id: str = "0x1",
        signer: Any = None,
    ):
        self.accounts = accounts if accounts is not None else []
        self.chain_id = chain_id
        self.signer = signer
        self.error: Exception | None = None
        self.requests: list[tuple[str, Any]] = []
        self.listeners: dict[str, list] = defaultdict(list)

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        self.requests.append((method, params))
        if self.error is not None:
            raise self.error
        if method == "eth_requestAccounts":
            return list(self.accounts)
        if method == "eth_chainId":
            return self.chain_id
        if method == "eth_signTypedData_v4":
            _, data = params
            signable = encode_typed_data(full_message=json.loads(data))
            return Web3.to_hex(self.signer.sign_message(signable).signature)
        raise ValueError(f"Unsupported method: {method}")

    def on(self, event_name: str, callback) -> None:
        self.listeners[event_name].append(callback)

    def remove_listener(self, event_name: str, callback) -> None:
        self.listeners[event_name].remove(callback)

    def emit(self, event_name: str, *args: Any) -> None:
        for callback in list(self.listeners[event_name]):
            callback(*args)

    def listener_count(self) -> int:
        return sum(len(callbacks) for callbacks in self.listeners.values())


@pytest.fixture
def make_provider():
    """Factory for fake providers."""

    def factory(**kwargs) -> FakeProvider:
        return FakeProvider(**kwargs)

    return factory


@pytest.fixture
def account():
    """Fresh local account."""
    return Account.create()


@pytest.fixture
def sign_envelope():
    """Sign an envelope the way a wallet does for eth_signTypedData_v4."""

    def sign(signer, envelope) -> str:
        signable = encode_typed_data(full_message=envelope.to_typed_data())
        return Web3.to_hex(signer.sign_message(signable).signature)

    return sign


@pytest.fixture(scope="function")
def settings():
    """Create settings instance for testing."""
    from eip712_authn.core.config import Settings

    return Settings(environment="testing", secret_key=TEST_SECRET)


@pytest.fixture
def auth_server():
    """Auth server with a fixed test secret."""
    from eip712_authn.services.auth import AuthServer

    return AuthServer(
        secret_key=TEST_SECRET,
        app_name="Test App",
        app_version="1",
    )


@pytest.fixture(scope="session")
def app():
    """Create FastAPI application for testing."""
    from eip712_authn.main import create_app

    return create_app()


@pytest.fixture
def client(app, auth_server):
    """Create test client bound to the test auth server."""
    from eip712_authn.services.auth import get_auth_server

    app.dependency_overrides[get_auth_server] = lambda: auth_server
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
