"""Wallet client: provider discovery, wallet sessions and the auth flow."""

from eip712_authn.client.auth_client import AuthClient
from eip712_authn.client.channel import AnnouncementChannel, InProcessAnnouncementChannel
from eip712_authn.client.errors import (
    AuthRequestError,
    ConnectionFailedError,
    NoActiveSessionError,
    UnknownProviderError,
    WalletError,
)
from eip712_authn.client.observers import Disposer, ObserverRegistry
from eip712_authn.client.registry import ProviderRegistry
from eip712_authn.client.session import SessionState, WalletSession
from eip712_authn.client.storage import (
    WALLET_ADDRESS_KEY,
    WALLET_PROVIDER_UUID_KEY,
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
)
from eip712_authn.client.types import (
    EIP1193Provider,
    ProviderDetail,
    ProviderEvent,
    ProviderInfo,
)

__all__ = [
    # Session
    "WalletSession",
    "SessionState",
    "AuthClient",
    # Discovery
    "AnnouncementChannel",
    "InProcessAnnouncementChannel",
    "ProviderRegistry",
    "EIP1193Provider",
    "ProviderDetail",
    "ProviderEvent",
    "ProviderInfo",
    # Observers
    "Disposer",
    "ObserverRegistry",
    # Storage
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "WALLET_ADDRESS_KEY",
    "WALLET_PROVIDER_UUID_KEY",
    # Errors
    "WalletError",
    "NoActiveSessionError",
    "ConnectionFailedError",
    "UnknownProviderError",
    "AuthRequestError",
]
