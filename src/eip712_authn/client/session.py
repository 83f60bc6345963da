"""Wallet session state machine."""

import asyncio
import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

from eip712_authn.client.errors import (
    ConnectionFailedError,
    NoActiveSessionError,
    UnknownProviderError,
)
from eip712_authn.client.observers import Disposer, ObserverRegistry
from eip712_authn.client.registry import ProviderRegistry
from eip712_authn.client.storage import (
    WALLET_ADDRESS_KEY,
    WALLET_PROVIDER_UUID_KEY,
    KeyValueStore,
)
from eip712_authn.client.types import (
    ETH_CHAIN_ID,
    ETH_REQUEST_ACCOUNTS,
    ETH_SIGN_TYPED_DATA_V4,
    EIP1193Provider,
    ProviderCallback,
    ProviderDetail,
    ProviderEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_GRACE_SECONDS = 0.5


class SessionState(str, Enum):
    """Wallet session state."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class WalletSession:
    """Tracks the one wallet provider and address the user is connected with.

    The session is the only writer of its state; readers subscribe through
    the ``on_*`` methods. It runs on a single asyncio loop and awaits the
    provider without any timeout, since wallets may wait on the user for
    arbitrarily long. An abandoned ``connect()`` whose provider answers late
    still completes and updates the session; ``disconnect()`` resets it.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        store: KeyValueStore,
        reconnect_grace_seconds: float = DEFAULT_RECONNECT_GRACE_SECONDS,
    ):
        """Initialize wallet session.

        Args:
            registry: Provider registry; started if it is not already
            store: Store for the last connection (address and provider uuid)
            reconnect_grace_seconds: Wait for late announcements on reconnect
        """
        self.registry = registry
        self.store = store
        self.reconnect_grace_seconds = reconnect_grace_seconds

        self._selected_provider: ProviderDetail | None = None
        self._address: str | None = None
        self._subscriptions: list[tuple[EIP1193Provider, str, ProviderCallback]] = []

        self._address_listeners = ObserverRegistry("address-change")
        self._provider_listeners = ObserverRegistry("provider-change")

        self.registry.start()

    @property
    def state(self) -> SessionState:
        """Get current session state."""
        if self._selected_provider is None:
            return SessionState.DISCONNECTED
        return SessionState.CONNECTED

    def get_providers(self) -> list[ProviderDetail]:
        """Get all discovered wallet providers."""
        return self.registry.get_providers()

    def get_address(self) -> str | None:
        """Get the connected address."""
        return self._address

    def get_selected_provider(self) -> ProviderDetail | None:
        """Get the connected provider."""
        return self._selected_provider

    async def connect(self, detail: ProviderDetail) -> str | None:
        """Connect to a wallet provider.

        Args:
            detail: Provider to connect to

        Returns:
            Connected address, or None if the wallet returned no accounts

        Raises:
            ConnectionFailedError: If the provider rejects the account request
        """
        try:
            accounts = await detail.provider.request(ETH_REQUEST_ACCOUNTS)
        except Exception as e:
            logger.error(f"Error connecting wallet {detail.info.name}: {e}")
            raise ConnectionFailedError() from e

        if not isinstance(accounts, list) or not accounts:
            logger.info(f"Wallet {detail.info.name} returned no accounts")
            return None

        self._detach_listeners()

        self._address = accounts[0]
        self._selected_provider = detail
        self._attach_listeners(detail)

        self.store.set(WALLET_ADDRESS_KEY, self._address)
        self.store.set(WALLET_PROVIDER_UUID_KEY, detail.uuid)

        logger.info(f"Connected to {detail.info.name} as {self._address}")
        self._notify_address_changed()
        self._notify_provider_changed()

        return self._address

    def disconnect(self) -> None:
        """Disconnect the current wallet."""
        self._detach_listeners()

        self._address = None
        self._selected_provider = None

        self.store.remove(WALLET_ADDRESS_KEY)
        self.store.remove(WALLET_PROVIDER_UUID_KEY)

        logger.info("Wallet disconnected")
        self._notify_address_changed()
        self._notify_provider_changed()

    async def reconnect(self) -> str | None:
        """Reconnect to the previously connected wallet.

        The stored address is not trusted: the provider is asked for its
        accounts again, so an account switched while away is picked up.

        Returns:
            Connected address, or None if nothing was stored or the wallet
            returned no accounts

        Raises:
            UnknownProviderError: If the stored provider was not discovered
            ConnectionFailedError: If the provider rejects the account request
        """
        saved_address = self.store.get(WALLET_ADDRESS_KEY)
        saved_provider_uuid = self.store.get(WALLET_PROVIDER_UUID_KEY)

        if not saved_address or not saved_provider_uuid:
            return None

        if not self.registry.get_providers():
            await asyncio.sleep(self.reconnect_grace_seconds)

        detail = self.registry.find(saved_provider_uuid)
        if detail is None:
            logger.warning(f"Stored wallet provider {saved_provider_uuid} not found")
            raise UnknownProviderError(saved_provider_uuid)

        return await self.connect(detail)

    async def sign_typed_data(self, payload: BaseModel | Mapping[str, Any] | str) -> str:
        """Sign EIP-712 typed data with the connected wallet.

        Args:
            payload: Typed data as a model, a mapping or a JSON string

        Returns:
            Hex-encoded signature

        Raises:
            NoActiveSessionError: If no wallet is connected
        """
        detail, address = self._require_session()

        return await detail.provider.request(
            ETH_SIGN_TYPED_DATA_V4,
            [address, _typed_data_json(payload)],
        )

    async def get_chain_id(self) -> int:
        """Get the chain ID of the connected wallet.

        Raises:
            NoActiveSessionError: If no wallet is connected
        """
        detail, _ = self._require_session()

        chain_id = await detail.provider.request(ETH_CHAIN_ID)
        if isinstance(chain_id, int):
            return chain_id
        return int(chain_id, 16)

    def on_address_change(self, listener: Callable[[str | None], None]) -> Disposer:
        """Add listener for address changes."""
        return self._address_listeners.subscribe(listener)

    def on_provider_change(
        self, listener: Callable[[ProviderDetail | None], None]
    ) -> Disposer:
        """Add listener for provider changes."""
        return self._provider_listeners.subscribe(listener)

    def on_provider_list_change(
        self, listener: Callable[[ProviderDetail], None]
    ) -> Disposer:
        """Add listener for newly discovered providers."""
        return self.registry.on_provider_list_change(listener)

    def _require_session(self) -> tuple[ProviderDetail, str]:
        if self._selected_provider is None or self._address is None:
            raise NoActiveSessionError()
        return self._selected_provider, self._address

    def _attach_listeners(self, detail: ProviderDetail) -> None:
        """Subscribe to account, chain and disconnect events of a provider."""

        def handle_accounts_changed(accounts: Any = None, *_: Any) -> None:
            if self._selected_provider is not detail:
                return
            if not isinstance(accounts, list):
                logger.error("Invalid accounts data received")
                return

            if not accounts:
                # User disconnected their wallet
                self.disconnect()
            elif accounts[0] != self._address:
                self._address = accounts[0]
                logger.info(f"Wallet account changed to {self._address}")
                self._notify_address_changed()

        def handle_chain_changed(*_: Any) -> None:
            if self._selected_provider is not detail:
                return
            # Consumers treat this as a signal to re-check the session
            self._notify_address_changed()

        def handle_disconnect(*_: Any) -> None:
            if self._selected_provider is not detail:
                return
            self.disconnect()

        handlers = {
            ProviderEvent.ACCOUNTS_CHANGED.value: handle_accounts_changed,
            ProviderEvent.CHAIN_CHANGED.value: handle_chain_changed,
            ProviderEvent.DISCONNECT.value: handle_disconnect,
        }
        for event_name, handler in handlers.items():
            detail.provider.on(event_name, handler)
            self._subscriptions.append((detail.provider, event_name, handler))

    def _detach_listeners(self) -> None:
        """Remove every provider event subscription."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for provider, event_name, handler in subscriptions:
            provider.remove_listener(event_name, handler)

    def _notify_address_changed(self) -> None:
        self._address_listeners.notify(self._address)

    def _notify_provider_changed(self) -> None:
        self._provider_listeners.notify(self._selected_provider)


def _typed_data_json(payload: BaseModel | Mapping[str, Any] | str) -> str:
    """Serialize typed data to the JSON string eth_signTypedData_v4 expects."""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(by_alias=True, exclude_none=True)
    return json.dumps(dict(payload))
