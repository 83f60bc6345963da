"""Wallet provider types.

Providers follow the EIP-1193 request/event interface and are discovered
through EIP-6963 style announcements, so several injected wallets can be
offered side by side.

See also:
- https://eips.ethereum.org/EIPS/eip-1193
- https://eips.ethereum.org/EIPS/eip-6963
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from pydantic import BaseModel, ConfigDict

# Provider RPC methods
ETH_REQUEST_ACCOUNTS = "eth_requestAccounts"
ETH_CHAIN_ID = "eth_chainId"
ETH_SIGN_TYPED_DATA_V4 = "eth_signTypedData_v4"


class ProviderEvent(str, Enum):
    """Events emitted by an EIP-1193 provider."""

    ACCOUNTS_CHANGED = "accountsChanged"
    CHAIN_CHANGED = "chainChanged"
    DISCONNECT = "disconnect"


ProviderCallback = Callable[..., None]


class EIP1193Provider(Protocol):
    """Injected wallet provider interface."""

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        ...

    def on(self, event_name: str, callback: ProviderCallback) -> None:
        ...

    def remove_listener(self, event_name: str, callback: ProviderCallback) -> None:
        ...


class ProviderInfo(BaseModel):
    """Metadata a wallet announces about itself."""

    model_config = ConfigDict(frozen=True)

    uuid: str
    name: str
    icon: str = ""
    rdns: str = ""


@dataclass(frozen=True)
class ProviderDetail:
    """An announced provider: its metadata plus the handle to talk to it."""

    info: ProviderInfo
    provider: EIP1193Provider

    @property
    def uuid(self) -> str:
        """Deduplication key of the provider."""
        return self.info.uuid
