"""Wallet provider discovery."""

import logging
from typing import Callable

from eip712_authn.client.channel import AnnouncementChannel
from eip712_authn.client.observers import Disposer, ObserverRegistry
from eip712_authn.client.types import ProviderDetail

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Collects announced wallet providers, deduplicated by uuid.

    Records are kept in first-seen order and never replaced; repeated
    announcements of a known uuid are ignored. Discovery has no timeout:
    callers that need a provider list within a deadline must wait for it
    themselves.
    """

    def __init__(self, channel: AnnouncementChannel):
        """Initialize provider registry.

        Args:
            channel: Broadcast channel providers announce themselves on
        """
        self.channel = channel
        self._providers: dict[str, ProviderDetail] = {}
        self._listeners = ObserverRegistry("provider-list")
        self._unsubscribe: Disposer | None = None

    @property
    def started(self) -> bool:
        """Whether the registry is listening for announcements."""
        return self._unsubscribe is not None

    def start(self) -> None:
        """Listen for announcements and ask providers to announce."""
        if self.started:
            return
        self._unsubscribe = self.channel.on_announce(self._handle_announcement)
        self.channel.request_announcements()

    def close(self) -> None:
        """Stop listening for announcements."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_announcement(self, detail: ProviderDetail) -> None:
        """Add a newly announced provider."""
        if detail.uuid in self._providers:
            return

        self._providers[detail.uuid] = detail
        logger.info(f"Discovered wallet provider {detail.info.name} ({detail.uuid})")
        self._listeners.notify(detail)

    def get_providers(self) -> list[ProviderDetail]:
        """Get discovered providers in first-seen order."""
        return list(self._providers.values())

    def find(self, uuid: str) -> ProviderDetail | None:
        """Look up a provider by uuid."""
        return self._providers.get(uuid)

    def __len__(self) -> int:
        return len(self._providers)

    def on_provider_list_change(
        self, listener: Callable[[ProviderDetail], None]
    ) -> Disposer:
        """Listen for newly discovered providers.

        Args:
            listener: Called with each newly added ProviderDetail

        Returns:
            Disposer removing the listener
        """
        return self._listeners.subscribe(listener)
