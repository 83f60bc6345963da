"""Provider announcement channel.

Discovery uses two broadcasts: ``announce-provider`` carries a provider
detail, ``request-provider`` carries nothing and asks every listening
provider to announce itself again.
"""

import logging
from typing import Callable, Protocol

from eip712_authn.client.observers import Disposer, ObserverRegistry
from eip712_authn.client.types import ProviderDetail

logger = logging.getLogger(__name__)

ANNOUNCE_PROVIDER = "announce-provider"
REQUEST_PROVIDER = "request-provider"

AnnounceHandler = Callable[[ProviderDetail], None]
RequestHandler = Callable[[], None]


class AnnouncementChannel(Protocol):
    """Broadcast bus used by providers and registries to find each other."""

    def announce(self, detail: ProviderDetail) -> None:
        ...

    def on_announce(self, handler: AnnounceHandler) -> Disposer:
        ...

    def on_request(self, handler: RequestHandler) -> Disposer:
        ...

    def request_announcements(self) -> None:
        ...


class InProcessAnnouncementChannel:
    """Announcement channel for providers living in the same process."""

    def __init__(self):
        """Initialize channel."""
        self._announce_handlers = ObserverRegistry(ANNOUNCE_PROVIDER)
        self._request_handlers = ObserverRegistry(REQUEST_PROVIDER)

    def announce(self, detail: ProviderDetail) -> None:
        """Broadcast a provider announcement."""
        logger.debug(f"{ANNOUNCE_PROVIDER}: {detail.info.name} ({detail.uuid})")
        self._announce_handlers.notify(detail)

    def on_announce(self, handler: AnnounceHandler) -> Disposer:
        """Listen for provider announcements."""
        return self._announce_handlers.subscribe(handler)

    def on_request(self, handler: RequestHandler) -> Disposer:
        """Listen for announcement requests."""
        return self._request_handlers.subscribe(handler)

    def request_announcements(self) -> None:
        """Ask every listening provider to announce itself."""
        logger.debug(REQUEST_PROVIDER)
        self._request_handlers.notify()

    def expose(self, detail: ProviderDetail) -> Disposer:
        """Make a provider discoverable.

        The provider announces itself now and again on every request.

        Args:
            detail: Provider to expose

        Returns:
            Disposer that stops answering requests
        """
        dispose = self.on_request(lambda: self.announce(detail))
        self.announce(detail)
        return dispose
