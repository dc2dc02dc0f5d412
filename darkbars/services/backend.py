"""
Backend strategy interface.

A backend takes a coordinate and returns the raw, untrusted venue payload
(plus any citation sources). It never validates entries; that is the
normalizer's job.
"""

from abc import ABC, abstractmethod
import logging
from typing import Optional

import httpx

from ..core.config import Settings
from ..schemas.common import BackendResponse, Coordinate


class VenueBackend(ABC):
    """Base class for venue backends."""

    name: str = "backend"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def fetch_venues(self, coord: Coordinate) -> BackendResponse:
        """Request venues near ``coord``.

        Raises:
            BackendUnavailableError: transport failure or non-success status
            MalformedResponseError: the body could not be decoded/unwrapped
        """


def build_backend(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> VenueBackend:
    """Backend selected by ``VENUE_BACKEND``."""
    from .grounded_search import GroundedSearchBackend
    from .structured_schema import StructuredSchemaBackend
    from .webhook_relay import WebhookRelayBackend

    backends = {
        "structured": StructuredSchemaBackend,
        "grounded": GroundedSearchBackend,
        "webhook": WebhookRelayBackend,
    }
    try:
        cls = backends[settings.venue_backend]
    except KeyError:
        raise ValueError(f"Unknown venue backend: {settings.venue_backend!r}") from None
    return cls(settings, transport=transport)
