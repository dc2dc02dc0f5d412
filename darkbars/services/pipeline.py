"""
One search run: locate, fetch, normalize.

``run_search`` is the only place failures are classified. Components below it
raise and never recover. ``RunCoordinator`` keeps a single results slot and
lets a newer run supersede an older one that is still pending.
"""

import asyncio
import itertools
import logging
from typing import Awaitable, Callable, Optional

from ..schemas.common import SearchOutcome
from .backend import VenueBackend
from .classifier import classify
from .location import DEFAULT_TIMEOUT_MS, LocationProvider
from .normalizer import normalize

logger = logging.getLogger(__name__)


async def find_venues(
    provider: LocationProvider,
    backend: VenueBackend,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> SearchOutcome:
    """Serial pipeline; any failure propagates to the caller."""
    coord = await provider.acquire(timeout_ms)
    response = await backend.fetch_venues(coord)
    venues = normalize(response.payload)
    logger.info("Backend returned %d venues", len(venues), extra={"backend": backend.name})
    return SearchOutcome(venues=venues, sources=response.sources)


async def run_search(
    provider: LocationProvider,
    backend: VenueBackend,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> SearchOutcome:
    """Top-level run handler: the single point that classifies failures."""
    try:
        return await find_venues(provider, backend, timeout_ms)
    except Exception as e:
        error = classify(e)
        logger.warning(
            "Search run failed: %s",
            error.category.value,
            extra={"category": error.category.value, "detail": error.detail, "backend": backend.name},
        )
        return SearchOutcome(error=error)


class RunCoordinator:
    """
    Owner of the shared results slot.

    Starting a run cancels the one still in flight, so only the most recent
    run ever writes ``latest``.
    """

    def __init__(self):
        self._task: Optional[asyncio.Task] = None
        self._ids = itertools.count(1)
        self.latest: Optional[SearchOutcome] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    async def submit(self, start: Callable[[], Awaitable[SearchOutcome]]) -> SearchOutcome:
        run_id = next(self._ids)
        if self.busy:
            logger.info("Run %d supersedes the pending run", run_id, extra={"run_id": run_id})
            self._task.cancel()

        task = asyncio.ensure_future(start())
        self._task = task
        try:
            outcome = await task
        except asyncio.CancelledError:
            if task.cancelled() and self._task is not task:
                return SearchOutcome(superseded=True)
            raise
        finally:
            if self._task is task:
                self._task = None

        self.latest = outcome
        return outcome
