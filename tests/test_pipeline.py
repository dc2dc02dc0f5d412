import asyncio

import pytest

from darkbars.core.config import Settings
from darkbars.core.errors import BackendUnavailableError, ErrorCategory, GeolocationPositionError
from darkbars.schemas.common import BackendResponse, Coordinate, SearchOutcome
from darkbars.services.backend import VenueBackend
from darkbars.services.location import GeolocationCapability, LocationProvider, ReportedPosition
from darkbars.services.pipeline import RunCoordinator, run_search
from darkbars.services.presentation import render_outcome
from darkbars.services.normalizer import NO_RESULTS_MESSAGE

HERE = Coordinate(latitude=59.33, longitude=18.07)


class StaticBackend(VenueBackend):
    name = "static"

    def __init__(self, payload=None, error=None, sources=None):
        super().__init__(Settings())
        self.payload = payload
        self.error = error
        self.sources = sources or []
        self.calls = []

    async def fetch_venues(self, coord):
        self.calls.append(coord)
        if self.error is not None:
            raise self.error
        return BackendResponse(payload=self.payload, sources=self.sources)


class ExplodingCapability(GeolocationCapability):
    async def get_current_position(self, timeout_ms):
        raise RuntimeError("sensor on fire")


@pytest.mark.asyncio
async def test_successful_run_passes_coordinate_through():
    backend = StaticBackend(payload=[{"name": "Black Lodge", "vibe_tags": ["Metal"], "rating": 4}])
    outcome = await run_search(LocationProvider(ReportedPosition(HERE)), backend)

    assert backend.calls == [HERE]
    assert outcome.error is None
    assert outcome.venues[0].name == "Black Lodge"
    view = render_outcome(outcome)
    assert view["status"] == "ok"
    assert view["venues"][0]["rating"] == "4.0"


@pytest.mark.asyncio
async def test_empty_result_renders_no_results_message():
    outcome = await run_search(LocationProvider(ReportedPosition(HERE)), StaticBackend(payload=[]))
    view = render_outcome(outcome)
    assert view["status"] == "empty"
    assert view["message"] == NO_RESULTS_MESSAGE


@pytest.mark.asyncio
async def test_location_failure_skips_backend():
    backend = StaticBackend(payload=[])
    provider = LocationProvider(ReportedPosition(error_code=GeolocationPositionError.PERMISSION_DENIED))
    outcome = await run_search(provider, backend)
    assert backend.calls == []
    assert outcome.error.category == ErrorCategory.PERMISSION_DENIED


@pytest.mark.asyncio
async def test_unsupported_geolocation():
    outcome = await run_search(LocationProvider(None), StaticBackend(payload=[]))
    assert outcome.error.category == ErrorCategory.GEOLOCATION_UNSUPPORTED


@pytest.mark.asyncio
async def test_non_array_payload_is_malformed():
    outcome = await run_search(LocationProvider(ReportedPosition(HERE)), StaticBackend(payload={"oops": 1}))
    assert outcome.error.category == ErrorCategory.MALFORMED_RESPONSE


@pytest.mark.asyncio
async def test_backend_failure_hides_detail_from_view():
    backend = StaticBackend(error=BackendUnavailableError("POST hook failed with status 500", status_code=500))
    outcome = await run_search(LocationProvider(ReportedPosition(HERE)), backend)
    assert outcome.error.category == ErrorCategory.NETWORK_OR_BACKEND_FAILURE
    view = render_outcome(outcome)
    assert view["status"] == "error"
    assert "500" not in view["error"]["message"]


@pytest.mark.asyncio
async def test_unexpected_error_is_unknown():
    outcome = await run_search(LocationProvider(ExplodingCapability()), StaticBackend(payload=[]))
    assert outcome.error.category == ErrorCategory.UNKNOWN
    assert "sensor on fire" in outcome.error.detail


@pytest.mark.asyncio
async def test_newer_run_supersedes_pending_one():
    coordinator = RunCoordinator()
    release = asyncio.Event()

    async def slow():
        await release.wait()
        return SearchOutcome(venues=[])

    async def fast():
        return SearchOutcome(error=None, venues=[], sources=[])

    first = asyncio.ensure_future(coordinator.submit(slow))
    await asyncio.sleep(0)
    assert coordinator.busy

    second = await coordinator.submit(fast)
    first_outcome = await first

    assert first_outcome.superseded
    assert not second.superseded
    assert coordinator.latest is second
    assert not coordinator.busy
