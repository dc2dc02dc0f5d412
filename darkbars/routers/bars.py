# darkbars/routers/bars.py
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request

from ..core.config import settings
from ..core.errors import ErrorCategory
from ..schemas.common import ClassifiedError, Coordinate, SearchOutcome
from ..schemas.requests import BarsQuery, PermissionUpdate
from ..services.backend import VenueBackend, build_backend
from ..services.location import GeolocationCapability, IpGeolocation, LocationProvider, ReportedPosition
from ..services.permissions import PermissionMonitor, PermissionState, trigger_enabled
from ..services.pipeline import RunCoordinator, run_search
from ..services.presentation import render_outcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bars", tags=["bars"])


# -------- dependencies --------
def get_backend() -> VenueBackend:
    return build_backend(settings)


def client_ip(request: Request) -> Optional[str]:
    """Caller's address; the first X-Forwarded-For hop wins when behind a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def get_fallback_capability(request: Request) -> Optional[GeolocationCapability]:
    """Capability used when the browser sends neither a fix nor a failure."""
    if not settings.ip_geolocation_url:
        return None
    ip = client_ip(request)
    if ip is None:
        return None
    # the lookup must locate the caller, not this server
    return IpGeolocation(settings.ip_geolocation_url.format(ip=quote(ip, safe=":")))


def get_permission_monitor(request: Request) -> Optional[PermissionMonitor]:
    return getattr(request.app.state, "permissions", None)


def get_coordinator(request: Request) -> RunCoordinator:
    return request.app.state.coordinator


def _capability_for(q: BarsQuery, fallback: Optional[GeolocationCapability]) -> Optional[GeolocationCapability]:
    if not q.geolocation_supported:
        return None
    if q.geolocation_error is not None:
        return ReportedPosition(error_code=q.geolocation_error)
    if q.has_position:
        return ReportedPosition(Coordinate(latitude=q.latitude, longitude=q.longitude))
    return fallback


# =========================
# SEARCH
# =========================
@router.post("/search")
async def search_bars(
    q: BarsQuery,
    backend: VenueBackend = Depends(get_backend),
    fallback: Optional[GeolocationCapability] = Depends(get_fallback_capability),
    permissions: Optional[PermissionMonitor] = Depends(get_permission_monitor),
    coordinator: RunCoordinator = Depends(get_coordinator),
):
    provider = LocationProvider(_capability_for(q, fallback), permissions)

    # the trigger is disabled while denied; answer without touching the capability
    if provider.current_permission_state() == PermissionState.DENIED:
        logger.info("Search refused: geolocation permission is denied")
        denied = ClassifiedError(category=ErrorCategory.PERMISSION_DENIED, detail="permission state is denied")
        return render_outcome(SearchOutcome(error=denied))

    outcome = await coordinator.submit(
        lambda: run_search(provider, backend, settings.geolocation_timeout_ms)
    )
    return render_outcome(outcome)


# =========================
# PERMISSION MIRROR
# =========================
@router.get("/permission")
async def permission_status(
    permissions: Optional[PermissionMonitor] = Depends(get_permission_monitor),
    coordinator: RunCoordinator = Depends(get_coordinator),
):
    state = permissions.state if permissions is not None else None
    return {
        "state": state.value if state is not None else None,
        "trigger_enabled": trigger_enabled(state, coordinator.busy),
        "busy": coordinator.busy,
    }


@router.put("/permission")
async def update_permission(
    update: PermissionUpdate,
    permissions: Optional[PermissionMonitor] = Depends(get_permission_monitor),
    coordinator: RunCoordinator = Depends(get_coordinator),
):
    if permissions is None:
        # no pre-check capability: accept and ignore
        return {"state": None, "trigger_enabled": trigger_enabled(None, coordinator.busy), "busy": coordinator.busy}
    permissions.update(update.state)
    return {
        "state": permissions.state.value,
        "trigger_enabled": trigger_enabled(permissions.state, coordinator.busy),
        "busy": coordinator.busy,
    }
