"""
Location acquisition.

A geolocation capability produces one fresh fix per call. ``acquire_location``
bounds that call with a timeout and never retries or reuses an earlier fix.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from ..core.errors import GeolocationPositionError, GeolocationUnsupportedError
from ..schemas.common import Coordinate
from .permissions import PermissionCallback, PermissionMonitor, PermissionState

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10000


class GeolocationCapability(ABC):
    """Platform geolocation: a single-shot position request."""

    @abstractmethod
    async def get_current_position(self, timeout_ms: int) -> Coordinate:
        """Return a fresh fix or raise ``GeolocationPositionError``."""


class ReportedPosition(GeolocationCapability):
    """Fix (or failure code) that the browser already obtained and sent along with the request."""

    def __init__(self, coordinate: Optional[Coordinate] = None, error_code: Optional[int] = None):
        if coordinate is None and error_code is None:
            raise ValueError("either a coordinate or an error code is required")
        self.coordinate = coordinate
        self.error_code = error_code

    async def get_current_position(self, timeout_ms: int) -> Coordinate:
        if self.error_code is not None:
            raise GeolocationPositionError(self.error_code, "Browser reported a geolocation failure")
        return self.coordinate


class IpGeolocation(GeolocationCapability):
    """Approximate fix from an IP geolocation endpoint returning ``latitude``/``longitude``."""

    def __init__(self, url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.transport = transport

    async def get_current_position(self, timeout_ms: int) -> Coordinate:
        async with httpx.AsyncClient(timeout=timeout_ms / 1000.0, transport=self.transport) as client:
            try:
                r = await client.get(self.url, headers={"Accept": "application/json"})
            except httpx.TimeoutException as e:
                raise GeolocationPositionError(GeolocationPositionError.TIMEOUT, f"IP lookup timed out: {e!r}") from e
            except httpx.HTTPError as e:
                raise GeolocationPositionError(
                    GeolocationPositionError.POSITION_UNAVAILABLE, f"IP lookup failed: {e!r}"
                ) from e

        if not r.is_success:
            raise GeolocationPositionError(
                GeolocationPositionError.POSITION_UNAVAILABLE,
                f"IP lookup returned status {r.status_code}",
            )
        try:
            data = r.json()
            return Coordinate(latitude=data["latitude"], longitude=data["longitude"])
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            raise GeolocationPositionError(
                GeolocationPositionError.POSITION_UNAVAILABLE, f"IP lookup returned no usable position: {e}"
            ) from e


async def acquire_location(
    capability: Optional[GeolocationCapability],
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> Coordinate:
    if capability is None:
        raise GeolocationUnsupportedError()
    try:
        coord = await asyncio.wait_for(capability.get_current_position(timeout_ms), timeout_ms / 1000.0)
    except asyncio.TimeoutError as e:
        raise GeolocationPositionError(
            GeolocationPositionError.TIMEOUT, f"No position within {timeout_ms} ms"
        ) from e
    logger.debug("Acquired position %.4f,%.4f", coord.latitude, coord.longitude)
    return coord


class LocationProvider:
    """Geolocation capability plus the optional permission pre-check."""

    def __init__(
        self,
        capability: Optional[GeolocationCapability],
        permissions: Optional[PermissionMonitor] = None,
    ):
        self.capability = capability
        self.permissions = permissions

    async def acquire(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> Coordinate:
        return await acquire_location(self.capability, timeout_ms)

    def current_permission_state(self) -> Optional[PermissionState]:
        if self.permissions is None:
            return None
        return self.permissions.state

    def on_permission_change(self, callback: PermissionCallback) -> Callable[[], None]:
        if self.permissions is None:
            return lambda: None
        return self.permissions.subscribe(callback)
