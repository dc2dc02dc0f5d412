"""
Failure taxonomy for the venue search pipeline.

Each failure is raised as a structured exception at its source (geolocation
capability, transport call, decode step) so the classifier can match on the
type instead of reading error text.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCategory(str, Enum):
    """User-facing failure categories."""

    PERMISSION_DENIED = "PermissionDenied"
    POSITION_UNAVAILABLE = "PositionUnavailable"
    LOCATION_TIMEOUT = "LocationTimeout"
    GEOLOCATION_UNSUPPORTED = "GeolocationUnsupported"
    NETWORK_OR_BACKEND_FAILURE = "NetworkOrBackendFailure"
    MALFORMED_RESPONSE = "MalformedResponse"
    UNKNOWN = "Unknown"


USER_MESSAGES: Dict[ErrorCategory, str] = {
    ErrorCategory.PERMISSION_DENIED: (
        "Location permission denied. Please enable it in your browser settings to find nearby bars."
    ),
    ErrorCategory.POSITION_UNAVAILABLE: "Location information is unavailable.",
    ErrorCategory.LOCATION_TIMEOUT: "The request to get user location timed out.",
    ErrorCategory.GEOLOCATION_UNSUPPORTED: "Geolocation is not supported by your browser.",
    ErrorCategory.NETWORK_OR_BACKEND_FAILURE: "Could not fetch data from the server. Please try again later.",
    ErrorCategory.MALFORMED_RESPONSE: (
        "Failed to read the list of bars. The format from the server was unexpected."
    ),
    ErrorCategory.UNKNOWN: "An unexpected error occurred. Please try again.",
}


class DarkBarsError(Exception):
    """Base exception for the venue search pipeline."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}


class GeolocationUnsupportedError(DarkBarsError):
    """Raised when no geolocation capability is available."""

    def __init__(self, message: str = "Geolocation capability is not available"):
        super().__init__(message=message, category=ErrorCategory.GEOLOCATION_UNSUPPORTED)


class GeolocationPositionError(DarkBarsError):
    """
    Raised when the geolocation capability reports a failure.

    ``code`` uses the native reason codes of the platform API:
    1 = permission denied, 2 = position unavailable, 3 = timeout.
    """

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    _CATEGORIES = {
        PERMISSION_DENIED: ErrorCategory.PERMISSION_DENIED,
        POSITION_UNAVAILABLE: ErrorCategory.POSITION_UNAVAILABLE,
        TIMEOUT: ErrorCategory.LOCATION_TIMEOUT,
    }

    def __init__(self, code: int, message: Optional[str] = None):
        category = self._CATEGORIES.get(code, ErrorCategory.POSITION_UNAVAILABLE)
        super().__init__(
            message=message or f"Geolocation failed with code {code}",
            category=category,
            details={"code": code},
        )
        self.code = code


class BackendUnavailableError(DarkBarsError):
    """Raised when a backend call fails at the transport level or returns a non-success status."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        details: Dict[str, Any] = {"detail": detail}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            message=detail,
            category=ErrorCategory.NETWORK_OR_BACKEND_FAILURE,
            details=details,
        )
        self.status_code = status_code


class MalformedResponseError(DarkBarsError):
    """Raised when a backend payload cannot be decoded or has the wrong top-level shape."""

    def __init__(self, detail: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=detail,
            category=ErrorCategory.MALFORMED_RESPONSE,
            details=details,
        )
