# darkbars/services/classifier.py
import json

import httpx
from pydantic import ValidationError

from ..core.errors import (
    BackendUnavailableError,
    DarkBarsError,
    ErrorCategory,
    GeolocationPositionError,
    GeolocationUnsupportedError,
    MalformedResponseError,
)
from ..schemas.common import ClassifiedError


def _detail(failure: BaseException) -> str:
    return str(failure) or type(failure).__name__


def classify(failure: BaseException) -> ClassifiedError:
    """Map any pipeline failure to one category. First match wins."""
    # (a) geolocation, by native reason code
    if isinstance(failure, (GeolocationUnsupportedError, GeolocationPositionError)):
        return ClassifiedError(category=failure.category, detail=_detail(failure))

    # (b) decode / shape
    if isinstance(failure, (MalformedResponseError, json.JSONDecodeError, ValidationError)):
        return ClassifiedError(category=ErrorCategory.MALFORMED_RESPONSE, detail=_detail(failure))

    # (c) transport / backend status
    if isinstance(failure, (BackendUnavailableError, httpx.HTTPError)):
        return ClassifiedError(category=ErrorCategory.NETWORK_OR_BACKEND_FAILURE, detail=_detail(failure))

    if isinstance(failure, DarkBarsError):
        return ClassifiedError(category=failure.category, detail=_detail(failure))

    # (d) everything else
    return ClassifiedError(category=ErrorCategory.UNKNOWN, detail=f"{type(failure).__name__}: {_detail(failure)}")
