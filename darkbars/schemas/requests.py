# darkbars/schemas/requests.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional

from ..services.permissions import PermissionState


class BarsQuery(BaseModel):
    # fix reported by the browser; omit both to let the service locate the caller
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    # native GeolocationPositionError code reported by the browser (1, 2 or 3)
    geolocation_error: Optional[int] = Field(None, ge=1, le=3)
    geolocation_supported: bool = True

    @model_validator(mode="after")
    def _both_or_neither(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class PermissionUpdate(BaseModel):
    state: PermissionState
