from pydantic import BaseModel, ConfigDict, Field
from typing import Any

from ..core.errors import ErrorCategory, USER_MESSAGES
from ..utils.geo import maps_search_url

NOT_AVAILABLE = "Not available"


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class GroundingSource(BaseModel):
    uri: str
    title: str


class VenueRecord(BaseModel):
    """One display-safe venue. Every field is already a primitive string/number."""

    model_config = ConfigDict(frozen=True)

    name: str
    vibe_tags: tuple[str, ...] = ()
    address: str
    rating: float | None = Field(None, ge=0.0, le=5.0)
    opening_hours: str
    # string-typed name/address as the backend sent them, for the directions query
    maps_query_parts: tuple[str, ...] = ()

    @property
    def rating_display(self) -> str:
        return NOT_AVAILABLE if self.rating is None else f"{self.rating:.1f}"

    @property
    def directions_url(self) -> str:
        return maps_search_url(*self.maps_query_parts)


class BackendResponse(BaseModel):
    payload: Any = None
    sources: list[GroundingSource] = []


class ClassifiedError(BaseModel):
    category: ErrorCategory
    detail: str = ""

    @property
    def message(self) -> str:
        return USER_MESSAGES[self.category]


class SearchOutcome(BaseModel):
    venues: list[VenueRecord] = []
    sources: list[GroundingSource] = []
    error: ClassifiedError | None = None
    superseded: bool = False
