# darkbars/services/presentation.py
from typing import Any, Dict

from ..schemas.common import SearchOutcome, VenueRecord
from .normalizer import NO_RESULTS_MESSAGE


def venue_card(venue: VenueRecord) -> Dict[str, Any]:
    return {
        "name": venue.name,
        "vibe_tags": list(venue.vibe_tags),
        "address": venue.address,
        "rating": venue.rating_display,
        "opening_hours": venue.opening_hours,
        "directions_url": venue.directions_url,
    }


def render_outcome(outcome: SearchOutcome) -> Dict[str, Any]:
    """
    View consumed by the front end.

    ``status`` is one of ``ok``, ``empty``, ``error`` or ``superseded``. Error
    views carry the category and its user message only; the diagnostic
    detail stays in the logs.
    """
    if outcome.superseded:
        return {"status": "superseded", "venues": [], "sources": []}
    if outcome.error is not None:
        return {
            "status": "error",
            "venues": [],
            "sources": [],
            "error": {"category": outcome.error.category.value, "message": outcome.error.message},
        }
    sources = [s.model_dump() for s in outcome.sources]
    if not outcome.venues:
        return {"status": "empty", "venues": [], "sources": sources, "message": NO_RESULTS_MESSAGE}
    return {"status": "ok", "venues": [venue_card(v) for v in outcome.venues], "sources": sources}
