# darkbars/services/grounded_search.py
from typing import List

from ..schemas.common import BackendResponse, Coordinate, GroundingSource
from .backend import VenueBackend
from .gemini import build_prompt, generate_content, grounding_sources, response_text
from .normalizer import decode_json, extract_fenced_json, unwrap_container

FORMAT_INSTRUCTIONS = (
    "Use Google Search to check that each bar exists and is open. "
    "Reply with exactly one fenced code block labelled json, containing an object "
    'with a single key "bars": an array of objects with the keys '
    '"name" (string), "vibe_tags" (array of strings), "address" (string), '
    '"rating" (number 0-5 or null) and "opening_hours" (string).'
)


class GroundedSearchBackend(VenueBackend):
    """Gemini with Google Search grounding; venues come back inside free text."""

    name = "grounded"

    async def fetch_venues(self, coord: Coordinate) -> BackendResponse:
        data = await generate_content(
            self.settings,
            build_prompt(coord, FORMAT_INSTRUCTIONS),
            tools=[{"google_search": {}}],
            transport=self.transport,
        )
        # a missing block fails the run before citations are looked at
        block = extract_fenced_json(response_text(data))
        payload = unwrap_container(decode_json(block), key="bars")
        return BackendResponse(payload=payload, sources=self._sources(data))

    def _sources(self, data) -> List[GroundingSource]:
        try:
            return grounding_sources(data)
        except Exception as e:
            self.logger.warning("Ignoring unreadable grounding metadata: %r", e)
            return []
