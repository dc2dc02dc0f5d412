# darkbars/services/structured_schema.py
from ..schemas.common import BackendResponse, Coordinate
from .backend import VenueBackend
from .gemini import build_prompt, generate_content, response_text
from .normalizer import decode_json, strip_code_fence

VENUE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING"},
            "vibe_tags": {"type": "ARRAY", "items": {"type": "STRING"}},
            "address": {"type": "STRING"},
            "rating": {"type": "NUMBER"},
            "opening_hours": {"type": "STRING"},
        },
        "required": ["name", "vibe_tags", "address", "rating", "opening_hours"],
        "propertyOrdering": ["name", "vibe_tags", "address", "rating", "opening_hours"],
    },
}


class StructuredSchemaBackend(VenueBackend):
    """Gemini with an enforced response schema; the body is the venue array itself."""

    name = "structured"

    async def fetch_venues(self, coord: Coordinate) -> BackendResponse:
        data = await generate_content(
            self.settings,
            build_prompt(coord),
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": VENUE_SCHEMA,
            },
            transport=self.transport,
        )
        # schema mode sometimes still wraps the array in a ```json fence
        payload = decode_json(strip_code_fence(response_text(data)))
        return BackendResponse(payload=payload)
