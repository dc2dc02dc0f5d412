"""
Validating decoder for untrusted venue payloads.

Backends return JSON of uncertain shape. ``normalize`` turns it into
``VenueRecord`` objects whose fields are always display-safe strings or a
bounded float. Bad entries are repaired with sentinels, never dropped; only a
payload whose top level is not an array is rejected.
"""

import json
import math
import re
from typing import Any, List, Optional

from ..core.errors import MalformedResponseError
from ..schemas.common import VenueRecord

UNNAMED_VENUE = "Unnamed venue"
INFO_UNAVAILABLE = "Info unavailable"
ADDRESS_UNAVAILABLE = "Address unavailable"
HOURS_UNAVAILABLE = "Hours not available"
TAG_UNAVAILABLE = "N/A"
NO_RESULTS_MESSAGE = "No alternative bars found nearby. The darkness eludes you... for now."

MIN_RATING = 0.0
MAX_RATING = 5.0

_LEADING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")
_JSON_BLOCK = re.compile(r"```json[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL | re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    """Trim ``text`` and remove one leading and one trailing code fence, if present."""
    body = text.strip()
    if not body.startswith("```"):
        return body
    body = _LEADING_FENCE.sub("", body, count=1)
    body = _TRAILING_FENCE.sub("", body, count=1)
    return body.strip()


def extract_fenced_json(text: str) -> str:
    """Body of the first ```json fenced block in free text."""
    m = _JSON_BLOCK.search(text or "")
    if not m:
        raise MalformedResponseError("No fenced JSON block found in backend text")
    return m.group(1).strip()


def decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, TypeError) as e:
        raise MalformedResponseError(f"Backend payload is not valid JSON: {e}") from e


def unwrap_container(value: Any, key: str = "bars") -> Any:
    """
    Pull the venue array out of ``{key: [...]}``.

    A bare array passes through. Anything else is malformed.
    """
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and isinstance(value.get(key), list):
        return value[key]
    raise MalformedResponseError(f"Backend payload has no '{key}' array")


def safe_display(value: Any, default: str) -> str:
    """String form of ``value`` that is safe to show; containers and blanks become sentinels."""
    if value is None:
        return default
    if isinstance(value, (dict, list, tuple)):
        return INFO_UNAVAILABLE
    if isinstance(value, float) and not math.isfinite(value):
        return default
    text = str(value).strip()
    return text or default


def _name(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return UNNAMED_VENUE


def _rating(value: Any) -> Optional[float]:
    # bool is an int subclass, not a rating
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        # integers too large for a float are still finite numbers
        return MAX_RATING if value > 0 else MIN_RATING
    if not math.isfinite(value):
        return None
    return round(min(max(value, MIN_RATING), MAX_RATING), 1)


def _tags(value: Any) -> tuple:
    if not isinstance(value, list):
        return ()
    return tuple(safe_display(tag, TAG_UNAVAILABLE) for tag in value)


def normalize_entry(entry: Any) -> VenueRecord:
    if not isinstance(entry, dict):
        entry = {}
    name = entry.get("name")
    address = entry.get("address")
    return VenueRecord(
        name=_name(name),
        vibe_tags=_tags(entry.get("vibe_tags")),
        address=safe_display(address, ADDRESS_UNAVAILABLE),
        rating=_rating(entry.get("rating")),
        opening_hours=safe_display(entry.get("opening_hours"), HOURS_UNAVAILABLE),
        maps_query_parts=tuple(v.strip() for v in (name, address) if isinstance(v, str)),
    )


def normalize(raw: Any) -> List[VenueRecord]:
    if not isinstance(raw, list):
        raise MalformedResponseError(
            f"Expected a JSON array of venues, got {type(raw).__name__}",
            details={"type": type(raw).__name__},
        )
    return [normalize_entry(entry) for entry in raw]
