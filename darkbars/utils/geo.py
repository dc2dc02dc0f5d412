from urllib.parse import quote

MAPS_SEARCH_BASE = "https://www.google.com/maps/search/?api=1&query="

# same unreserved set as encodeURIComponent, so links match what the browser builds
_URI_COMPONENT_SAFE = "-_.!~*'()"

def maps_search_url(*parts: str) -> str:
    """Directions/search link for ``"name, address"``; empty parts are skipped."""
    query = ", ".join(p for p in parts if p)
    return MAPS_SEARCH_BASE + quote(query, safe=_URI_COMPONENT_SAFE)
