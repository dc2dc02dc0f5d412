# darkbars/services/gemini.py
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import Settings
from ..core.errors import BackendUnavailableError, MalformedResponseError
from ..schemas.common import Coordinate, GroundingSource
from ..utils.http import post_json

logger = logging.getLogger(__name__)

VENUE_TASK = (
    "Find alternative bars near latitude {lat:.5f}, longitude {lon:.5f}: punk, goth, metal and dive bars. "
    "Order them by relevance. For each bar give its name, a few short vibe tags, "
    "the street address, a rating from 0 to 5 and today's opening hours."
)


def build_prompt(coord: Coordinate, extra: str = "") -> str:
    prompt = VENUE_TASK.format(lat=coord.latitude, lon=coord.longitude)
    return f"{prompt}\n\n{extra}" if extra else prompt


async def generate_content(
    settings: Settings,
    prompt: str,
    *,
    generation_config: Optional[Dict[str, Any]] = None,
    tools: Optional[List[Dict[str, Any]]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """
    Single ``models/{model}:generateContent`` call.

    Returns the decoded response body. The API key travels in a header so it
    never shows up in URLs or logs.
    """
    if not settings.gemini_api_key:
        raise BackendUnavailableError("GEMINI_API_KEY not set")

    url = f"{settings.gemini_base}/models/{settings.gemini_model}:generateContent"
    body: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
    if generation_config:
        body["generationConfig"] = generation_config
    if tools:
        body["tools"] = tools

    logger.debug("Calling Gemini model %s", settings.gemini_model)
    data = await post_json(
        url,
        body,
        headers={"x-goog-api-key": settings.gemini_api_key},
        timeout=settings.backend_timeout_s,
        transport=transport,
    )
    if not isinstance(data, dict):
        raise MalformedResponseError("Gemini response body is not an object")
    return data


def _first_candidate(data: Dict[str, Any]) -> Dict[str, Any]:
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        raise MalformedResponseError("Gemini response has no candidates")
    return candidates[0]


def response_text(data: Dict[str, Any]) -> str:
    """Concatenated text parts of the first candidate."""
    content = _first_candidate(data).get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    texts = [p["text"] for p in (parts or []) if isinstance(p, dict) and isinstance(p.get("text"), str)]
    if not texts:
        raise MalformedResponseError("Gemini response has no text")
    return "".join(texts)


def grounding_sources(data: Dict[str, Any]) -> List[GroundingSource]:
    """Citation sources from ``groundingMetadata``; duplicates by uri are dropped."""
    meta = _first_candidate(data).get("groundingMetadata") or {}
    sources: List[GroundingSource] = []
    seen = set()
    for chunk in meta.get("groundingChunks") or []:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if not isinstance(web, dict):
            continue
        uri = web.get("uri")
        if not isinstance(uri, str) or not uri or uri in seen:
            continue
        seen.add(uri)
        title = web.get("title")
        sources.append(GroundingSource(uri=uri, title=title if isinstance(title, str) and title else uri))
    return sources
