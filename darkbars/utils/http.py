# darkbars/utils/http.py
import httpx
from typing import Any, Optional

from ..core.errors import BackendUnavailableError, MalformedResponseError


def _raise_for_status(r: httpx.Response) -> None:
    if not r.is_success:
        raise BackendUnavailableError(
            f"{r.request.method} {r.request.url.host} failed with status {r.status_code}",
            status_code=r.status_code,
        )


def _decode(r: httpx.Response) -> Any:
    try:
        return r.json()
    except ValueError as e:
        raise MalformedResponseError(f"Response body is not JSON: {e}") from e


async def post_json(
    url: str,
    payload: Any,
    headers: Optional[dict] = None,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
):
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        try:
            r = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise BackendUnavailableError(f"POST {httpx.URL(url).host} failed: {e!r}") from e
        _raise_for_status(r)
        return _decode(r)
