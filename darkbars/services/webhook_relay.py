# darkbars/services/webhook_relay.py
from ..core.errors import BackendUnavailableError
from ..schemas.common import BackendResponse, Coordinate
from ..utils.http import post_json
from .backend import VenueBackend
from .normalizer import decode_json, unwrap_container


class WebhookRelayBackend(VenueBackend):
    """
    Automation relay (e.g. a Make.com scenario) reached by POSTing the coordinate.

    Some relays hand back their JSON body encoded a second time as a string;
    exactly one extra decode pass is attempted for that case.
    """

    name = "webhook"

    async def fetch_venues(self, coord: Coordinate) -> BackendResponse:
        if not self.settings.webhook_url:
            raise BackendUnavailableError("WEBHOOK_URL not set")

        body = await post_json(
            self.settings.webhook_url,
            {"latitude": coord.latitude, "longitude": coord.longitude},
            timeout=self.settings.backend_timeout_s,
            transport=self.transport,
        )
        if isinstance(body, str):
            self.logger.debug("Webhook body was a JSON string, decoding again")
            body = decode_json(body)
        return BackendResponse(payload=unwrap_container(body, key="bars"))
