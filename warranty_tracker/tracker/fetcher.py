from __future__ import annotations

import httpx
import structlog

from warranty_tracker.schemas.ticket import TicketData
from warranty_tracker.services.ticket_queries import is_valid_tracking_code
from warranty_tracker.tracker.cancellation import CancellationToken
from warranty_tracker.tracker.errors import ErrorType, TrackerError, map_http_status_to_error_type

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 20.0


class TicketFetcher:
    """Retrieves one ticket from the lookup endpoint.

    The token is checked before the request goes out and again before the
    result is handed back, so a superseded fetch ends in ``FetchCancelled``
    instead of a stale ticket or a user-visible error.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def _url(self, tracking_code: str) -> str:
        return f"{self.base_url}/track/{tracking_code}"

    async def fetch(self, tracking_code: str, token: CancellationToken) -> TicketData:
        if not is_valid_tracking_code(tracking_code):
            raise TrackerError(
                ErrorType.INVALID_TRACKING_CODE,
                "Invalid tracking code format",
                "The tracking code must be a valid UUID format",
            )
        token.raise_if_cancelled()

        try:
            response = await self.client.get(self._url(tracking_code))
        except httpx.HTTPError as exc:
            token.raise_if_cancelled()
            logger.warning("ticket_fetch_failed", stage="http", error=str(exc))
            raise TrackerError(
                ErrorType.NETWORK_ERROR,
                "Network connection error",
                "Unable to connect to the server",
            ) from exc

        token.raise_if_cancelled()

        if response.is_error:
            code = None
            try:
                body = response.json()
                if isinstance(body, dict):
                    code = body.get("code")
            except ValueError:
                pass
            error_type = map_http_status_to_error_type(response.status_code)
            logger.warning(
                "ticket_fetch_failed",
                stage="status",
                status_code=response.status_code,
                code=code,
            )
            raise TrackerError(
                error_type,
                f"Failed to fetch ticket: {response.status_code}",
                "No ticket exists with this tracking code"
                if error_type == ErrorType.NOT_FOUND
                else None,
                code=code,
            )

        try:
            ticket = TicketData.model_validate(response.json()["data"])
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("ticket_fetch_failed", stage="payload", error=str(exc))
            raise TrackerError(
                ErrorType.DATABASE_ERROR,
                "Malformed ticket payload",
                "Server error occurred",
            ) from exc

        token.raise_if_cancelled()
        return ticket

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
