from __future__ import annotations

from typing import Any

import httpx
import structlog

from warranty_tracker.core.config import settings

logger = structlog.get_logger(__name__)

# Workflow nodes name their reply field differently; first non-empty wins.
REPLY_FIELDS = ("output", "message", "response", "text")
DEFAULT_REPLY = "Response received"


class ChatRelayError(Exception):
    pass


def extract_reply(data: Any) -> str:
    if isinstance(data, dict):
        for field in REPLY_FIELDS:
            value = data.get(field)
            if value:
                return value if isinstance(value, str) else str(value)
    return DEFAULT_REPLY


class ChatRelay:
    def __init__(
        self,
        webhook_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if webhook_url is None:
            base_url = settings.WEBHOOK_BASE_URL.rstrip("/")
            webhook_url = f"{base_url}/{settings.CHAT_WEBHOOK_PATH.lstrip('/')}"
        self.webhook_url = webhook_url
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SEC
        self.transport = transport

    async def forward(
        self,
        message: str | None,
        files: list[Any] | None = None,
        history: list[Any] | None = None,
    ) -> Any:
        if not self.webhook_url:
            raise ChatRelayError("WEBHOOK_BASE_URL is not configured")
        payload = {
            "message": message or "",
            "files": files or [],
            "history": history or [],
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(self.webhook_url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("errors", stage="chat_webhook", error=str(exc))
            raise ChatRelayError(f"Webhook request failed: {exc}") from exc

        if response.is_error:
            logger.error(
                "errors",
                stage="chat_webhook",
                status_code=response.status_code,
                response=response.text,
            )
            raise ChatRelayError(
                f"Webhook request failed with status: {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("errors", stage="chat_webhook", error="invalid_json")
            raise ChatRelayError("Webhook returned invalid JSON") from exc

        logger.info("chat_webhook_reply", status_code=response.status_code)
        return data
