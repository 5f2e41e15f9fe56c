from __future__ import annotations

import ipaddress

from fastapi import Request

from warranty_tracker.core.config import settings
from warranty_tracker.services.chat_relay import ChatRelay
from warranty_tracker.services.rate_limit import UNKNOWN_CLIENT_KEY, FixedWindowRateLimiter

PROXY_IP_HEADERS = ("x-real-ip", "cf-connecting-ip")


def _valid_ip(raw: str | None) -> str | None:
    if not raw:
        return None
    try:
        return str(ipaddress.ip_address(raw.strip()))
    except ValueError:
        return None


async def get_request_ip(request: Request) -> str | None:
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            for candidate in forwarded.split(","):
                parsed = _valid_ip(candidate)
                if parsed:
                    return parsed
        for header in PROXY_IP_HEADERS:
            parsed = _valid_ip(request.headers.get(header))
            if parsed:
                return parsed

    if request.client:
        return _valid_ip(request.client.host)
    return None


async def get_client_key(request: Request) -> str:
    return await get_request_ip(request) or UNKNOWN_CLIENT_KEY


def get_track_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.track_limiter


def get_chat_relay() -> ChatRelay:
    return ChatRelay()
