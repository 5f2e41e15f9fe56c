from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from warranty_tracker.api.deps import get_client_key, get_track_limiter
from warranty_tracker.core.config import settings
from warranty_tracker.core.database import get_session
from warranty_tracker.services.masking import sanitize_ticket_data
from warranty_tracker.services.rate_limit import FixedWindowRateLimiter, RateLimitResult
from warranty_tracker.services.ticket_queries import (
    TicketQueryError,
    get_ticket_by_tracking_code,
    list_tracking_codes,
)
from warranty_tracker.services.timeline import build_tracked_ticket
from warranty_tracker.utils.time import epoch_seconds_ceil, seconds_until_ceil

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/track", tags=["track"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}
QUERY_ERROR_STATUS = {
    "NOT_FOUND": 404,
    "INVALID_FORMAT": 400,
    "INVALID_INPUT": 400,
}


def _error_response(
    status_code: int,
    error: str,
    code: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "code": code},
        headers=headers,
    )


def _rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(epoch_seconds_ceil(result.reset_at)),
    }


@router.get("")
async def list_codes(session: AsyncSession = Depends(get_session)) -> JSONResponse:
    if not settings.TRACKING_CODE_LISTING_ENABLED:
        return _error_response(404, "Not found", "NOT_FOUND")
    try:
        items = await list_tracking_codes(session)
    except SQLAlchemyError as exc:
        logger.error("errors", stage="list_tracking_codes", error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to fetch tracking codes"},
        )
    return JSONResponse(
        content={"success": True, "data": [item.model_dump(mode="json") for item in items]},
        headers=NO_CACHE_HEADERS,
    )


@router.get("/{tracking_code}")
async def track_ticket(
    tracking_code: str,
    client_key: str = Depends(get_client_key),
    limiter: FixedWindowRateLimiter = Depends(get_track_limiter),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    limit = limiter.check(client_key)
    if not limit.allowed:
        logger.info("track_rate_limited", client=client_key)
        headers = _rate_limit_headers(limit)
        headers["Retry-After"] = str(seconds_until_ceil(limit.reset_at, limiter.clock()))
        return _error_response(
            429,
            "Rate limit exceeded. Please try again later.",
            "RATE_LIMIT_EXCEEDED",
            headers=headers,
        )

    try:
        ticket = await get_ticket_by_tracking_code(session, tracking_code)
    except TicketQueryError as exc:
        logger.info("track_lookup_failed", code=exc.code)
        return _error_response(QUERY_ERROR_STATUS.get(exc.code, 500), exc.message, exc.code)
    except Exception:
        logger.exception("errors", stage="track_lookup")
        return _error_response(500, "Internal server error", "INTERNAL_ERROR")

    payload = build_tracked_ticket(sanitize_ticket_data(ticket))
    return JSONResponse(
        status_code=200,
        content={"success": True, "data": payload.model_dump(mode="json")},
        headers={**_rate_limit_headers(limit), **NO_CACHE_HEADERS},
    )


@router.api_route("/{tracking_code}", methods=["POST", "PUT", "PATCH", "DELETE"])
async def track_method_not_allowed(tracking_code: str) -> JSONResponse:
    return _error_response(405, "Method not allowed", "METHOD_NOT_ALLOWED")
