from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from warranty_tracker.api.chat import router as chat_router
from warranty_tracker.api.track import router as track_router
from warranty_tracker.core.config import settings
from warranty_tracker.core.database import dispose_db, init_db
from warranty_tracker.core.logging import setup_logging
from warranty_tracker.services.rate_limit import FixedWindowRateLimiter, InMemoryRateLimitStore

app = FastAPI(title="Warranty Ticket Tracker")

# One limiter per process; swap the store for a shared one when scaling out.
app.state.track_limiter = FixedWindowRateLimiter(
    settings.TRACK_RATE_LIMIT_MAX_REQUESTS,
    settings.TRACK_RATE_LIMIT_WINDOW_SEC,
    store=InMemoryRateLimitStore(),
)

origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )


@app.on_event("startup")
async def on_startup() -> None:
    setup_logging()
    await init_db()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await dispose_db()


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


app.include_router(track_router)
app.include_router(chat_router)
