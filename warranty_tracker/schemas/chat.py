from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ChatRequest(BaseModel):
    message: str | None = None
    files: list[Any] | None = None
    history: list[Any] | None = None


class ChatResponse(BaseModel):
    success: bool
    message: str
    data: Any = None
