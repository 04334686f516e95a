"""Schemas shared by every v1 router."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every error reply."""

    error_code: str = Field(..., examples=["PROFILE_NOT_FOUND"])
    message: str
    details: Any | None = None


class MessageResponse(BaseModel):
    """Acknowledgement for fire-and-forget endpoints."""

    message: str


class PageMeta(BaseModel):
    """Paging window of a list response."""

    limit: int
    offset: int
