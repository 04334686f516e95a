"""Pydantic schemas for moderation API."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.common import PageMeta


class ReportCreate(BaseModel):
    """Schema for reporting a profile."""

    profile_id: UUID
    reason: str = Field(..., min_length=1, max_length=2000)
    reported_by: Optional[str] = Field(None, max_length=255)


class ReportStatusUpdate(BaseModel):
    """Schema for triaging a report."""

    status: Literal["pending", "reviewed", "dismissed"]


class ReportResponse(BaseModel):
    """Schema for a moderation report."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: UUID
    reported_by: Optional[str] = None
    reason: str
    status: str
    created_at: datetime


class ReportDetailResponse(BaseModel):
    """Schema for single report response."""

    data: ReportResponse


class ReportListResponse(BaseModel):
    """Schema for list of reports response."""

    data: List[ReportResponse]
    meta: PageMeta
