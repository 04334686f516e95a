"""Pydantic schemas for Analytics API."""

from pydantic import BaseModel


class AnalyticsSummarySchema(BaseModel):
    """Profile counters."""

    views: int
    downloads: int
    link_clicks: int


class AnalyticsSummaryResponse(BaseModel):
    """Schema for the analytics summary response."""

    data: AnalyticsSummarySchema
