"""Moderation report repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.moderation import ModerationReport, ReportStatus


class IModerationRepository(Protocol):
    """Repository interface for ModerationReport entities."""

    async def create(self, report: ModerationReport) -> ModerationReport:
        """Create a new report."""
        ...

    async def get(self, id: UUID) -> ModerationReport | None:
        """Get a report by ID."""
        ...

    async def list(
        self,
        status: ReportStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ModerationReport]:
        """List reports, newest first, optionally filtered by status."""
        ...

    async def update_status(self, id: UUID, status: ReportStatus) -> ModerationReport:
        """Change the status of a report."""
        ...
