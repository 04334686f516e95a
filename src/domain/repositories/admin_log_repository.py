"""Admin action log repository protocol."""

from typing import List, Protocol
from uuid import UUID

from domain.entities.admin_log import AdminLog


class IAdminLogRepository(Protocol):
    """Repository interface for AdminLog entries."""

    async def create(self, entry: AdminLog) -> AdminLog:
        """Create a new admin log entry."""
        ...

    async def list_recent(self, limit: int = 50, offset: int = 0) -> List[AdminLog]:
        """Get admin log entries, ordered by newest first."""
        ...

    async def get_for_resource(
        self,
        resource_type: str,
        resource_id: str,
        limit: int = 50,
    ) -> List[AdminLog]:
        """Get admin log entries for a specific resource."""
        ...

    async def get_for_admin(self, admin_id: UUID, limit: int = 50) -> List[AdminLog]:
        """Get admin log entries written by a specific admin."""
        ...
