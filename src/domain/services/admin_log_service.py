"""Admin log service for recording and querying admin actions."""

from collections.abc import Callable
from typing import Any
from uuid import UUID

from domain.entities.admin_log import AdminLog
from domain.repositories.unit_of_work import IUnitOfWork


class AdminLogService:
    """Service layer for the admin audit trail."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def log(
        self,
        uow: IUnitOfWork,
        admin_id: UUID,
        action: str,
        resource_type: str,
        resource_id: str | None = None,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AdminLog:
        """Record an admin action within an existing UoW transaction.

        Args:
            uow: The active Unit of Work (caller manages commit).
            admin_id: The admin who performed the action.
            action: The action string (use AdminActions constants).
            resource_type: The type of resource affected.
            resource_id: The ID of the resource affected.
            details: Optional before/after values or other context.
            ip_address: Client address of the admin request.
            user_agent: User agent of the admin request.

        Returns:
            The created AdminLog entry.
        """
        entry = AdminLog(
            admin_id=admin_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return await uow.admin_logs.create(entry)

    async def list_recent(self, limit: int = 50, offset: int = 0) -> list[AdminLog]:
        """Admin log entries, newest first."""
        async with self._uow_factory() as uow:
            return await uow.admin_logs.list_recent(limit=limit, offset=offset)  # type: ignore[no-any-return]

    async def get_resource_history(
        self,
        resource_type: str,
        resource_id: str,
        limit: int = 50,
    ) -> list[AdminLog]:
        """Admin actions taken against one resource, newest first."""
        async with self._uow_factory() as uow:
            return await uow.admin_logs.get_for_resource(  # type: ignore[no-any-return]
                resource_type, resource_id, limit=limit
            )
