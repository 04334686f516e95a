"""SQLAlchemy implementation of Admin Log repository."""

from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.admin_log import AdminLog
from infrastructure.database.models import AdminLogModel


class SQLAlchemyAdminLogRepository:
    """SQLAlchemy implementation of IAdminLogRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, entry: AdminLog) -> AdminLog:
        """Create a new admin log entry."""
        model = self._to_model(entry)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def list_recent(self, limit: int = 50, offset: int = 0) -> List[AdminLog]:
        """Get admin log entries, ordered by newest first."""
        stmt = (
            select(AdminLogModel)
            .order_by(AdminLogModel.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_resource(
        self,
        resource_type: str,
        resource_id: str,
        limit: int = 50,
    ) -> List[AdminLog]:
        """Get admin log entries for a specific resource."""
        stmt = (
            select(AdminLogModel)
            .where(
                AdminLogModel.resource_type == resource_type,
                AdminLogModel.resource_id == resource_id,
            )
            .order_by(AdminLogModel.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_admin(self, admin_id: UUID, limit: int = 50) -> List[AdminLog]:
        """Get admin log entries written by a specific admin."""
        stmt = (
            select(AdminLogModel)
            .where(AdminLogModel.admin_id == admin_id)
            .order_by(AdminLogModel.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: AdminLogModel) -> AdminLog:
        """Convert ORM model to domain entity."""
        return AdminLog(
            id=model.id,
            admin_id=model.admin_id,
            action=model.action,
            resource_type=model.resource_type,
            resource_id=model.resource_id,
            details=model.details,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            created_at=model.created_at,
        )

    def _to_model(self, entity: AdminLog) -> AdminLogModel:
        """Convert domain entity to ORM model."""
        return AdminLogModel(
            id=entity.id,
            admin_id=entity.admin_id,
            action=entity.action,
            resource_type=entity.resource_type,
            resource_id=entity.resource_id,
            details=entity.details,
            ip_address=entity.ip_address,
            user_agent=entity.user_agent,
            created_at=entity.created_at,
        )
