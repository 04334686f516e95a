"""SQLAlchemy implementation of ModerationReport repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.moderation import ModerationReport, ReportStatus
from infrastructure.database.models import ModerationReportModel


class SQLAlchemyModerationRepository:
    """SQLAlchemy implementation of IModerationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, report: ModerationReport) -> ModerationReport:
        """Create a new report."""
        model = self._to_model(report)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get(self, id: UUID) -> ModerationReport | None:
        """Get a report by ID."""
        stmt = select(ModerationReportModel).where(ModerationReportModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list(
        self,
        status: ReportStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ModerationReport]:
        """List reports, newest first, optionally filtered by status."""
        stmt = select(ModerationReportModel)
        if status is not None:
            stmt = stmt.where(ModerationReportModel.status == status.value)
        stmt = stmt.order_by(ModerationReportModel.created_at.desc()).offset(offset).limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def update_status(self, id: UUID, status: ReportStatus) -> ModerationReport:
        """Change the status of a report."""
        stmt = select(ModerationReportModel).where(ModerationReportModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Report {id} not found")

        model.status = status.value
        await self._session.flush()
        return self._to_entity(model)

    def _to_entity(self, model: ModerationReportModel) -> ModerationReport:
        """Convert ORM model to domain entity."""
        return ModerationReport(
            id=model.id,
            profile_id=model.profile_id,
            reported_by=model.reported_by,
            reason=model.reason,
            status=ReportStatus(model.status),
            created_at=model.created_at,
        )

    def _to_model(self, entity: ModerationReport) -> ModerationReportModel:
        """Convert domain entity to ORM model."""
        return ModerationReportModel(
            id=entity.id,
            profile_id=entity.profile_id,
            reported_by=entity.reported_by,
            reason=entity.reason,
            status=entity.status.value,
            created_at=entity.created_at,
        )
