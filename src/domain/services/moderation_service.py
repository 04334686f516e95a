"""Moderation service: viewer reports and admin triage."""

from collections.abc import Callable
from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog

from core.exceptions import (
    InvalidStatusTransitionError,
    ModerationReportNotFoundError,
    ProfileNotFoundError,
    ValidationError,
)
from domain.entities.admin_log import AdminActions
from domain.entities.moderation import ModerationReport, ReportStatus
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.admin_log_service import AdminLogService

logger = structlog.get_logger()

MAX_REASON_LENGTH = 2000


class ModerationService:
    """Service layer for moderation reports."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        admin_log_service: Optional[AdminLogService] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._admin_log = admin_log_service
        self._clock = clock

    async def create_report(
        self,
        profile_id: UUID,
        reason: str,
        reported_by: str | None = None,
    ) -> ModerationReport:
        """File a report against an existing profile. Open to any viewer."""
        reason = reason.strip()
        if not reason:
            raise ValidationError("A reason is required")
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationError(f"Reason must be at most {MAX_REASON_LENGTH} characters")

        async with self._uow_factory() as uow:
            if not await uow.profiles.get(profile_id):
                raise ProfileNotFoundError()

            report = await uow.reports.create(
                ModerationReport(
                    profile_id=profile_id,
                    reason=reason,
                    reported_by=reported_by,
                    created_at=self._clock(),
                )
            )
            await uow.commit()

        logger.info("moderation_report_created", report_id=str(report.id), profile_id=str(profile_id))
        return report

    async def list_reports(
        self,
        status: ReportStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ModerationReport]:
        async with self._uow_factory() as uow:
            return await uow.reports.list(status=status, limit=limit, offset=offset)  # type: ignore[no-any-return]

    async def update_status(
        self,
        report_id: UUID,
        status: ReportStatus,
        admin_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> ModerationReport:
        """Move a report along a legal triage edge and record it in the admin log."""
        async with self._uow_factory() as uow:
            report = await uow.reports.get(report_id)
            if not report:
                raise ModerationReportNotFoundError(str(report_id))

            if not report.can_transition_to(status):
                raise InvalidStatusTransitionError("report", report.status, status)

            previous = report.status
            updated = await uow.reports.update_status(report_id, status)

            if self._admin_log:
                await self._admin_log.log(
                    uow,
                    admin_id=admin_id,
                    action=AdminActions.REPORT_STATUS_CHANGED,
                    resource_type="report",
                    resource_id=str(report_id),
                    details={"status": {"old": previous.value, "new": status.value}},
                    ip_address=ip_address,
                    user_agent=user_agent,
                )

            await uow.commit()

        logger.info(
            "moderation_report_status_changed",
            report_id=str(report_id),
            previous=previous,
            current=status,
        )
        return updated
