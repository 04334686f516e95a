"""Unit tests for ModerationService."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    InvalidStatusTransitionError,
    ModerationReportNotFoundError,
    ProfileNotFoundError,
    ValidationError,
)
from domain.entities.admin_log import AdminActions
from domain.entities.moderation import ModerationReport, ReportStatus
from domain.entities.profile import Profile
from domain.services.admin_log_service import AdminLogService
from domain.services.moderation_service import ModerationService
from tests.unit.conftest import FakeUnitOfWork, FixedClock


@pytest.fixture
def service(uow: FakeUnitOfWork, clock: FixedClock) -> ModerationService:
    return ModerationService(
        lambda: uow, admin_log_service=AdminLogService(lambda: uow), clock=clock
    )


@pytest.fixture
def profile_id() -> UUID:
    return uuid4()


class TestCreateReport:
    @pytest.mark.asyncio
    async def test_files_pending_report(
        self, service: ModerationService, uow: FakeUnitOfWork, profile_id: UUID, clock: FixedClock
    ) -> None:
        uow.profiles.get.return_value = Profile(id=profile_id, user_id=uuid4(), slug="alice")
        uow.reports.create.side_effect = lambda r: r

        report = await service.create_report(profile_id, "  impersonation  ", "bob@example.com")

        assert report.reason == "impersonation"
        assert report.status == ReportStatus.PENDING
        assert report.reported_by == "bob@example.com"
        assert report.created_at == clock.now
        assert uow.committed

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", ["", "   ", "x" * 2001])
    async def test_rejects_bad_reason(
        self, service: ModerationService, uow: FakeUnitOfWork, profile_id: UUID, reason: str
    ) -> None:
        with pytest.raises(ValidationError):
            await service.create_report(profile_id, reason)

        uow.reports.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_profile(
        self, service: ModerationService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.get.return_value = None

        with pytest.raises(ProfileNotFoundError):
            await service.create_report(profile_id, "spam")


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_legal_transition_is_logged(
        self, service: ModerationService, uow: FakeUnitOfWork, profile_id: UUID, admin_id: UUID
    ) -> None:
        report = ModerationReport(profile_id=profile_id, reason="spam")
        uow.reports.get.return_value = report
        uow.reports.update_status.return_value = ModerationReport(
            id=report.id, profile_id=profile_id, reason="spam", status=ReportStatus.REVIEWED
        )

        updated = await service.update_status(report.id, ReportStatus.REVIEWED, admin_id)

        assert updated.status == ReportStatus.REVIEWED
        entry = uow.admin_logs.create.call_args[0][0]
        assert entry.action == AdminActions.REPORT_STATUS_CHANGED
        assert entry.details == {"status": {"old": "pending", "new": "reviewed"}}
        assert uow.committed

    @pytest.mark.asyncio
    async def test_dismissed_is_terminal(
        self, service: ModerationService, uow: FakeUnitOfWork, profile_id: UUID, admin_id: UUID
    ) -> None:
        report = ModerationReport(
            profile_id=profile_id, reason="spam", status=ReportStatus.DISMISSED
        )
        uow.reports.get.return_value = report

        with pytest.raises(InvalidStatusTransitionError):
            await service.update_status(report.id, ReportStatus.REVIEWED, admin_id)

        uow.reports.update_status.assert_not_called()
        uow.admin_logs.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_report(
        self, service: ModerationService, uow: FakeUnitOfWork, admin_id: UUID
    ) -> None:
        uow.reports.get.return_value = None

        with pytest.raises(ModerationReportNotFoundError):
            await service.update_status(uuid4(), ReportStatus.REVIEWED, admin_id)
