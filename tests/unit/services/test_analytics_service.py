"""Unit tests for AnalyticsService."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import ProfileNotFoundError
from domain.entities.analytics import AnalyticsSummary, LinkClick, ProfileView
from domain.services.analytics_service import AnalyticsService
from tests.unit.conftest import FakeUnitOfWork, FixedClock


@pytest.fixture
def service(uow: FakeUnitOfWork, clock: FixedClock) -> AnalyticsService:
    return AnalyticsService(lambda: uow, clock=clock)


@pytest.fixture
def profile_id() -> UUID:
    return uuid4()


class TestRecordView:
    @pytest.mark.asyncio
    async def test_appends_event_and_bumps_counter(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID, clock: FixedClock
    ) -> None:
        uow.profiles.increment_counters.return_value = True

        recorded = await service.record_view(
            profile_id, ip_address="203.0.113.9", user_agent="curl/8", referrer="https://x.com"
        )

        assert recorded is True
        uow.profiles.increment_counters.assert_called_once_with(profile_id, views=1)
        view = uow.analytics.add_view.call_args[0][0]
        assert isinstance(view, ProfileView)
        assert view.ip_address == "203.0.113.9"
        assert view.created_at == clock.now
        assert uow.committed

    @pytest.mark.asyncio
    async def test_unknown_profile_records_nothing(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.increment_counters.return_value = False

        assert await service.record_view(profile_id) is False
        uow.analytics.add_view.assert_not_called()
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_storage_failure_is_swallowed(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.increment_counters.side_effect = RuntimeError("db down")

        assert await service.record_view(profile_id) is False


class TestRecordLinkClick:
    @pytest.mark.asyncio
    async def test_tile_click_uses_stored_url(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        link_id = uuid4()
        uow.profiles.get_link.return_value = ("https://github.com/alice", True)
        uow.profiles.increment_counters.return_value = True

        recorded = await service.record_link_click(
            profile_id, link_id=link_id, url="https://evil.example"
        )

        assert recorded is True
        uow.profiles.increment_counters.assert_called_once_with(profile_id, link_clicks=1)
        uow.profiles.increment_link_click_count.assert_called_once_with(profile_id, link_id)
        click = uow.analytics.add_click.call_args[0][0]
        assert isinstance(click, LinkClick)
        assert click.link_url == "https://github.com/alice"
        assert click.link_id == link_id

    @pytest.mark.asyncio
    async def test_inactive_tile_is_ignored(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.get_link.return_value = ("https://old.example", False)

        assert await service.record_link_click(profile_id, link_id=uuid4()) is False
        uow.profiles.increment_counters.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_tile_is_ignored(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.get_link.return_value = None

        assert await service.record_link_click(profile_id, link_id=uuid4()) is False
        uow.analytics.add_click.assert_not_called()

    @pytest.mark.asyncio
    async def test_untracked_link_only_bumps_profile_counter(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.increment_counters.return_value = True

        assert await service.record_link_click(profile_id, url="https://alice.dev") is True
        uow.profiles.get_link.assert_not_called()
        uow.profiles.increment_link_click_count.assert_not_called()


class TestRecordDownload:
    @pytest.mark.asyncio
    async def test_bumps_download_counter(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.increment_counters.return_value = True

        assert await service.record_download(profile_id) is True
        uow.profiles.increment_counters.assert_called_once_with(profile_id, downloads=1)


class TestSummary:
    @pytest.mark.asyncio
    async def test_returns_counters(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.get_counters.return_value = AnalyticsSummary(views=5, downloads=1, link_clicks=2)

        summary = await service.get_summary(profile_id)

        assert summary == AnalyticsSummary(views=5, downloads=1, link_clicks=2)

    @pytest.mark.asyncio
    async def test_missing_profile(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        uow.profiles.get_counters.return_value = None

        with pytest.raises(ProfileNotFoundError):
            await service.get_summary(profile_id)


class TestReconcile:
    @pytest.mark.asyncio
    async def test_raises_counters_to_event_counts(
        self, service: AnalyticsService, uow: FakeUnitOfWork, profile_id: UUID
    ) -> None:
        link_id = uuid4()
        uow.analytics.count_views.return_value = 12
        uow.analytics.count_clicks.return_value = 3
        uow.analytics.count_clicks_by_link.return_value = {link_id: 2}

        visited = await service.reconcile_counters(profile_id)

        assert visited == 1
        uow.profiles.list_ids.assert_not_called()
        uow.profiles.raise_counters.assert_called_once_with(profile_id, views=12, link_clicks=3)
        uow.profiles.raise_link_click_count.assert_called_once_with(link_id, 2)

    @pytest.mark.asyncio
    async def test_visits_every_profile(
        self, service: AnalyticsService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.list_ids.return_value = [uuid4(), uuid4()]
        uow.analytics.count_views.return_value = 0
        uow.analytics.count_clicks.return_value = 0
        uow.analytics.count_clicks_by_link.return_value = {}

        assert await service.reconcile_counters() == 2
        assert uow.profiles.raise_counters.call_count == 2
