"""Analytics aggregation: raw view/click events plus denormalized counters."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from core.exceptions import ProfileNotFoundError
from domain.entities.analytics import AnalyticsSummary, LinkClick, ProfileView
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class AnalyticsService:
    """Service layer for profile analytics.

    Event writes never fail the caller: errors are logged and swallowed so a
    public page render is never blocked by analytics.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def record_view(
        self,
        profile_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
        referrer: str | None = None,
    ) -> bool:
        """Append a view event and bump ``view_count`` in one transaction."""
        try:
            async with self._uow_factory() as uow:
                if not await uow.profiles.increment_counters(profile_id, views=1):
                    return False
                await uow.analytics.add_view(
                    ProfileView(
                        profile_id=profile_id,
                        ip_address=ip_address,
                        user_agent=user_agent,
                        referrer=referrer,
                        created_at=self._clock(),
                    )
                )
                await uow.commit()
                return True
        except Exception:
            logger.exception("analytics_record_failed", kind="view", profile_id=str(profile_id))
            return False

    async def record_link_click(
        self,
        profile_id: UUID,
        link_id: UUID | None = None,
        url: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        referrer: str | None = None,
    ) -> bool:
        """Append a click event and bump the profile and tile counters."""
        try:
            async with self._uow_factory() as uow:
                if link_id is not None:
                    link = await uow.profiles.get_link(profile_id, link_id)
                    if link is None or not link[1]:
                        return False
                    url = link[0]

                if not await uow.profiles.increment_counters(profile_id, link_clicks=1):
                    return False
                if link_id is not None:
                    await uow.profiles.increment_link_click_count(profile_id, link_id)

                await uow.analytics.add_click(
                    LinkClick(
                        profile_id=profile_id,
                        link_id=link_id,
                        link_url=url,
                        ip_address=ip_address,
                        user_agent=user_agent,
                        referrer=referrer,
                        created_at=self._clock(),
                    )
                )
                await uow.commit()
                return True
        except Exception:
            logger.exception(
                "analytics_record_failed",
                kind="link_click",
                profile_id=str(profile_id),
                link_id=str(link_id) if link_id else None,
            )
            return False

    async def record_download(self, profile_id: UUID) -> bool:
        """Bump ``download_count``."""
        try:
            async with self._uow_factory() as uow:
                if not await uow.profiles.increment_counters(profile_id, downloads=1):
                    return False
                await uow.commit()
                return True
        except Exception:
            logger.exception("analytics_record_failed", kind="download", profile_id=str(profile_id))
            return False

    async def get_summary(self, profile_id: UUID) -> AnalyticsSummary:
        """Counters straight from the profile row."""
        async with self._uow_factory() as uow:
            summary = await uow.profiles.get_counters(profile_id)
            if summary is None:
                raise ProfileNotFoundError()
            return summary

    async def reconcile_counters(self, profile_id: UUID | None = None) -> int:
        """Raise lagging counters to the number of recorded events.

        Idempotent; counters are never lowered. Download counts have no
        event table and are left alone. Returns the number of profiles
        visited.
        """
        async with self._uow_factory() as uow:
            profile_ids = [profile_id] if profile_id else await uow.profiles.list_ids()

        for pid in profile_ids:
            async with self._uow_factory() as uow:
                views = await uow.analytics.count_views(pid)
                clicks = await uow.analytics.count_clicks(pid)
                await uow.profiles.raise_counters(pid, views=views, link_clicks=clicks)
                for link_id, link_clicks in (await uow.analytics.count_clicks_by_link(pid)).items():
                    await uow.profiles.raise_link_click_count(link_id, link_clicks)
                await uow.commit()

        logger.info("analytics_counters_reconciled", profiles=len(profile_ids))
        return len(profile_ids)
