"""SQLAlchemy implementation of the analytics event store."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.analytics import LinkClick, ProfileView
from infrastructure.database.models import LinkClickModel, ProfileViewModel


class SQLAlchemyAnalyticsRepository:
    """SQLAlchemy implementation of IAnalyticsRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_view(self, view: ProfileView) -> ProfileView:
        """Append a profile view event."""
        model = ProfileViewModel(
            id=view.id,
            profile_id=view.profile_id,
            ip_address=view.ip_address,
            user_agent=view.user_agent,
            referrer=view.referrer,
            created_at=view.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return view

    async def add_click(self, click: LinkClick) -> LinkClick:
        """Append a link click event."""
        model = LinkClickModel(
            id=click.id,
            profile_id=click.profile_id,
            link_id=click.link_id,
            link_url=click.link_url,
            ip_address=click.ip_address,
            user_agent=click.user_agent,
            referrer=click.referrer,
            created_at=click.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return click

    async def count_views(self, profile_id: UUID) -> int:
        """Number of view events recorded for a profile."""
        stmt = select(func.count()).where(ProfileViewModel.profile_id == profile_id)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_clicks(self, profile_id: UUID) -> int:
        """Number of click events recorded for a profile."""
        stmt = select(func.count()).where(LinkClickModel.profile_id == profile_id)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_clicks_by_link(self, profile_id: UUID) -> dict[UUID, int]:
        """Click events per link tile for a profile."""
        stmt = (
            select(LinkClickModel.link_id, func.count())
            .where(
                LinkClickModel.profile_id == profile_id,
                LinkClickModel.link_id.is_not(None),
            )
            .group_by(LinkClickModel.link_id)
        )
        result = await self._session.execute(stmt)
        return {link_id: count for link_id, count in result.all()}
