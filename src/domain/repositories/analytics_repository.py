"""Analytics event repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.analytics import LinkClick, ProfileView


class IAnalyticsRepository(Protocol):
    """Append-only store for view and click events."""

    async def add_view(self, view: ProfileView) -> ProfileView:
        """Append a profile view event."""
        ...

    async def add_click(self, click: LinkClick) -> LinkClick:
        """Append a link click event."""
        ...

    async def count_views(self, profile_id: UUID) -> int:
        """Number of view events recorded for a profile."""
        ...

    async def count_clicks(self, profile_id: UUID) -> int:
        """Number of click events recorded for a profile."""
        ...

    async def count_clicks_by_link(self, profile_id: UUID) -> dict[UUID, int]:
        """Click events per link tile for a profile."""
        ...
