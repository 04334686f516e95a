"""Profile repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.analytics import AnalyticsSummary
from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID regardless of publication state."""
        ...

    async def get_by_user(self, user_id: UUID) -> Profile | None:
        """Get the profile owned by a user."""
        ...

    async def get_by_slug(self, slug: str) -> Profile | None:
        """Get a profile by slug regardless of publication state."""
        ...

    async def get_published_by_slug(self, slug: str) -> Profile | None:
        """Get a published profile of a non-banned user by slug."""
        ...

    async def get_published_by_domain(self, domain: str) -> Profile | None:
        """Get a published profile of a non-banned user by verified custom domain."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile. Unique violations surface at flush."""
        ...

    async def update(self, profile: Profile) -> Profile:
        """Persist editable fields and external link tiles.

        Slug and counters are never written here.
        """
        ...

    async def change_slug(
        self,
        profile_id: UUID,
        new_slug: str,
        expected_last_change: datetime | None,
        changed_at: datetime,
    ) -> bool:
        """Rename if ``last_slug_change`` still equals the value read by the caller."""
        ...

    async def set_custom_domain(self, profile_id: UUID, domain: str | None, verified: bool) -> None:
        """Update the denormalized custom domain fields."""
        ...

    async def increment_counters(
        self,
        profile_id: UUID,
        views: int = 0,
        downloads: int = 0,
        link_clicks: int = 0,
    ) -> bool:
        """Atomically add to the counters. Returns False if the profile is gone."""
        ...

    async def increment_link_click_count(self, profile_id: UUID, link_id: UUID) -> bool:
        """Atomically add one click to an external link tile."""
        ...

    async def get_link(self, profile_id: UUID, link_id: UUID) -> tuple[str, bool] | None:
        """Return (url, is_active) of a tile, or None."""
        ...

    async def get_counters(self, profile_id: UUID) -> AnalyticsSummary | None:
        """Read the denormalized counters only."""
        ...

    async def raise_counters(self, profile_id: UUID, views: int, link_clicks: int) -> bool:
        """Lift counters that are below the given values; never lowers them."""
        ...

    async def raise_link_click_count(self, link_id: UUID, clicks: int) -> bool:
        """Lift a tile's click count to ``clicks`` if it is lower."""
        ...

    async def list_ids(self) -> list[UUID]:
        """IDs of every profile."""
        ...

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Profile]:
        """List profiles, newest first."""
        ...
