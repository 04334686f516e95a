"""SQLAlchemy implementation of Profile repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from domain.entities.analytics import AnalyticsSummary
from domain.entities.domain_verification import VerificationStatus
from domain.entities.profile import (
    ExternalLink,
    Profile,
    Project,
    SocialLinks,
    Theme,
    WorkExperience,
)
from infrastructure.database.models import (
    DomainVerificationModel,
    ExternalLinkModel,
    ProfileModel,
    UserModel,
)


def _select_profile():
    return (
        select(ProfileModel)
        .options(selectinload(ProfileModel.external_links))
        .execution_options(populate_existing=True)
    )


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository.

    Counter columns are only ever changed with ``col = col + n`` style
    statements so concurrent writers never lose increments.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        return await self._one(_select_profile().where(ProfileModel.id == id))

    async def get_by_user(self, user_id: UUID) -> Profile | None:
        """Get the profile owned by a user."""
        return await self._one(_select_profile().where(ProfileModel.user_id == user_id))

    async def get_by_slug(self, slug: str) -> Profile | None:
        """Get a profile by slug."""
        return await self._one(_select_profile().where(ProfileModel.slug == slug))

    async def get_published_by_slug(self, slug: str) -> Profile | None:
        """Get a published profile of a non-banned user by slug."""
        stmt = (
            _select_profile()
            .join(UserModel, UserModel.id == ProfileModel.user_id)
            .where(
                ProfileModel.slug == slug,
                ProfileModel.is_published.is_(True),
                UserModel.is_banned.is_(False),
            )
        )
        return await self._one(stmt)

    async def get_published_by_domain(self, domain: str) -> Profile | None:
        """Get a published profile of a non-banned user by verified custom domain."""
        stmt = (
            _select_profile()
            .join(UserModel, UserModel.id == ProfileModel.user_id)
            .join(
                DomainVerificationModel,
                DomainVerificationModel.profile_id == ProfileModel.id,
            )
            .where(
                ProfileModel.custom_domain == domain,
                ProfileModel.custom_domain_verified.is_(True),
                ProfileModel.is_published.is_(True),
                UserModel.is_banned.is_(False),
                DomainVerificationModel.domain == domain,
                DomainVerificationModel.verification_status == VerificationStatus.VERIFIED.value,
            )
            .limit(1)
        )
        return await self._one(stmt)

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        model = self._to_model(profile)
        self._session.add(model)
        await self._session.flush()
        created = await self.get(model.id)
        assert created is not None
        return created

    async def update(self, profile: Profile) -> Profile:
        """Update editable fields and replace the external link tiles.

        Tiles whose id is kept retain their click count.
        """
        stmt = _select_profile().where(ProfileModel.id == profile.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Profile {profile.id} not found")

        model.name = profile.name
        model.tagline = profile.tagline
        model.bio = profile.bio
        model.skills = list(profile.skills)
        model.work_history = [item.to_dict() for item in profile.work_history]
        model.projects = [item.to_dict() for item in profile.projects]
        model.social_links = profile.social_links.to_dict()
        model.resume_url = profile.resume_url
        model.theme = profile.theme.value
        model.is_published = profile.is_published
        model.seo_title = profile.seo_title
        model.seo_description = profile.seo_description
        model.og_image = profile.og_image
        model.qr_code_url = profile.qr_code_url
        model.updated_at = profile.updated_at

        existing = {link.id: link for link in model.external_links}
        links: list[ExternalLinkModel] = []
        for position, link in enumerate(profile.external_links):
            link_model = existing.get(link.id)
            if link_model is None:
                link_model = ExternalLinkModel(id=link.id, click_count=0)
            link_model.label = link.label
            link_model.url = link.url
            link_model.icon = link.icon
            link_model.is_active = link.is_active
            link_model.position = position
            links.append(link_model)
        model.external_links = links

        await self._session.flush()
        updated = await self.get(profile.id)
        assert updated is not None
        return updated

    async def change_slug(
        self,
        profile_id: UUID,
        new_slug: str,
        expected_last_change: datetime | None,
        changed_at: datetime,
    ) -> bool:
        """Rename if ``last_slug_change`` still equals the value read by the caller."""
        if expected_last_change is None:
            guard = ProfileModel.last_slug_change.is_(None)
        else:
            guard = ProfileModel.last_slug_change == expected_last_change
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == profile_id, guard)
            .values(slug=new_slug, last_slug_change=changed_at, updated_at=changed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def set_custom_domain(self, profile_id: UUID, domain: str | None, verified: bool) -> None:
        """Update the denormalized custom domain fields."""
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == profile_id)
            .values(custom_domain=domain, custom_domain_verified=verified)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def increment_counters(
        self,
        profile_id: UUID,
        views: int = 0,
        downloads: int = 0,
        link_clicks: int = 0,
    ) -> bool:
        """Atomically add to the counters."""
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == profile_id)
            .values(
                view_count=ProfileModel.view_count + views,
                download_count=ProfileModel.download_count + downloads,
                link_click_count=ProfileModel.link_click_count + link_clicks,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def increment_link_click_count(self, profile_id: UUID, link_id: UUID) -> bool:
        """Atomically add one click to an external link tile."""
        stmt = (
            update(ExternalLinkModel)
            .where(
                ExternalLinkModel.id == link_id,
                ExternalLinkModel.profile_id == profile_id,
            )
            .values(click_count=ExternalLinkModel.click_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def get_link(self, profile_id: UUID, link_id: UUID) -> tuple[str, bool] | None:
        """Return (url, is_active) of a tile, or None."""
        stmt = select(ExternalLinkModel.url, ExternalLinkModel.is_active).where(
            ExternalLinkModel.id == link_id,
            ExternalLinkModel.profile_id == profile_id,
        )
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        return (row.url, row.is_active) if row else None

    async def get_counters(self, profile_id: UUID) -> AnalyticsSummary | None:
        """Read the denormalized counters only."""
        stmt = select(
            ProfileModel.view_count,
            ProfileModel.download_count,
            ProfileModel.link_click_count,
        ).where(ProfileModel.id == profile_id)
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        return AnalyticsSummary(
            views=row.view_count,
            downloads=row.download_count,
            link_clicks=row.link_click_count,
        )

    async def raise_counters(self, profile_id: UUID, views: int, link_clicks: int) -> bool:
        """Lift counters that are below the given values; never lowers them."""
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == profile_id)
            .values(
                view_count=case(
                    (ProfileModel.view_count < views, views),
                    else_=ProfileModel.view_count,
                ),
                link_click_count=case(
                    (ProfileModel.link_click_count < link_clicks, link_clicks),
                    else_=ProfileModel.link_click_count,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def raise_link_click_count(self, link_id: UUID, clicks: int) -> bool:
        """Lift a tile's click count to ``clicks`` if it is lower."""
        stmt = (
            update(ExternalLinkModel)
            .where(
                ExternalLinkModel.id == link_id,
                ExternalLinkModel.click_count < clicks,
            )
            .values(click_count=clicks)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def list_ids(self) -> list[UUID]:
        """IDs of every profile."""
        result = await self._session.execute(select(ProfileModel.id))
        return list(result.scalars())

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Profile]:
        """List profiles, newest first."""
        stmt = (
            _select_profile()
            .order_by(ProfileModel.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def _one(self, stmt) -> Profile | None:
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            user_id=model.user_id,
            slug=model.slug,
            name=model.name,
            tagline=model.tagline,
            bio=model.bio,
            skills=list(model.skills or []),
            work_history=[WorkExperience.from_dict(item) for item in model.work_history or []],
            projects=[Project.from_dict(item) for item in model.projects or []],
            social_links=SocialLinks.from_dict(model.social_links),
            external_links=[
                ExternalLink(
                    id=link.id,
                    label=link.label,
                    url=link.url,
                    icon=link.icon,
                    click_count=link.click_count,
                    is_active=link.is_active,
                    position=link.position,
                )
                for link in model.external_links
            ],
            resume_url=model.resume_url,
            custom_domain=model.custom_domain,
            custom_domain_verified=model.custom_domain_verified,
            theme=Theme(model.theme),
            is_published=model.is_published,
            seo_title=model.seo_title,
            seo_description=model.seo_description,
            og_image=model.og_image,
            qr_code_url=model.qr_code_url,
            view_count=model.view_count,
            download_count=model.download_count,
            link_click_count=model.link_click_count,
            last_slug_change=model.last_slug_change,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            user_id=entity.user_id,
            slug=entity.slug,
            name=entity.name,
            tagline=entity.tagline,
            bio=entity.bio,
            skills=list(entity.skills),
            work_history=[item.to_dict() for item in entity.work_history],
            projects=[item.to_dict() for item in entity.projects],
            social_links=entity.social_links.to_dict(),
            external_links=[
                ExternalLinkModel(
                    id=link.id,
                    label=link.label,
                    url=link.url,
                    icon=link.icon,
                    click_count=0,
                    is_active=link.is_active,
                    position=position,
                )
                for position, link in enumerate(entity.external_links)
            ],
            resume_url=entity.resume_url,
            custom_domain=entity.custom_domain,
            custom_domain_verified=entity.custom_domain_verified,
            theme=entity.theme.value,
            is_published=entity.is_published,
            seo_title=entity.seo_title,
            seo_description=entity.seo_description,
            og_image=entity.og_image,
            qr_code_url=entity.qr_code_url,
            view_count=entity.view_count,
            download_count=entity.download_count,
            link_click_count=entity.link_click_count,
            last_slug_change=entity.last_slug_change,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
