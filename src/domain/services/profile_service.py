"""Profile lifecycle service: creation, editing, publication and resolution."""

import math
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import urlencode
from uuid import UUID, uuid4

import structlog
from sqlalchemy.exc import IntegrityError

from core.config import settings
from core.exceptions import (
    InvalidSlugError,
    ProfileAlreadyExistsError,
    ProfileIncompleteError,
    ProfileNotFoundError,
    SlugChangeCooldownError,
    SlugTakenError,
    ValidationError,
)
from domain.entities.domain_verification import normalize_domain
from domain.entities.profile import (
    RESERVED_SLUGS,
    ExternalLink,
    Profile,
    Project,
    SocialLinks,
    Theme,
    WorkExperience,
    normalize_slug,
    slug_error,
)
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

# Fields an owner may change through a partial update
EDITABLE_FIELDS = frozenset(
    {
        "slug",
        "name",
        "tagline",
        "bio",
        "skills",
        "work_history",
        "projects",
        "social_links",
        "external_links",
        "resume_url",
        "theme",
        "seo_title",
        "seo_description",
        "og_image",
    }
)


class ProfileService:
    """Service layer for Profile business logic.

    Owner-facing operations are addressed by the owner's user id, which
    identifies exactly one profile.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        base_domain: str = settings.profile_base_domain,
        slug_cooldown_days: int = settings.slug_change_cooldown_days,
        qr_code_service_url: str = settings.qr_code_service_url,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._base_domain = normalize_domain(base_domain)
        self._cooldown_days = slug_cooldown_days
        self._cooldown = timedelta(days=slug_cooldown_days)
        self._qr_code_service_url = qr_code_service_url
        self._clock = clock

    async def create(self, user_id: UUID, slug: str) -> Profile:
        """Create an unpublished profile for a user.

        Raises:
            InvalidSlugError: slug fails the charset/length/reserved rules
            ProfileAlreadyExistsError: the user already owns a profile
            SlugTakenError: another profile uses the slug
        """
        slug = self._validated_slug(slug)

        async with self._uow_factory() as uow:
            if await uow.profiles.get_by_user(user_id):
                raise ProfileAlreadyExistsError(str(user_id))
            if await uow.profiles.get_by_slug(slug):
                raise SlugTakenError(slug)

            now = self._clock()
            profile = Profile(user_id=user_id, slug=slug, created_at=now, updated_at=now)

            try:
                created = await uow.profiles.create(profile)
                await uow.commit()
            except IntegrityError:
                # Lost a race on one of the unique constraints
                await uow.rollback()
                if await uow.profiles.get_by_user(user_id):
                    raise ProfileAlreadyExistsError(str(user_id))
                raise SlugTakenError(slug)

        logger.info("profile_created", profile_id=str(created.id), slug=slug)
        return created

    async def get_for_user(self, user_id: UUID) -> Profile:
        """Get the profile owned by a user."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()
            return profile

    async def update(self, user_id: UUID, changes: dict[str, Any]) -> Profile:
        """Apply a partial update to the user's profile.

        A slug change is subject to the cooldown and is guarded against
        concurrent renames; nothing is written when it is refused.

        Raises:
            ValidationError: unknown, read-only or malformed fields
            SlugChangeCooldownError: slug changed within the cooldown
            SlugTakenError: requested slug belongs to another profile
        """
        rejected = sorted(set(changes) - EDITABLE_FIELDS)
        if rejected:
            raise ValidationError(
                "These fields cannot be updated: " + ", ".join(rejected),
                details={"fields": rejected},
            )
        values = self._parse_changes(changes)

        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()

            now = self._clock()
            new_slug = values.pop("slug", None)
            if new_slug is not None and new_slug != profile.slug:
                await self._change_slug(uow, profile, new_slug, now)

            links = values.pop("external_links", None)
            if links is not None:
                profile.external_links = self._merge_links(profile, links)

            for field_name, value in values.items():
                setattr(profile, field_name, value)

            profile.updated_at = now
            updated = await uow.profiles.update(profile)
            await uow.commit()

        logger.info(
            "profile_updated",
            profile_id=str(updated.id),
            fields=sorted(changes),
        )
        return updated

    async def publish(self, user_id: UUID) -> Profile:
        """Make the profile publicly reachable once it has the required fields."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()

            missing = profile.missing_publish_fields()
            if missing:
                raise ProfileIncompleteError(missing)

            profile.publish(self._clock())
            updated = await uow.profiles.update(profile)
            await uow.commit()

        logger.info("profile_published", profile_id=str(updated.id))
        return updated

    async def unpublish(self, user_id: UUID) -> Profile:
        """Hide the profile; it stops resolving immediately."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()

            profile.unpublish(self._clock())
            updated = await uow.profiles.update(profile)
            await uow.commit()

        logger.info("profile_unpublished", profile_id=str(updated.id))
        return updated

    async def resolve(self, identifier: str) -> Profile:
        """Resolve a bare slug, a host under the base domain, or a custom domain.

        Only published profiles of non-banned users are returned; anything
        else is reported as not found.
        """
        host = normalize_domain(identifier).split(":", 1)[0]
        if not host:
            raise ProfileNotFoundError()

        async with self._uow_factory() as uow:
            if "." not in host:
                profile = await uow.profiles.get_published_by_slug(host)
            elif host == self._base_domain:
                profile = None
            elif host.endswith("." + self._base_domain):
                label = host[: -len(self._base_domain) - 1]
                if "." in label or label in RESERVED_SLUGS:
                    profile = None
                else:
                    profile = await uow.profiles.get_published_by_slug(label)
            else:
                profile = await uow.profiles.get_published_by_domain(host)

        if not profile:
            raise ProfileNotFoundError()
        return profile

    async def generate_qr_code(self, user_id: UUID) -> Profile:
        """Store a QR-code image URL pointing at the profile's public address."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()

            query = urlencode({"size": "300x300", "data": self.public_url(profile)})
            profile.qr_code_url = f"{self._qr_code_service_url}?{query}"
            profile.updated_at = self._clock()
            updated = await uow.profiles.update(profile)
            await uow.commit()

        return updated

    def public_url(self, profile: Profile) -> str:
        if profile.custom_domain and profile.custom_domain_verified:
            return f"https://{profile.custom_domain}"
        return f"https://{profile.slug}.{self._base_domain}"

    async def _change_slug(
        self,
        uow: IUnitOfWork,
        profile: Profile,
        new_slug: str,
        now: datetime,
    ) -> None:
        self._check_cooldown(profile.last_slug_change, now)

        holder = await uow.profiles.get_by_slug(new_slug)
        if holder and holder.id != profile.id:
            raise SlugTakenError(new_slug)

        try:
            changed = await uow.profiles.change_slug(
                profile.id, new_slug, profile.last_slug_change, now
            )
        except IntegrityError:
            await uow.rollback()
            raise SlugTakenError(new_slug)

        if not changed:
            # A concurrent rename got there first
            current = await uow.profiles.get(profile.id)
            self._check_cooldown(current.last_slug_change if current else now, now)
            raise SlugChangeCooldownError(
                retry_after_seconds=int(self._cooldown.total_seconds()),
                cooldown_days=self._cooldown_days,
            )

        logger.info(
            "profile_slug_changed",
            profile_id=str(profile.id),
            old_slug=profile.slug,
            new_slug=new_slug,
        )
        profile.slug = new_slug
        profile.last_slug_change = now

    def _check_cooldown(self, last_change: datetime | None, now: datetime) -> None:
        if last_change is None:
            return
        remaining = (last_change + self._cooldown) - now
        if remaining.total_seconds() > 0:
            raise SlugChangeCooldownError(
                retry_after_seconds=math.ceil(remaining.total_seconds()),
                cooldown_days=self._cooldown_days,
            )

    @staticmethod
    def _validated_slug(raw: str) -> str:
        slug = normalize_slug(raw)
        reason = slug_error(slug)
        if reason:
            raise InvalidSlugError(slug, reason)
        return slug

    def _parse_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Turn raw patch values into typed entity values."""
        values: dict[str, Any] = {}
        try:
            for key, value in changes.items():
                if key == "slug":
                    values[key] = self._validated_slug(str(value or ""))
                elif key == "theme":
                    values[key] = Theme(value)
                elif key == "skills":
                    values[key] = [str(skill).strip() for skill in value or [] if str(skill).strip()]
                elif key == "work_history":
                    values[key] = [WorkExperience.from_dict(item) for item in value or []]
                elif key == "projects":
                    values[key] = [Project.from_dict(item) for item in value or []]
                elif key == "social_links":
                    values[key] = SocialLinks.from_dict(value)
                elif key == "external_links":
                    values[key] = list(value or [])
                else:
                    values[key] = value
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid value for profile field: {e}") from e
        return values

    @staticmethod
    def _merge_links(profile: Profile, links: list[dict[str, Any]]) -> list[ExternalLink]:
        """Build the new tile list; tiles keep their id and counter when the id is known."""
        known = {link.id: link for link in profile.external_links}
        merged: list[ExternalLink] = []
        for position, data in enumerate(links):
            try:
                link_id = UUID(str(data["id"])) if data.get("id") else None
                label = str(data["label"]).strip()
                url = str(data["url"]).strip()
            except (KeyError, ValueError) as e:
                raise ValidationError(f"Invalid external link: {e}") from e
            if not label or not url:
                raise ValidationError("External links need a label and a url")

            existing = known.get(link_id) if link_id else None
            merged.append(
                ExternalLink(
                    id=existing.id if existing else uuid4(),
                    label=label,
                    url=url,
                    icon=data.get("icon"),
                    click_count=existing.click_count if existing else 0,
                    is_active=bool(data.get("is_active", True)),
                    position=position,
                )
            )
        return merged
