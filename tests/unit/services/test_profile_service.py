"""Unit tests for ProfileService."""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from core.exceptions import (
    InvalidSlugError,
    ProfileAlreadyExistsError,
    ProfileIncompleteError,
    ProfileNotFoundError,
    SlugChangeCooldownError,
    SlugTakenError,
    ValidationError,
)
from domain.entities.profile import ExternalLink, Profile, Theme, WorkExperience
from domain.services.profile_service import ProfileService
from tests.unit.conftest import FakeUnitOfWork, FixedClock


def _integrity_error() -> IntegrityError:
    return IntegrityError("INSERT", {}, Exception("duplicate key"))


@pytest.fixture
def service(uow: FakeUnitOfWork, clock: FixedClock) -> ProfileService:
    return ProfileService(
        lambda: uow,
        base_domain="namedrop.cv",
        slug_cooldown_days=30,
        qr_code_service_url="https://qr.example/create",
        clock=clock,
    )


@pytest.fixture
def profile(user_id: UUID) -> Profile:
    return Profile(user_id=user_id, slug="alice")


@pytest.fixture(autouse=True)
def passthrough_writes(uow: FakeUnitOfWork) -> None:
    uow.profiles.create.side_effect = lambda p: p
    uow.profiles.update.side_effect = lambda p: p


# --- create ---


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_unpublished_profile(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, clock: FixedClock
    ) -> None:
        uow.profiles.get_by_user.return_value = None
        uow.profiles.get_by_slug.return_value = None

        result = await service.create(user_id, "  Alice ")

        assert result.slug == "alice"
        assert result.user_id == user_id
        assert result.is_published is False
        assert result.last_slug_change is None
        assert result.created_at == clock.now
        assert uow.committed

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["ab", "-alice", "alice-", "al--ice", "al_ice", "admin", "a" * 33])
    async def test_rejects_invalid_slug(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, slug: str
    ) -> None:
        with pytest.raises(InvalidSlugError):
            await service.create(user_id, slug)

        uow.profiles.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_profile_rejected(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        uow.profiles.get_by_user.return_value = profile

        with pytest.raises(ProfileAlreadyExistsError):
            await service.create(user_id, "another")

    @pytest.mark.asyncio
    async def test_taken_slug_rejected(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.profiles.get_by_user.return_value = None
        uow.profiles.get_by_slug.return_value = Profile(user_id=uuid4(), slug="alice")

        with pytest.raises(SlugTakenError):
            await service.create(user_id, "alice")

    @pytest.mark.asyncio
    async def test_lost_race_on_slug_maps_to_slug_taken(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.profiles.get_by_user.return_value = None
        uow.profiles.get_by_slug.return_value = None
        uow.profiles.create.side_effect = _integrity_error()

        with pytest.raises(SlugTakenError):
            await service.create(user_id, "bob")

        assert uow.rolled_back

    @pytest.mark.asyncio
    async def test_lost_race_on_owner_maps_to_already_exists(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        uow.profiles.get_by_user.side_effect = [None, profile]
        uow.profiles.get_by_slug.return_value = None
        uow.profiles.create.side_effect = _integrity_error()

        with pytest.raises(ProfileAlreadyExistsError):
            await service.create(user_id, "bob")


# --- update ---


class TestUpdate:
    @pytest.mark.asyncio
    async def test_updates_editable_fields(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        uow.profiles.get_by_user.return_value = profile

        result = await service.update(
            user_id,
            {
                "name": "Alice Doe",
                "theme": "modern",
                "skills": ["python", " ", "sql "],
                "work_history": [
                    {"company": "Acme", "position": "Engineer", "start_date": "2020-01"}
                ],
                "social_links": {"github": "alice", "twitter": None},
            },
        )

        assert result.name == "Alice Doe"
        assert result.theme == Theme.MODERN
        assert result.skills == ["python", "sql"]
        assert result.work_history[0].company == "Acme"
        assert result.social_links.to_dict() == {"github": "alice"}
        assert uow.committed

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["view_count", "is_published", "custom_domain", "user_id"])
    async def test_rejects_read_only_fields(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, field: str
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.update(user_id, {field: 1})

        assert exc_info.value.details == {"fields": [field]}
        uow.profiles.get_by_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_unknown_theme(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        with pytest.raises(ValidationError):
            await service.update(user_id, {"theme": "neon"})

    @pytest.mark.asyncio
    async def test_missing_profile(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.profiles.get_by_user.return_value = None

        with pytest.raises(ProfileNotFoundError):
            await service.update(user_id, {"name": "x"})

    @pytest.mark.asyncio
    async def test_first_slug_change_is_allowed(
        self,
        service: ProfileService,
        uow: FakeUnitOfWork,
        user_id: UUID,
        profile: Profile,
        clock: FixedClock,
    ) -> None:
        uow.profiles.get_by_user.return_value = profile
        uow.profiles.get_by_slug.return_value = None
        uow.profiles.change_slug.return_value = True

        result = await service.update(user_id, {"slug": "alice-doe"})

        assert result.slug == "alice-doe"
        assert result.last_slug_change == clock.now
        uow.profiles.change_slug.assert_called_once_with(profile.id, "alice-doe", None, clock.now)

    @pytest.mark.asyncio
    async def test_slug_change_within_cooldown_is_refused(
        self,
        service: ProfileService,
        uow: FakeUnitOfWork,
        user_id: UUID,
        profile: Profile,
        clock: FixedClock,
    ) -> None:
        profile.last_slug_change = clock.now - timedelta(days=10)
        uow.profiles.get_by_user.return_value = profile

        with pytest.raises(SlugChangeCooldownError) as exc_info:
            await service.update(user_id, {"slug": "alice-doe", "name": "Alice"})

        assert exc_info.value.status_code == 429
        assert exc_info.value.details == {"retry_after_seconds": 20 * 86400}
        uow.profiles.change_slug.assert_not_called()
        uow.profiles.update.assert_not_called()
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_slug_change_after_cooldown(
        self,
        service: ProfileService,
        uow: FakeUnitOfWork,
        user_id: UUID,
        profile: Profile,
        clock: FixedClock,
    ) -> None:
        previous = clock.now - timedelta(days=31)
        profile.last_slug_change = previous
        uow.profiles.get_by_user.return_value = profile
        uow.profiles.get_by_slug.return_value = None
        uow.profiles.change_slug.return_value = True

        result = await service.update(user_id, {"slug": "alice-doe"})

        assert result.slug == "alice-doe"
        uow.profiles.change_slug.assert_called_once_with(
            profile.id, "alice-doe", previous, clock.now
        )

    @pytest.mark.asyncio
    async def test_same_slug_is_not_a_change(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        uow.profiles.get_by_user.return_value = profile

        await service.update(user_id, {"slug": "ALICE"})

        uow.profiles.change_slug.assert_not_called()

    @pytest.mark.asyncio
    async def test_slug_held_by_another_profile(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        uow.profiles.get_by_user.return_value = profile
        uow.profiles.get_by_slug.return_value = Profile(user_id=uuid4(), slug="bob")

        with pytest.raises(SlugTakenError):
            await service.update(user_id, {"slug": "bob"})

    @pytest.mark.asyncio
    async def test_concurrent_rename_loses_guard(
        self,
        service: ProfileService,
        uow: FakeUnitOfWork,
        user_id: UUID,
        profile: Profile,
        clock: FixedClock,
    ) -> None:
        uow.profiles.get_by_user.return_value = profile
        uow.profiles.get_by_slug.return_value = None
        uow.profiles.change_slug.return_value = False
        uow.profiles.get.return_value = Profile(
            id=profile.id, user_id=user_id, slug="alice-x", last_slug_change=clock.now
        )

        with pytest.raises(SlugChangeCooldownError):
            await service.update(user_id, {"slug": "alice-y"})

        uow.profiles.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_external_links_keep_id_and_clicks(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        existing = ExternalLink(label="GitHub", url="https://github.com/alice", click_count=7)
        profile.external_links = [existing]
        uow.profiles.get_by_user.return_value = profile

        result = await service.update(
            user_id,
            {
                "external_links": [
                    {"label": "Blog", "url": "https://alice.dev"},
                    {"id": str(existing.id), "label": "GitHub", "url": "https://github.com/a"},
                ]
            },
        )

        blog, github = result.external_links
        assert blog.id != existing.id
        assert blog.click_count == 0
        assert blog.position == 0
        assert github.id == existing.id
        assert github.click_count == 7
        assert github.url == "https://github.com/a"
        assert github.position == 1

    @pytest.mark.asyncio
    async def test_external_link_needs_label(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        uow.profiles.get_by_user.return_value = profile

        with pytest.raises(ValidationError):
            await service.update(user_id, {"external_links": [{"label": " ", "url": "https://x.y"}]})


# --- publish / unpublish ---


class TestPublish:
    @pytest.mark.asyncio
    async def test_incomplete_profile_cannot_publish(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        uow.profiles.get_by_user.return_value = profile

        with pytest.raises(ProfileIncompleteError) as exc_info:
            await service.publish(user_id)

        assert exc_info.value.details == {"missing": ["name", "bio or work_history"]}

    @pytest.mark.asyncio
    async def test_work_history_satisfies_content_requirement(
        self,
        service: ProfileService,
        uow: FakeUnitOfWork,
        user_id: UUID,
        profile: Profile,
        clock: FixedClock,
    ) -> None:
        profile.name = "Alice"
        profile.work_history = [WorkExperience(company="Acme", position="Dev", start_date="2020")]
        uow.profiles.get_by_user.return_value = profile

        result = await service.publish(user_id)

        assert result.is_published is True
        assert result.updated_at == clock.now
        assert uow.committed

    @pytest.mark.asyncio
    async def test_unpublish(
        self,
        service: ProfileService,
        uow: FakeUnitOfWork,
        user_id: UUID,
        profile: Profile,
        clock: FixedClock,
    ) -> None:
        profile.is_published = True
        uow.profiles.get_by_user.return_value = profile

        result = await service.unpublish(user_id)

        assert result.is_published is False
        assert result.updated_at == clock.now


# --- resolve ---


class TestResolve:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "identifier",
        ["alice", "alice.namedrop.cv", "Alice.NameDrop.CV.", "alice.namedrop.cv:443"],
    )
    async def test_slug_and_subdomain(
        self, service: ProfileService, uow: FakeUnitOfWork, profile: Profile, identifier: str
    ) -> None:
        uow.profiles.get_published_by_slug.return_value = profile

        result = await service.resolve(identifier)

        assert result is profile
        uow.profiles.get_published_by_slug.assert_called_once_with("alice")

    @pytest.mark.asyncio
    async def test_custom_domain(
        self, service: ProfileService, uow: FakeUnitOfWork, profile: Profile
    ) -> None:
        uow.profiles.get_published_by_domain.return_value = profile

        result = await service.resolve("cv.alice.dev")

        assert result is profile
        uow.profiles.get_published_by_domain.assert_called_once_with("cv.alice.dev")
        uow.profiles.get_published_by_slug.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "identifier", ["namedrop.cv", "www.namedrop.cv", "a.b.namedrop.cv", "", "  "]
    )
    async def test_never_resolves(
        self, service: ProfileService, uow: FakeUnitOfWork, identifier: str
    ) -> None:
        with pytest.raises(ProfileNotFoundError):
            await service.resolve(identifier)

        uow.profiles.get_published_by_slug.assert_not_called()
        uow.profiles.get_published_by_domain.assert_not_called()

    @pytest.mark.asyncio
    async def test_unpublished_or_banned_is_not_found(
        self, service: ProfileService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.get_published_by_slug.return_value = None

        with pytest.raises(ProfileNotFoundError):
            await service.resolve("alice")


# --- public address ---


class TestPublicAddress:
    def test_subdomain_when_no_verified_domain(
        self, service: ProfileService, profile: Profile
    ) -> None:
        profile.custom_domain = "cv.alice.dev"

        assert service.public_url(profile) == "https://alice.namedrop.cv"

    def test_verified_custom_domain(self, service: ProfileService, profile: Profile) -> None:
        profile.custom_domain = "cv.alice.dev"
        profile.custom_domain_verified = True

        assert service.public_url(profile) == "https://cv.alice.dev"

    @pytest.mark.asyncio
    async def test_qr_code_points_at_public_url(
        self, service: ProfileService, uow: FakeUnitOfWork, user_id: UUID, profile: Profile
    ) -> None:
        uow.profiles.get_by_user.return_value = profile

        result = await service.generate_qr_code(user_id)

        assert result.qr_code_url == (
            "https://qr.example/create?size=300x300&data=https%3A%2F%2Falice.namedrop.cv"
        )
        assert uow.committed
