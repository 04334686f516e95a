"""User service: identity sync and billing-driven plan changes."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from core.exceptions import UserBannedError, UserNotFoundError
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class UserService:
    """Service layer for User accounts."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def sync_from_identity(
        self,
        user_id: UUID,
        email: str | None,
        first_name: str | None = None,
        last_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        """Create the user on first authentication, refresh identity fields later.

        Raises:
            UserBannedError: the account is banned
        """
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)

            if user is None:
                now = self._clock()
                user = User(
                    id=user_id,
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    profile_image_url=profile_image_url,
                    created_at=now,
                    updated_at=now,
                )
                try:
                    user = await uow.users.create(user)
                    await uow.commit()
                    logger.info("user_created", user_id=str(user_id))
                except IntegrityError:
                    # Concurrent first request for the same identity
                    await uow.rollback()
                    existing = await uow.users.get(user_id)
                    if existing is None:
                        raise
                    user = existing
            elif (
                user.email != email
                or user.first_name != first_name
                or user.last_name != last_name
                or user.profile_image_url != profile_image_url
            ):
                user.email = email
                user.first_name = first_name
                user.last_name = last_name
                user.profile_image_url = profile_image_url
                user.updated_at = self._clock()
                user = await uow.users.update(user)
                await uow.commit()

        if user.is_banned:
            raise UserBannedError()
        return user

    async def get(self, user_id: UUID) -> User:
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(str(user_id))
            return user

    async def set_pro_status(self, user_id: UUID, is_pro: bool) -> User:
        """Apply a billing provider update to the user's plan."""
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(str(user_id))

            if user.is_pro != is_pro:
                user.is_pro = is_pro
                user.updated_at = self._clock()
                user = await uow.users.update(user)
                await uow.commit()
                logger.info("user_pro_status_changed", user_id=str(user_id), is_pro=is_pro)

            return user
