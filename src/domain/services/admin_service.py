"""Admin console operations on users and profiles."""

from collections.abc import Callable
from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog

from core.exceptions import UserNotFoundError, ValidationError
from domain.entities.admin_log import AdminActions
from domain.entities.profile import Profile
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.admin_log_service import AdminLogService

logger = structlog.get_logger()


class AdminService:
    """Service layer for admin-only account management.

    Callers are expected to have checked that ``admin_id`` is an admin.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        admin_log_service: Optional[AdminLogService] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._admin_log = admin_log_service
        self._clock = clock

    async def list_users(self, limit: int = 100, offset: int = 0) -> list[User]:
        async with self._uow_factory() as uow:
            return await uow.users.list_all(limit=limit, offset=offset)  # type: ignore[no-any-return]

    async def list_profiles(self, limit: int = 100, offset: int = 0) -> list[Profile]:
        async with self._uow_factory() as uow:
            return await uow.profiles.list_all(limit=limit, offset=offset)  # type: ignore[no-any-return]

    async def ban(
        self,
        admin_id: UUID,
        user_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> User:
        """Ban a user. Their profile stops resolving immediately."""
        if admin_id == user_id:
            raise ValidationError("Admins cannot ban themselves")
        return await self._set_flag(
            admin_id, user_id, "is_banned", True, AdminActions.USER_BANNED, ip_address, user_agent
        )

    async def unban(
        self,
        admin_id: UUID,
        user_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> User:
        return await self._set_flag(
            admin_id, user_id, "is_banned", False, AdminActions.USER_UNBANNED, ip_address, user_agent
        )

    async def set_admin(
        self,
        admin_id: UUID,
        user_id: UUID,
        is_admin: bool,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> User:
        """Grant or revoke admin rights."""
        if admin_id == user_id and not is_admin:
            raise ValidationError("Admins cannot revoke their own admin rights")
        action = AdminActions.USER_ADMIN_GRANTED if is_admin else AdminActions.USER_ADMIN_REVOKED
        return await self._set_flag(
            admin_id, user_id, "is_admin", is_admin, action, ip_address, user_agent
        )

    async def _set_flag(
        self,
        admin_id: UUID,
        user_id: UUID,
        flag: str,
        value: bool,
        action: str,
        ip_address: str | None,
        user_agent: str | None,
    ) -> User:
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(str(user_id))

            previous = getattr(user, flag)
            setattr(user, flag, value)
            user.updated_at = self._clock()
            updated = await uow.users.update(user)

            if self._admin_log:
                await self._admin_log.log(
                    uow,
                    admin_id=admin_id,
                    action=action,
                    resource_type="user",
                    resource_id=str(user_id),
                    details={flag: {"old": previous, "new": value}},
                    ip_address=ip_address,
                    user_agent=user_agent,
                )

            await uow.commit()

        logger.info(action.replace(".", "_"), admin_id=str(admin_id), user_id=str(user_id))
        return updated
