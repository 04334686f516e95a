"""SQLAlchemy Unit of Work implementation."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.repositories.sqlalchemy_admin_log_repo import SQLAlchemyAdminLogRepository
from infrastructure.database.repositories.sqlalchemy_analytics_repo import SQLAlchemyAnalyticsRepository
from infrastructure.database.repositories.sqlalchemy_domain_verification_repo import (
    SQLAlchemyDomainVerificationRepository,
)
from infrastructure.database.repositories.sqlalchemy_moderation_repo import SQLAlchemyModerationRepository
from infrastructure.database.repositories.sqlalchemy_profile_repo import SQLAlchemyProfileRepository
from infrastructure.database.repositories.sqlalchemy_user_repo import SQLAlchemyUserRepository


class SQLAlchemyUnitOfWork:
    """Unit of Work implementation using SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    def _require_session(self) -> AsyncSession:
        if not self._session:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._session

    @property
    def users(self) -> SQLAlchemyUserRepository:
        """Get user repository."""
        return SQLAlchemyUserRepository(self._require_session())

    @property
    def profiles(self) -> SQLAlchemyProfileRepository:
        """Get profile repository."""
        return SQLAlchemyProfileRepository(self._require_session())

    @property
    def analytics(self) -> SQLAlchemyAnalyticsRepository:
        """Get analytics event repository."""
        return SQLAlchemyAnalyticsRepository(self._require_session())

    @property
    def domains(self) -> SQLAlchemyDomainVerificationRepository:
        """Get domain verification repository."""
        return SQLAlchemyDomainVerificationRepository(self._require_session())

    @property
    def reports(self) -> SQLAlchemyModerationRepository:
        """Get moderation report repository."""
        return SQLAlchemyModerationRepository(self._require_session())

    @property
    def admin_logs(self) -> SQLAlchemyAdminLogRepository:
        """Get admin log repository."""
        return SQLAlchemyAdminLogRepository(self._require_session())

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self._session:
            await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session:
            await self._session.rollback()

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter the context manager and create session."""
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[Exception],
        exc_tb: Any,
    ) -> None:
        """Exit the context manager and cleanup."""
        if self._session:
            if exc_type:
                await self.rollback()
            await self._session.close()
            self._session = None
