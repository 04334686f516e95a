"""Service factories used as FastAPI dependencies."""

from functools import lru_cache
from typing import Callable

from domain.services.admin_log_service import AdminLogService
from domain.services.admin_service import AdminService
from domain.services.analytics_service import AnalyticsService
from domain.services.domain_verification_service import DomainVerificationService
from domain.services.moderation_service import ModerationService
from domain.services.profile_service import ProfileService
from domain.services.user_service import UserService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.domains.authority import DnsSslAuthority


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_domain_authority() -> DnsSslAuthority:
    """Get the DNS/SSL authority client."""
    return DnsSslAuthority()


@lru_cache
def get_admin_log_service() -> AdminLogService:
    """Get Admin Log service instance."""
    return AdminLogService(get_uow_factory())


@lru_cache
def get_user_service() -> UserService:
    """Get User service instance."""
    return UserService(get_uow_factory())


@lru_cache
def get_admin_service() -> AdminService:
    """Get Admin service instance."""
    return AdminService(get_uow_factory(), admin_log_service=get_admin_log_service())


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_uow_factory())


@lru_cache
def get_analytics_service() -> AnalyticsService:
    """Get Analytics service instance."""
    return AnalyticsService(get_uow_factory())


@lru_cache
def get_domain_verification_service() -> DomainVerificationService:
    """Get Domain Verification service instance."""
    return DomainVerificationService(get_uow_factory(), get_domain_authority())


@lru_cache
def get_moderation_service() -> ModerationService:
    """Get Moderation service instance."""
    return ModerationService(get_uow_factory(), admin_log_service=get_admin_log_service())
