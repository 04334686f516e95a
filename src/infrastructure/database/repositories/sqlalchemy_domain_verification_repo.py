"""SQLAlchemy implementation of DomainVerification repository."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.domain_verification import (
    DomainVerification,
    SslStatus,
    VerificationStatus,
)
from infrastructure.database.models import DomainVerificationModel


class SQLAlchemyDomainVerificationRepository:
    """SQLAlchemy implementation of IDomainVerificationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> DomainVerification | None:
        """Get a verification record by ID."""
        stmt = select(DomainVerificationModel).where(DomainVerificationModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_current_for_profile(self, profile_id: UUID) -> DomainVerification | None:
        """Get the most recent record of a profile."""
        stmt = (
            select(DomainVerificationModel)
            .where(DomainVerificationModel.profile_id == profile_id)
            .order_by(DomainVerificationModel.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_active_by_domain(self, domain: str) -> DomainVerification | None:
        """Get the non-failed record holding a domain, if any."""
        stmt = (
            select(DomainVerificationModel)
            .where(
                DomainVerificationModel.domain == domain,
                DomainVerificationModel.verification_status != VerificationStatus.FAILED.value,
            )
            .order_by(DomainVerificationModel.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, verification: DomainVerification) -> DomainVerification:
        """Create a new verification record."""
        model = self._to_model(verification)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def save_state(
        self, verification: DomainVerification, expected: DomainVerification
    ) -> bool:
        """Write the check result if the row still holds the state ``expected`` was read with.

        Returns False when another check or a resubmission changed the row first.
        """
        if expected.last_checked is None:
            checked_guard = DomainVerificationModel.last_checked.is_(None)
        else:
            checked_guard = DomainVerificationModel.last_checked == expected.last_checked
        stmt = (
            update(DomainVerificationModel)
            .where(
                DomainVerificationModel.id == verification.id,
                DomainVerificationModel.verification_status
                == expected.verification_status.value,
                DomainVerificationModel.ssl_status == expected.ssl_status.value,
                DomainVerificationModel.consecutive_failures == expected.consecutive_failures,
                checked_guard,
            )
            .values(
                verification_status=verification.verification_status.value,
                dns_records=verification.dns_records,
                ssl_status=verification.ssl_status.value,
                consecutive_failures=verification.consecutive_failures,
                last_checked=verification.last_checked,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def claim_certificate(
        self, id: UUID, requested_at: datetime, stale_before: datetime
    ) -> bool:
        """Take the right to request a certificate for a verified record.

        A claim older than ``stale_before`` is treated as abandoned.
        """
        stmt = (
            update(DomainVerificationModel)
            .where(
                DomainVerificationModel.id == id,
                DomainVerificationModel.verification_status == VerificationStatus.VERIFIED.value,
                DomainVerificationModel.ssl_status == SslStatus.PENDING.value,
                or_(
                    DomainVerificationModel.ssl_requested_at.is_(None),
                    DomainVerificationModel.ssl_requested_at < stale_before,
                ),
            )
            .values(ssl_requested_at=requested_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def finish_certificate(self, id: UUID, ssl_status: SslStatus | None) -> None:
        """Release the claim, recording the authority's answer when there is one."""
        values: dict[str, Any] = {"ssl_requested_at": None}
        if ssl_status is not None:
            values["ssl_status"] = ssl_status.value
        stmt = (
            update(DomainVerificationModel)
            .where(
                DomainVerificationModel.id == id,
                DomainVerificationModel.ssl_status == SslStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def touch(self, id: UUID, checked_at: datetime) -> None:
        """Only update last_checked."""
        stmt = (
            update(DomainVerificationModel)
            .where(DomainVerificationModel.id == id)
            .values(last_checked=checked_at)
        )
        await self._session.execute(stmt)

    async def delete_for_profile(self, profile_id: UUID) -> int:
        """Delete every record of a profile."""
        stmt = delete(DomainVerificationModel).where(
            DomainVerificationModel.profile_id == profile_id
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def list_due(self, checked_before: datetime, limit: int = 50) -> list[DomainVerification]:
        """Pending or verified records not checked since ``checked_before``."""
        stmt = (
            select(DomainVerificationModel)
            .where(
                DomainVerificationModel.verification_status.in_(
                    [VerificationStatus.PENDING.value, VerificationStatus.VERIFIED.value]
                ),
                or_(
                    DomainVerificationModel.last_checked.is_(None),
                    DomainVerificationModel.last_checked < checked_before,
                ),
            )
            .order_by(DomainVerificationModel.last_checked.asc().nulls_first())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: DomainVerificationModel) -> DomainVerification:
        """Convert ORM model to domain entity."""
        return DomainVerification(
            id=model.id,
            profile_id=model.profile_id,
            domain=model.domain,
            verification_status=VerificationStatus(model.verification_status),
            cname_target=model.cname_target,
            dns_records=list(model.dns_records or []),
            ssl_status=SslStatus(model.ssl_status),
            ssl_requested_at=model.ssl_requested_at,
            consecutive_failures=model.consecutive_failures,
            last_checked=model.last_checked,
            created_at=model.created_at,
        )

    def _to_model(self, entity: DomainVerification) -> DomainVerificationModel:
        """Convert domain entity to ORM model."""
        return DomainVerificationModel(
            id=entity.id,
            profile_id=entity.profile_id,
            domain=entity.domain,
            verification_status=entity.verification_status.value,
            cname_target=entity.cname_target,
            dns_records=entity.dns_records,
            ssl_status=entity.ssl_status.value,
            ssl_requested_at=entity.ssl_requested_at,
            consecutive_failures=entity.consecutive_failures,
            last_checked=entity.last_checked,
            created_at=entity.created_at,
        )
