"""Custom domain verification service."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from core.config import settings
from core.exceptions import (
    AppException,
    DomainTakenError,
    DomainVerificationNotFoundError,
    ExternalServiceError,
    InvalidDomainError,
    ProfileNotFoundError,
    ProRequiredError,
)
from domain.entities.domain_verification import (
    CheckOutcome,
    DomainVerification,
    SslStatus,
    VerificationStatus,
    domain_error,
    hostnames_match,
    normalize_domain,
)
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.domains.provider import IDomainAuthority

logger = structlog.get_logger()

# A certificate claim older than this is taken to be abandoned
SSL_CLAIM_LEASE = timedelta(minutes=10)


class DomainVerificationService:
    """Drives a custom domain from submission to verified with SSL issued.

    DNS and certificate calls are made with no unit of work open; the
    resulting state is written afterwards in a single transaction.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        authority: IDomainAuthority,
        cname_target: str = settings.cname_target,
        base_domain: str = settings.profile_base_domain,
        max_consecutive_failures: int = settings.dns_max_consecutive_failures,
        recheck_interval_seconds: int = settings.domain_recheck_interval_seconds,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._authority = authority
        self._cname_target = normalize_domain(cname_target)
        self._base_domain = normalize_domain(base_domain)
        self._max_failures = max_consecutive_failures
        self._recheck_interval = timedelta(seconds=recheck_interval_seconds)
        self._clock = clock

    async def submit(self, user_id: UUID, domain: str) -> DomainVerification:
        """Attach a custom domain to the user's profile as a fresh pending record.

        Any earlier record of the profile is replaced.

        Raises:
            InvalidDomainError: malformed host or one under the base domain
            ProRequiredError: the user is not a Pro subscriber
            DomainTakenError: another profile holds the domain
        """
        domain = normalize_domain(domain)
        reason = domain_error(domain)
        if reason:
            raise InvalidDomainError(domain, reason)
        if domain == self._base_domain or domain.endswith("." + self._base_domain):
            raise InvalidDomainError(
                domain, f"subdomains of {self._base_domain} are assigned automatically"
            )

        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user or not user.is_pro:
                raise ProRequiredError("Custom domains")

            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()

            holder = await uow.domains.get_active_by_domain(domain)
            if holder and holder.profile_id != profile.id:
                raise DomainTakenError(domain)

            try:
                await uow.domains.delete_for_profile(profile.id)
                created = await uow.domains.create(
                    DomainVerification(
                        profile_id=profile.id,
                        domain=domain,
                        cname_target=self._cname_target,
                        created_at=self._clock(),
                    )
                )
                await uow.profiles.set_custom_domain(profile.id, domain, verified=False)
                await uow.commit()
            except IntegrityError:
                await uow.rollback()
                raise DomainTakenError(domain)

        logger.info("domain_submitted", profile_id=str(profile.id), domain=domain)
        return created

    async def get_status(self, user_id: UUID) -> DomainVerification:
        """Current verification record of the user's profile."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()

            record = await uow.domains.get_current_for_profile(profile.id)
            if not record:
                raise DomainVerificationNotFoundError()
            return record

    async def remove(self, user_id: UUID) -> None:
        """Detach the custom domain and drop its verification records."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()

            deleted = await uow.domains.delete_for_profile(profile.id)
            if not deleted and not profile.custom_domain:
                raise DomainVerificationNotFoundError()

            await uow.profiles.set_custom_domain(profile.id, None, verified=False)
            await uow.commit()

        logger.info("domain_removed", profile_id=str(profile.id))

    async def recheck(self, user_id: UUID) -> DomainVerification:
        """User-triggered recheck. A failed record is retried from pending."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_user(user_id)
            if not profile:
                raise ProfileNotFoundError()

            record = await uow.domains.get_current_for_profile(profile.id)
            if not record:
                raise DomainVerificationNotFoundError()

        return await self._check(record)

    async def recheck_due(self, limit: int = settings.domain_recheck_batch_size) -> dict[str, int]:
        """Recheck pending/verified records not checked within the interval.

        A failure on one record is logged and does not stop the batch.
        """
        cutoff = self._clock() - self._recheck_interval
        async with self._uow_factory() as uow:
            due = await uow.domains.list_due(cutoff, limit=limit)

        checked = errors = 0
        for record in due:
            if record.verification_status == VerificationStatus.FAILED:
                continue
            try:
                await self._check(record)
                checked += 1
            except AppException as e:
                errors += 1
                logger.warning(
                    "domain_recheck_failed",
                    domain=record.domain,
                    error_code=e.error_code,
                )
            except Exception:
                errors += 1
                logger.exception("domain_recheck_failed", domain=record.domain)

        logger.info("domain_recheck_batch_completed", due=len(due), checked=checked, errors=errors)
        return {"due": len(due), "checked": checked, "errors": errors}

    async def _check(self, record: DomainVerification) -> DomainVerification:
        checked_at = self._clock()
        try:
            lookup = await self._authority.resolve_cname(record.domain)
        except ExternalServiceError:
            async with self._uow_factory() as uow:
                await uow.domains.touch(record.id, checked_at)
                await uow.commit()
            raise

        if hostnames_match(lookup.target, record.cname_target):
            outcome = CheckOutcome.MATCH
        elif lookup.target:
            outcome = CheckOutcome.MISMATCH
        else:
            outcome = CheckOutcome.UNRESOLVED

        read = replace(record)
        previous = record.verification_status
        entered = record.apply_check(outcome, lookup.records, checked_at, self._max_failures)

        async with self._uow_factory() as uow:
            if not await uow.domains.save_state(record, expected=read):
                current = await uow.domains.get(record.id)
                if not current:
                    # Replaced or removed while DNS was being queried
                    raise DomainVerificationNotFoundError()
                # A newer check already stored its result
                logger.info(
                    "domain_check_superseded",
                    domain=record.domain,
                    observed=lookup.target,
                    current=current.verification_status,
                )
                return current
            await uow.profiles.set_custom_domain(
                record.profile_id, record.domain, verified=record.is_verified
            )
            await uow.commit()

        if entered:
            logger.info(
                "domain_status_changed",
                domain=record.domain,
                previous=previous,
                current=record.verification_status,
                observed=lookup.target,
            )
        if record.needs_certificate:
            await self._request_certificate(record, checked_at)
        if record.is_verified and previous != VerificationStatus.VERIFIED:
            logger.info("domain_verified", domain=record.domain, ssl_status=record.ssl_status)
        return record

    async def _request_certificate(self, record: DomainVerification, now: datetime) -> None:
        """Ask the authority for a certificate unless another check already is."""
        async with self._uow_factory() as uow:
            claimed = await uow.domains.claim_certificate(
                record.id, now, stale_before=now - SSL_CLAIM_LEASE
            )
            await uow.commit()
        if not claimed:
            logger.info("ssl_issue_in_progress", domain=record.domain)
            return

        status: SslStatus | None = None
        try:
            status = await self._authority.issue_certificate(record.domain)
        except ExternalServiceError:
            logger.warning("ssl_issue_deferred", domain=record.domain)

        async with self._uow_factory() as uow:
            await uow.domains.finish_certificate(record.id, status)
            await uow.commit()
        if status is not None:
            record.ssl_status = status
