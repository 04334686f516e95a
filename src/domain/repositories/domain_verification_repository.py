"""Domain verification repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.domain_verification import DomainVerification, SslStatus


class IDomainVerificationRepository(Protocol):
    """Repository interface for DomainVerification entities."""

    async def get(self, id: UUID) -> DomainVerification | None:
        """Get a verification record by ID."""
        ...

    async def get_current_for_profile(self, profile_id: UUID) -> DomainVerification | None:
        """Get the most recent record of a profile."""
        ...

    async def get_active_by_domain(self, domain: str) -> DomainVerification | None:
        """Get the non-failed record holding a domain, if any."""
        ...

    async def create(self, verification: DomainVerification) -> DomainVerification:
        """Create a new verification record."""
        ...

    async def save_state(
        self, verification: DomainVerification, expected: DomainVerification
    ) -> bool:
        """Write status, DNS snapshot, SSL status, failure count and last_checked.

        Only applied while the stored row still matches ``expected``.
        """
        ...

    async def claim_certificate(
        self, id: UUID, requested_at: datetime, stale_before: datetime
    ) -> bool:
        """Claim certificate issuance for a verified record; False if already claimed."""
        ...

    async def finish_certificate(self, id: UUID, ssl_status: SslStatus | None) -> None:
        """Release the issuance claim and record the result, if any."""
        ...

    async def touch(self, id: UUID, checked_at: datetime) -> None:
        """Only update last_checked."""
        ...

    async def delete_for_profile(self, profile_id: UUID) -> int:
        """Delete every record of a profile. Returns the number deleted."""
        ...

    async def list_due(self, checked_before: datetime, limit: int = 50) -> list[DomainVerification]:
        """Pending or verified records not checked since ``checked_before``."""
        ...
