"""DNS/SSL authority protocol."""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from domain.entities.domain_verification import SslStatus


@dataclass(frozen=True)
class CnameLookup:
    """Observed CNAME of a host.

    ``target`` is None when the name does not exist or has no CNAME yet.
    """

    target: Optional[str] = None
    ttl: Optional[int] = None
    records: list[dict[str, Any]] = field(default_factory=list)


class IDomainAuthority(Protocol):
    """Protocol for the external DNS and certificate authority."""

    async def resolve_cname(self, domain: str) -> CnameLookup:
        """
        Look up the CNAME record of a host.

        Raises:
            ExternalServiceError: on timeouts and other transient failures
        """
        ...

    async def issue_certificate(self, domain: str) -> SslStatus:
        """
        Request a TLS certificate for a verified host.

        Returns:
            ISSUED, FAILED for a permanent refusal, or PENDING while the
            authority is still working on it

        Raises:
            ExternalServiceError: on timeouts and other transient failures
        """
        ...
