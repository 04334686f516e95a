"""DNS/SSL authority backed by dnspython and an HTTP certificate API."""

from typing import Optional

import dns.asyncresolver
import dns.exception
import dns.resolver
import httpx
import structlog

from core.config import settings
from core.exceptions import ExternalServiceError
from domain.entities.domain_verification import SslStatus
from infrastructure.domains.provider import CnameLookup

logger = structlog.get_logger()

_CERTIFICATE_STATUSES = {
    "issued": SslStatus.ISSUED,
    "failed": SslStatus.FAILED,
}


class DnsSslAuthority:
    """Resolves CNAMEs over DNS and requests certificates over HTTPS."""

    def __init__(
        self,
        dns_timeout: float = settings.dns_timeout_seconds,
        ssl_authority_url: str = settings.ssl_authority_url,
        ssl_authority_token: str = settings.ssl_authority_token,
        ssl_timeout: float = settings.ssl_timeout_seconds,
        require_ssl_authority: bool = settings.is_production,
        resolver: Optional[dns.asyncresolver.Resolver] = None,
    ) -> None:
        self._dns_timeout = dns_timeout
        self._ssl_authority_url = ssl_authority_url.rstrip("/")
        self._ssl_authority_token = ssl_authority_token
        self._ssl_timeout = ssl_timeout
        self._require_ssl_authority = require_ssl_authority
        self._resolver = resolver or dns.asyncresolver.Resolver()

    async def resolve_cname(self, domain: str) -> CnameLookup:
        try:
            answer = await self._resolver.resolve(domain, "CNAME", lifetime=self._dns_timeout)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            # Not configured yet
            return CnameLookup()
        except dns.exception.Timeout as e:
            logger.warning("dns_lookup_timeout", domain=domain)
            raise ExternalServiceError("DNS", "DNS lookup timed out, please retry") from e
        except dns.exception.DNSException as e:
            logger.warning("dns_lookup_failed", domain=domain, error=str(e))
            raise ExternalServiceError("DNS", "DNS lookup failed, please retry") from e

        ttl = answer.rrset.ttl if answer.rrset is not None else None
        records = [
            {
                "type": "CNAME",
                "name": domain,
                "value": rdata.target.to_text(omit_final_dot=True),
                "ttl": ttl,
            }
            for rdata in answer
        ]
        target = records[0]["value"] if records else None
        return CnameLookup(target=target, ttl=ttl, records=records)

    async def issue_certificate(self, domain: str) -> SslStatus:
        if not self._ssl_authority_url:
            if self._require_ssl_authority:
                raise ExternalServiceError("SSL", "Certificate authority is not configured")
            # Local setups terminate TLS elsewhere
            logger.info("certificate_authority_not_configured", domain=domain)
            return SslStatus.ISSUED

        headers = {}
        if self._ssl_authority_token:
            headers["Authorization"] = f"Bearer {self._ssl_authority_token}"

        try:
            async with httpx.AsyncClient(timeout=self._ssl_timeout) as client:
                response = await client.post(
                    f"{self._ssl_authority_url}/certificates",
                    json={"domain": domain},
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.warning("certificate_request_failed", domain=domain, error=str(e))
            raise ExternalServiceError("SSL", "Certificate authority unavailable, please retry") from e

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning(
                "certificate_request_failed",
                domain=domain,
                status_code=response.status_code,
            )
            raise ExternalServiceError("SSL", "Certificate authority unavailable, please retry")

        if response.status_code >= 400:
            logger.info(
                "certificate_request_refused",
                domain=domain,
                status_code=response.status_code,
            )
            return SslStatus.FAILED

        status = str(response.json().get("status", "")).lower()
        return _CERTIFICATE_STATUSES.get(status, SslStatus.PENDING)
