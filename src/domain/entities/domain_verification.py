"""Custom domain verification entity and its state machine."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4

DEFAULT_CNAME_TARGET = "custom.namedrop.cv"

_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
_TLD = re.compile(r"^[a-z]{2,63}$|^xn--[a-z0-9-]{1,59}$")


class VerificationStatus(StrEnum):
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class SslStatus(StrEnum):
    PENDING = "pending"
    ISSUED = "issued"
    FAILED = "failed"


class CheckOutcome(StrEnum):
    """Result of comparing the observed CNAME with the expected target."""

    MATCH = "match"
    MISMATCH = "mismatch"
    UNRESOLVED = "unresolved"


# failed -> pending is only taken by an explicit, user-triggered retry
VERIFICATION_TRANSITIONS: dict[VerificationStatus, frozenset[VerificationStatus]] = {
    VerificationStatus.PENDING: frozenset({VerificationStatus.VERIFIED, VerificationStatus.FAILED}),
    VerificationStatus.VERIFIED: frozenset({VerificationStatus.PENDING}),
    VerificationStatus.FAILED: frozenset({VerificationStatus.PENDING}),
}


def normalize_domain(raw: str) -> str:
    """Trim, lower-case and drop the trailing root dot."""
    return raw.strip().lower().rstrip(".")


def domain_error(domain: str) -> str | None:
    """Return why ``domain`` is not an acceptable host name, or None."""
    if not domain or len(domain) > 253:
        return "must be between 1 and 253 characters"
    labels = domain.split(".")
    if len(labels) < 2:
        return "must contain at least one dot"
    if not all(_LABEL.match(label) for label in labels):
        return "labels may only contain letters, digits and inner hyphens"
    if not _TLD.match(labels[-1]):
        return "unknown top-level domain"
    return None


def hostnames_match(observed: str | None, expected: str) -> bool:
    if not observed:
        return False
    return normalize_domain(observed) == normalize_domain(expected)


@dataclass
class DomainVerification:
    """One attempt at attaching a custom domain to a profile."""

    profile_id: UUID
    domain: str
    id: UUID = field(default_factory=uuid4)
    verification_status: VerificationStatus = VerificationStatus.PENDING
    cname_target: str = DEFAULT_CNAME_TARGET
    dns_records: list[dict[str, Any]] = field(default_factory=list)
    ssl_status: SslStatus = SslStatus.PENDING
    # Set while one check holds the right to request the certificate
    ssl_requested_at: datetime | None = None
    consecutive_failures: int = 0
    last_checked: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED

    @property
    def needs_certificate(self) -> bool:
        """SSL is only requested for verified domains, and only once."""
        return self.is_verified and self.ssl_status == SslStatus.PENDING

    def apply_check(
        self,
        outcome: CheckOutcome,
        observed: list[dict[str, Any]],
        checked_at: datetime,
        max_failures: int,
    ) -> list[VerificationStatus]:
        """Fold one DNS observation into the state machine.

        Returns the statuses entered, in order (empty when unchanged).
        """
        entered: list[VerificationStatus] = []

        if self.verification_status == VerificationStatus.FAILED:
            self._move(VerificationStatus.PENDING, entered)
            self.consecutive_failures = 0

        self.dns_records = observed
        self.last_checked = checked_at

        if outcome == CheckOutcome.MATCH:
            self.consecutive_failures = 0
            if self.verification_status == VerificationStatus.PENDING:
                self._move(VerificationStatus.VERIFIED, entered)
        elif self.verification_status == VerificationStatus.VERIFIED:
            # Drift: the CNAME stopped pointing at us
            self.consecutive_failures = 1
            self._move(VerificationStatus.PENDING, entered)
        elif outcome == CheckOutcome.MISMATCH:
            self.consecutive_failures += 1
            self._move(VerificationStatus.FAILED, entered)
        else:
            self.consecutive_failures += 1
            if self.consecutive_failures >= max_failures:
                self._move(VerificationStatus.FAILED, entered)

        return entered

    def _move(self, status: VerificationStatus, entered: list[VerificationStatus]) -> None:
        if status not in VERIFICATION_TRANSITIONS[self.verification_status]:
            raise ValueError(
                f"Illegal verification transition {self.verification_status} -> {status}"
            )
        self.verification_status = status
        entered.append(status)
