"""Moderation report entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class ReportStatus(StrEnum):
    """Triage state of a moderation report."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    DISMISSED = "dismissed"


# Legal admin transitions; dismissed is terminal
REPORT_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.REVIEWED, ReportStatus.DISMISSED}),
    ReportStatus.REVIEWED: frozenset({ReportStatus.DISMISSED}),
    ReportStatus.DISMISSED: frozenset(),
}


@dataclass
class ModerationReport:
    """A viewer's complaint about a profile."""

    profile_id: UUID
    reason: str
    id: UUID = field(default_factory=uuid4)
    reported_by: str | None = None
    status: ReportStatus = ReportStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)

    def can_transition_to(self, status: ReportStatus) -> bool:
        return status in REPORT_TRANSITIONS[self.status]
