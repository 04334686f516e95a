"""Analytics event entities."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass
class ProfileView:
    """Append-only record of one public profile render."""

    profile_id: UUID
    id: UUID = field(default_factory=uuid4)
    ip_address: str | None = None
    user_agent: str | None = None
    referrer: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class LinkClick:
    """Append-only record of one click on an external link tile."""

    profile_id: UUID
    id: UUID = field(default_factory=uuid4)
    link_id: UUID | None = None
    link_url: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    referrer: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True)
class AnalyticsSummary:
    """Dashboard counters read straight off the profile row."""

    views: int = 0
    downloads: int = 0
    link_clicks: int = 0
