"""Admin action log entity and action constants."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

# --- Admin Action Constants ---
# Format: {resource_type}.{action}


class AdminActions:
    """Admin action constants using dot-notation."""

    USER_BANNED = "user.banned"
    USER_UNBANNED = "user.unbanned"
    USER_ADMIN_GRANTED = "user.admin_granted"
    USER_ADMIN_REVOKED = "user.admin_revoked"

    REPORT_STATUS_CHANGED = "report.status_changed"


@dataclass
class AdminLog:
    """Domain entity for an admin audit log entry."""

    admin_id: UUID
    action: str
    resource_type: str
    id: UUID = field(default_factory=uuid4)
    resource_id: str | None = None
    details: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
