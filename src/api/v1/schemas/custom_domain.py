"""Pydantic schemas for custom domain API."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.domain_verification import DomainVerification


class DomainSubmit(BaseModel):
    """Schema for submitting a custom domain."""

    domain: str = Field(..., min_length=1, max_length=253)


class DnsInstruction(BaseModel):
    """Record the user must create at their DNS host."""

    type: str = "CNAME"
    name: str
    value: str


class DomainVerificationResponse(BaseModel):
    """Schema for a domain verification record."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "domain": "cv.example.com",
                "verification_status": "pending",
                "cname_target": "custom.namedrop.cv",
                "ssl_status": "pending",
                "instructions": {
                    "type": "CNAME",
                    "name": "cv.example.com",
                    "value": "custom.namedrop.cv",
                },
            }
        },
    )

    id: UUID
    profile_id: UUID
    domain: str
    verification_status: str
    cname_target: str
    dns_records: List[dict[str, Any]] = Field(default_factory=list)
    ssl_status: str
    consecutive_failures: int = 0
    last_checked: Optional[datetime] = None
    created_at: datetime
    instructions: DnsInstruction

    @classmethod
    def from_entity(cls, record: DomainVerification) -> "DomainVerificationResponse":
        return cls(
            id=record.id,
            profile_id=record.profile_id,
            domain=record.domain,
            verification_status=record.verification_status.value,
            cname_target=record.cname_target,
            dns_records=record.dns_records,
            ssl_status=record.ssl_status.value,
            consecutive_failures=record.consecutive_failures,
            last_checked=record.last_checked,
            created_at=record.created_at,
            instructions=DnsInstruction(name=record.domain, value=record.cname_target),
        )


class DomainDetailResponse(BaseModel):
    """Schema for single domain verification response."""

    data: DomainVerificationResponse
