"""Pydantic schemas for billing webhook."""

from uuid import UUID

from pydantic import BaseModel


class BillingWebhookEvent(BaseModel):
    """Subscription change pushed by the billing provider."""

    user_id: UUID
    is_pro: bool
