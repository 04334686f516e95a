"""Billing provider webhook."""

import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request

from api.dependencies.services import get_user_service
from api.v1.schemas.billing import BillingWebhookEvent
from api.v1.schemas.user import UserDetailResponse, UserResponse
from core.config import settings
from core.exceptions import AuthenticationError, ErrorCode
from core.rate_limit import limiter
from domain.services.user_service import UserService

router = APIRouter(prefix="/billing", tags=["billing"])


def verify_webhook_secret(
    x_webhook_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Reject calls that do not carry the shared webhook secret."""
    expected = settings.billing_webhook_secret
    if not expected or not x_webhook_secret or not secrets.compare_digest(
        x_webhook_secret, expected
    ):
        raise AuthenticationError(
            message="Invalid webhook secret",
            error_code=ErrorCode.INVALID_TOKEN,
        )


@router.post(
    "/webhook",
    response_model=UserDetailResponse,
    summary="Apply a subscription change",
    dependencies=[Depends(verify_webhook_secret)],
    responses={
        200: {"description": "Plan updated"},
        401: {"description": "Missing or wrong X-Webhook-Secret"},
        404: {"description": "Unknown user"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def billing_webhook(
    request: Request,
    body: BillingWebhookEvent,
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    """Set or clear the Pro flag of a user."""
    user = await service.set_pro_status(body.user_id, body.is_pro)
    return UserDetailResponse(data=UserResponse.from_entity(user))
