"""Custom domain API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import InitializedUser
from api.dependencies.services import get_domain_verification_service
from api.v1.schemas.custom_domain import (
    DomainDetailResponse,
    DomainSubmit,
    DomainVerificationResponse,
)
from core.rate_limit import limiter
from domain.services.domain_verification_service import DomainVerificationService

router = APIRouter(prefix="/domains", tags=["domains"])


@router.post(
    "",
    response_model=DomainDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Connect a custom domain",
    responses={
        201: {"description": "Domain recorded; create the CNAME shown in instructions"},
        400: {"description": "Invalid domain"},
        403: {"description": "Pro plan required"},
        409: {"description": "Domain used by another profile"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def submit_domain(
    request: Request,
    body: DomainSubmit,
    user: InitializedUser,
    service: DomainVerificationService = Depends(get_domain_verification_service),
) -> DomainDetailResponse:
    """Attach a custom domain to your profile. Replaces any previous domain."""
    record = await service.submit(user.id, body.domain)
    return DomainDetailResponse(data=DomainVerificationResponse.from_entity(record))


@router.get(
    "/me",
    response_model=DomainDetailResponse,
    summary="Get custom domain status",
    responses={404: {"description": "No custom domain configured"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_domain_status(
    request: Request,
    user: InitializedUser,
    service: DomainVerificationService = Depends(get_domain_verification_service),
) -> DomainDetailResponse:
    """Current verification and SSL state of your custom domain."""
    record = await service.get_status(user.id)
    return DomainDetailResponse(data=DomainVerificationResponse.from_entity(record))


@router.post(
    "/me/recheck",
    response_model=DomainDetailResponse,
    summary="Recheck DNS for your custom domain",
    responses={
        200: {"description": "Updated verification state"},
        503: {"description": "DNS provider unavailable, retry later"},
    },
)
@limiter.limit("6/minute")  # type: ignore[untyped-decorator]
async def recheck_domain(
    request: Request,
    user: InitializedUser,
    service: DomainVerificationService = Depends(get_domain_verification_service),
) -> DomainDetailResponse:
    """Query DNS now. A failed domain is retried from pending."""
    record = await service.recheck(user.id)
    return DomainDetailResponse(data=DomainVerificationResponse.from_entity(record))


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Disconnect your custom domain",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def remove_domain(
    request: Request,
    user: InitializedUser,
    service: DomainVerificationService = Depends(get_domain_verification_service),
) -> None:
    """Remove the custom domain from your profile."""
    await service.remove(user.id)
    return None
