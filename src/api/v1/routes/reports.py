"""Moderation report routes open to any viewer."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import OptionalUser
from api.dependencies.services import get_moderation_service
from api.v1.schemas.moderation import ReportCreate, ReportDetailResponse, ReportResponse
from core.rate_limit import limiter
from domain.services.moderation_service import ModerationService

router = APIRouter(prefix="/reports", tags=["moderation"])


@router.post(
    "",
    response_model=ReportDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a profile",
    responses={
        201: {"description": "Report filed"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def create_report(
    request: Request,
    body: ReportCreate,
    user: OptionalUser,
    service: ModerationService = Depends(get_moderation_service),
) -> ReportDetailResponse:
    """File a report. Signed-in reporters are identified by their email."""
    reported_by = user.email if user else body.reported_by
    report = await service.create_report(
        profile_id=body.profile_id,
        reason=body.reason,
        reported_by=reported_by,
    )
    return ReportDetailResponse(data=ReportResponse.model_validate(report))
