"""Public (unauthenticated) profile routes used by the rendering front-end."""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status

from api.dependencies.services import get_analytics_service, get_profile_service
from api.v1.schemas.common import ErrorResponse, MessageResponse
from api.v1.schemas.profile import PublicProfileDetailResponse, PublicProfileResponse
from core.rate_limit import get_client_ip, limiter
from domain.entities.profile import Profile
from domain.services.analytics_service import AnalyticsService
from domain.services.profile_service import ProfileService

router = APIRouter(
    prefix="/public",
    tags=["public"],
    responses={429: {"model": ErrorResponse, "description": "Too many requests from this address"}},
)


def _schedule_view(
    background_tasks: BackgroundTasks,
    analytics: AnalyticsService,
    request: Request,
    profile: Profile,
) -> None:
    background_tasks.add_task(
        analytics.record_view,
        profile.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )


@router.get(
    "/profiles/{slug}",
    response_model=PublicProfileDetailResponse,
    summary="Get a published profile by username",
    responses={
        200: {"description": "Rendering payload"},
        404: {"description": "No published profile under this name"},
    },
)
@limiter.limit("120/minute")  # type: ignore[untyped-decorator]
async def get_public_profile(
    request: Request,
    slug: str,
    background_tasks: BackgroundTasks,
    service: ProfileService = Depends(get_profile_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> PublicProfileDetailResponse:
    """Resolve a username to its published profile and count a view."""
    profile = await service.resolve(slug)
    _schedule_view(background_tasks, analytics, request, profile)
    return PublicProfileDetailResponse(data=PublicProfileResponse.from_entity(profile))


@router.get(
    "/resolve",
    response_model=PublicProfileDetailResponse,
    summary="Resolve a host name to a published profile",
    responses={
        200: {"description": "Rendering payload"},
        404: {"description": "Host does not map to a published profile"},
    },
)
@limiter.limit("120/minute")  # type: ignore[untyped-decorator]
async def resolve_host(
    request: Request,
    background_tasks: BackgroundTasks,
    host: str = Query(..., min_length=1, max_length=260),
    service: ProfileService = Depends(get_profile_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> PublicProfileDetailResponse:
    """
    Resolve ``alice.namedrop.cv``, a verified custom domain, or a bare
    username to the published profile, and count a view.
    """
    profile = await service.resolve(host)
    _schedule_view(background_tasks, analytics, request, profile)
    return PublicProfileDetailResponse(data=PublicProfileResponse.from_entity(profile))


@router.post(
    "/profiles/{profile_id}/links/{link_id}/click",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Record a link click",
)
@limiter.limit("120/minute")  # type: ignore[untyped-decorator]
async def record_link_click(
    request: Request,
    profile_id: UUID,
    link_id: UUID,
    background_tasks: BackgroundTasks,
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> MessageResponse:
    """Count a click on one of the profile's link tiles."""
    background_tasks.add_task(
        analytics.record_link_click,
        profile_id,
        link_id=link_id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )
    return MessageResponse(message="Click recorded")


@router.post(
    "/profiles/{profile_id}/download",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Record a CV download",
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def record_download(
    request: Request,
    profile_id: UUID,
    background_tasks: BackgroundTasks,
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> MessageResponse:
    """Count a download of the profile's CV."""
    background_tasks.add_task(analytics.record_download, profile_id)
    return MessageResponse(message="Download recorded")
