"""Profile API routes for the profile owner."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import InitializedUser
from api.dependencies.services import get_analytics_service, get_profile_service
from api.v1.schemas.analytics import AnalyticsSummaryResponse, AnalyticsSummarySchema
from api.v1.schemas.profile import (
    ProfileCreate,
    ProfileDetailResponse,
    ProfileResponse,
    ProfileUpdate,
)
from core.rate_limit import limiter
from domain.services.analytics_service import AnalyticsService
from domain.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post(
    "",
    response_model=ProfileDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create your profile",
    responses={
        201: {"description": "Profile created (unpublished)"},
        400: {"description": "Invalid username"},
        409: {"description": "Username taken or profile already exists"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_profile(
    request: Request,
    body: ProfileCreate,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Create the authenticated user's profile with an initial username."""
    profile = await service.create(user_id=user.id, slug=body.slug)
    return ProfileDetailResponse(
        data=ProfileResponse.from_entity(profile, public_url=service.public_url(profile))
    )


@router.get(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Get your profile",
    responses={
        200: {"description": "The profile, published or not"},
        404: {"description": "No profile yet"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_my_profile(
    request: Request,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Get the authenticated user's profile."""
    profile = await service.get_for_user(user.id)
    return ProfileDetailResponse(
        data=ProfileResponse.from_entity(profile, public_url=service.public_url(profile))
    )


@router.patch(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Update your profile",
    responses={
        200: {"description": "Profile updated"},
        400: {"description": "Invalid or read-only field"},
        409: {"description": "Username taken"},
        429: {"description": "Username changed too recently"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def update_my_profile(
    request: Request,
    body: ProfileUpdate,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """
    Partially update the profile. Only the fields present in the body change.

    Changing ``slug`` is limited to once per cooldown period.
    """
    profile = await service.update(user.id, body.model_dump(exclude_unset=True))
    return ProfileDetailResponse(
        data=ProfileResponse.from_entity(profile, public_url=service.public_url(profile))
    )


@router.post(
    "/me/publish",
    response_model=ProfileDetailResponse,
    summary="Publish your profile",
    responses={
        200: {"description": "Profile is live"},
        400: {"description": "Required fields missing"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def publish_profile(
    request: Request,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Publish the profile. Requires a name and either a bio or work history."""
    profile = await service.publish(user.id)
    return ProfileDetailResponse(
        data=ProfileResponse.from_entity(profile, public_url=service.public_url(profile))
    )


@router.post(
    "/me/unpublish",
    response_model=ProfileDetailResponse,
    summary="Unpublish your profile",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def unpublish_profile(
    request: Request,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Take the profile offline."""
    profile = await service.unpublish(user.id)
    return ProfileDetailResponse(
        data=ProfileResponse.from_entity(profile, public_url=service.public_url(profile))
    )


@router.post(
    "/me/qr-code",
    response_model=ProfileDetailResponse,
    summary="Generate a QR code",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def generate_qr_code(
    request: Request,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Generate a QR code that points at the profile's public address."""
    profile = await service.generate_qr_code(user.id)
    return ProfileDetailResponse(
        data=ProfileResponse.from_entity(profile, public_url=service.public_url(profile))
    )


@router.get(
    "/me/analytics",
    response_model=AnalyticsSummaryResponse,
    summary="Get profile analytics",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_my_analytics(
    request: Request,
    user: InitializedUser,
    service: ProfileService = Depends(get_profile_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsSummaryResponse:
    """Views, downloads and link clicks of the profile."""
    profile = await service.get_for_user(user.id)
    summary = await analytics.get_summary(profile.id)
    return AnalyticsSummaryResponse(
        data=AnalyticsSummarySchema(
            views=summary.views,
            downloads=summary.downloads,
            link_clicks=summary.link_clicks,
        )
    )
