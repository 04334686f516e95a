"""User API routes."""

from fastapi import APIRouter, Request

from api.dependencies.auth import InitializedUser
from api.v1.schemas.user import UserDetailResponse, UserResponse
from core.rate_limit import limiter

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=UserDetailResponse,
    summary="Get the current user",
    responses={
        200: {"description": "The authenticated account"},
        401: {"description": "Missing or invalid token"},
        403: {"description": "Account suspended"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_me(request: Request, user: InitializedUser) -> UserDetailResponse:
    """Get the authenticated user, created on first call."""
    return UserDetailResponse(data=UserResponse.from_entity(user))
