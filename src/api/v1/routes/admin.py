"""Admin console routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import AdminUser
from api.dependencies.services import (
    get_admin_log_service,
    get_admin_service,
    get_moderation_service,
    get_profile_service,
)
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.moderation import (
    ReportDetailResponse,
    ReportListResponse,
    ReportResponse,
    ReportStatusUpdate,
)
from api.v1.schemas.profile import ProfileListResponse, ProfileResponse
from api.v1.schemas.user import (
    AdminLogListResponse,
    AdminLogResponse,
    SetAdminRequest,
    UserDetailResponse,
    UserListResponse,
    UserResponse,
)
from core.rate_limit import get_client_ip, limiter
from domain.entities.moderation import ReportStatus
from domain.services.admin_log_service import AdminLogService
from domain.services.admin_service import AdminService
from domain.services.moderation_service import ModerationService
from domain.services.profile_service import ProfileService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={403: {"model": ErrorResponse, "description": "Admin access required"}},
)


@router.get("/users", response_model=UserListResponse, summary="List users")
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_users(
    request: Request,
    admin: AdminUser,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: AdminService = Depends(get_admin_service),
) -> UserListResponse:
    """All users, newest first."""
    users = await service.list_users(limit=limit, offset=offset)
    data = [UserResponse.from_entity(u) for u in users]
    return UserListResponse(data=data, meta={"limit": limit, "offset": offset})


@router.get("/profiles", response_model=ProfileListResponse, summary="List profiles")
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_profiles(
    request: Request,
    admin: AdminUser,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: AdminService = Depends(get_admin_service),
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileListResponse:
    """All profiles, published or not, newest first."""
    profiles = await service.list_profiles(limit=limit, offset=offset)
    data = [ProfileResponse.from_entity(p, public_url=profile_service.public_url(p)) for p in profiles]
    return ProfileListResponse(data=data, meta={"limit": limit, "offset": offset})


@router.post("/users/{user_id}/ban", response_model=UserDetailResponse, summary="Ban a user")
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def ban_user(
    request: Request,
    user_id: UUID,
    admin: AdminUser,
    service: AdminService = Depends(get_admin_service),
) -> UserDetailResponse:
    """Ban a user. Their profile stops resolving immediately."""
    user = await service.ban(
        admin.id,
        user_id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return UserDetailResponse(data=UserResponse.from_entity(user))


@router.post("/users/{user_id}/unban", response_model=UserDetailResponse, summary="Unban a user")
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def unban_user(
    request: Request,
    user_id: UUID,
    admin: AdminUser,
    service: AdminService = Depends(get_admin_service),
) -> UserDetailResponse:
    """Lift a ban."""
    user = await service.unban(
        admin.id,
        user_id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return UserDetailResponse(data=UserResponse.from_entity(user))


@router.post(
    "/users/{user_id}/admin",
    response_model=UserDetailResponse,
    summary="Grant or revoke admin rights",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def set_admin(
    request: Request,
    user_id: UUID,
    body: SetAdminRequest,
    admin: AdminUser,
    service: AdminService = Depends(get_admin_service),
) -> UserDetailResponse:
    user = await service.set_admin(
        admin.id,
        user_id,
        body.is_admin,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return UserDetailResponse(data=UserResponse.from_entity(user))


@router.get("/reports", response_model=ReportListResponse, summary="List moderation reports")
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_reports(
    request: Request,
    admin: AdminUser,
    status: ReportStatus | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: ModerationService = Depends(get_moderation_service),
) -> ReportListResponse:
    """Reports, newest first, optionally filtered by status."""
    reports = await service.list_reports(status=status, limit=limit, offset=offset)
    data = [ReportResponse.model_validate(r) for r in reports]
    return ReportListResponse(data=data, meta={"limit": limit, "offset": offset})


@router.patch(
    "/reports/{report_id}",
    response_model=ReportDetailResponse,
    summary="Triage a moderation report",
    responses={
        400: {"description": "Illegal status change"},
        404: {"description": "Report not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def update_report(
    request: Request,
    report_id: UUID,
    body: ReportStatusUpdate,
    admin: AdminUser,
    service: ModerationService = Depends(get_moderation_service),
) -> ReportDetailResponse:
    """Move a report to reviewed or dismissed."""
    report = await service.update_status(
        report_id,
        ReportStatus(body.status),
        admin_id=admin.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ReportDetailResponse(data=ReportResponse.model_validate(report))


@router.get("/logs", response_model=AdminLogListResponse, summary="Admin action log")
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_admin_logs(
    request: Request,
    admin: AdminUser,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    resource_type: str | None = Query(None, max_length=50),
    resource_id: str | None = Query(None, max_length=100),
    service: AdminLogService = Depends(get_admin_log_service),
) -> AdminLogListResponse:
    """Recent admin actions, newest first.

    With ``resource_type`` and ``resource_id`` the log is narrowed to the
    history of that one user, profile or report.
    """
    if resource_type and resource_id:
        entries = await service.get_resource_history(resource_type, resource_id, limit=limit)
        offset = 0
    else:
        entries = await service.list_recent(limit=limit, offset=offset)
    data = [AdminLogResponse.model_validate(e) for e in entries]
    return AdminLogListResponse(data=data, meta={"limit": limit, "offset": offset})
