"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.admin import router as admin_router
from api.v1.routes.billing import router as billing_router
from api.v1.routes.domains import router as domains_router
from api.v1.routes.profiles import router as profiles_router
from api.v1.routes.public import router as public_router
from api.v1.routes.reports import router as reports_router
from api.v1.routes.users import router as users_router

router = APIRouter()
router.include_router(users_router)
router.include_router(profiles_router)
router.include_router(domains_router)
router.include_router(public_router)
router.include_router(reports_router)
router.include_router(admin_router)
router.include_router(billing_router)
