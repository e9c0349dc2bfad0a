"""
API routers, aggregated into a single router for the app.
"""
from fastapi import APIRouter

from .settings import router as settings_router
from .accounts import router as accounts_router
from .ads import router as ads_router
from .analytics import router as analytics_router
from .reports import router as reports_router

router = APIRouter()

router.include_router(settings_router, tags=["settings"])
router.include_router(accounts_router, tags=["accounts"])
router.include_router(ads_router, tags=["ads"])
router.include_router(analytics_router, tags=["analytics"])
router.include_router(reports_router, tags=["reports"])
