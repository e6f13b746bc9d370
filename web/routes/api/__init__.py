"""
API routes split by domain.

Each sub-module defines its own APIRouter which is composed
into the top-level router exposed by this package.
"""
from fastapi import APIRouter

from .health import router as health_router
from .sales import router as sales_router
from .leads import router as leads_router
from .youtube import router as youtube_router
from .picker import router as picker_router

router = APIRouter(tags=["api"])

router.include_router(health_router)
router.include_router(sales_router)
router.include_router(leads_router)
router.include_router(youtube_router)
router.include_router(picker_router)
