"""
API router configuration.
"""
from fastapi import APIRouter

from .routes.health import router as health_router
from .routes.session import router as session_router

router = APIRouter()

router.include_router(health_router)
router.include_router(session_router, prefix="/session")
