"""API v1 router — mounts every endpoint router under /api/v1."""

from fastapi import APIRouter

from app.presentation.api.v1.endpoints.health import router as health_router
from app.presentation.api.v1.endpoints.intake import router as intake_router
from app.presentation.api.v1.endpoints.search import router as search_router
from app.presentation.api.v1.endpoints.password import router as password_router
from app.presentation.api.v1.endpoints.discord_interactions import router as discord_router

router = APIRouter(prefix="/api/v1")
router.include_router(health_router)
router.include_router(intake_router)
router.include_router(search_router)
router.include_router(password_router)
router.include_router(discord_router)
