"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the housing backend
"""
from fastapi import APIRouter

from dormhub.api.v1 import check_in_out, notifications, payments, preferences, room_requests, rooms
from dormhub.config.settings import settings
from dormhub.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(rooms.router)
router.include_router(room_requests.router)
router.include_router(payments.router)
router.include_router(preferences.router)
router.include_router(notifications.router)
router.include_router(check_in_out.router)

logger.debug("api_v1_router_initialized", total_routes=len(router.routes))


@router.get("/health", tags=["System Health"])
async def api_health_check():
    """Liveness check."""
    return {
        "status": "healthy",
        "api_version": settings.API_VERSION,
        "environment": settings.ENVIRONMENT,
    }
