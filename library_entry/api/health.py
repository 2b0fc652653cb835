"""
Health and info endpoints.
"""

from fastapi import APIRouter

from .. import __version__
from ..core.config import settings
from ..entry import get_entry_service
from ..storage import get_db_pool

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    service = get_entry_service()
    return {
        "status": "ok",
        "service": "library-entry",
        "version": __version__,
        "database": get_db_pool().is_initialized,
        "spaces": {
            space_id: service.registry.get(space_id).current_occupancy()
            for space_id in service.registry.spaces()
        },
        "config": {
            "default_space_id": settings.occupancy.default_space_id,
            "auto_threshold": service.scoring_config.auto_threshold,
            "borderline_min": service.scoring_config.borderline_min,
        },
    }
