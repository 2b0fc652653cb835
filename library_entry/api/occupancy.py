"""
Occupancy API endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..entry import get_entry_service
from .caller import Caller, get_caller

logger = logging.getLogger("library.entry.api.occupancy")
router = APIRouter()


@router.get("")
async def get_current_occupancy(
    space_id: Optional[str] = Query(default=None, alias="space"),
    caller: Caller = Depends(get_caller),
):
    """
    Get how many people are inside.

    Librarians and admins also get the roster with entry times. Spaces
    that have never logged an event are 404, except the default space.
    """
    service = get_entry_service()
    tracker = service.find_tracker(space_id)
    if tracker is None:
        if space_id and space_id != service.occupancy_config.default_space_id:
            raise HTTPException(status_code=404, detail=f"Unknown space: {space_id}")
        tracker = service.tracker()
    result = {
        "spaceId": tracker.space_id,
        "currentOccupancy": tracker.current_occupancy(),
    }

    if caller.is_privileged:
        roster = sorted(tracker.roster().items(), key=lambda item: item[1], reverse=True)
        result["occupants"] = [
            {"userId": user_id, "entryTime": entered_at.isoformat()}
            for user_id, entered_at in roster
        ]

    return result
