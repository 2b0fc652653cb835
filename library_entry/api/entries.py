"""
Entry API endpoints.

Patrons log entries and exits here; librarians read anyone's history.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..core.constants import REJECTION_ERRORS
from ..core.models import EntryEvent, EntryRequest, EntryValidationError
from ..entry import get_entry_service
from .caller import Caller, require_privileged, require_user

logger = logging.getLogger("library.entry.api.entries")
router = APIRouter()


# === Request / Response Models ===


class EntryLogRequest(BaseModel):
    """Entry/exit submission from a patron's device."""

    model_config = ConfigDict(populate_by_name=True)

    entry_type: Optional[str] = Field(default=None, alias="entryType")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    wifi_ssid: Optional[str] = Field(default=None, alias="wifiSSID")
    speed_kmh: Optional[float] = Field(default=None, alias="speedKmh")
    manual_confirm: bool = Field(default=False, alias="manualConfirm")


class HistoryResponse(BaseModel):
    """A page of a user's entry history."""

    userId: str
    totalEntries: int
    entries: list[dict] = Field(default_factory=list)


# === Endpoints ===


@router.post("/log")
async def log_entry(body: EntryLogRequest, caller: Caller = Depends(require_user)):
    """
    Log an entry or exit.

    Accepted submissions return 200. Low-confidence, borderline and
    duplicate submissions return 400 with the score breakdown so the
    client can retry with manualConfirm.
    """
    service = get_entry_service()
    request = EntryRequest(
        subject_id=caller.user_id,
        entry_type=body.entry_type,
        latitude=body.latitude,
        longitude=body.longitude,
        wifi_ssid=body.wifi_ssid,
        speed_kmh=body.speed_kmh,
        manual_confirm=body.manual_confirm,
    )

    try:
        result = await service.submit(request)
    except EntryValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"error": "Validation Error", "message": str(e)},
        )

    if not result.accepted:
        scoring = service.scoring_config
        content = {
            "error": REJECTION_ERRORS[result.decision],
            "message": result.message,
            "requiresConfirmation": True,
            "confidence": result.confidence.to_dict() if result.confidence else None,
            "thresholds": {
                "autoLog": scoring.auto_threshold,
                "manualConfirm": scoring.borderline_min,
            },
            **result.details,
        }
        return JSONResponse(status_code=400, content=content)

    event = result.event
    return {
        "success": True,
        "entryLog": {
            "id": str(event.event_id),
            "userId": event.subject_id,
            "entryType": event.kind.value,
            "confidenceScore": event.confidence,
            "autoLogged": event.auto_logged,
            "timestamp": event.timestamp.isoformat(),
        },
        "confidence": result.confidence.to_dict(),
        "autoLogged": result.auto_logged,
        "warnings": result.warnings,
        "message": result.message,
    }


def _history_entry(event: EntryEvent) -> dict:
    data = event.to_dict()
    data.pop("signals", None)
    return data


@router.get("/history", response_model=HistoryResponse)
async def get_my_history(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    caller: Caller = Depends(require_user),
):
    """Get the caller's own entry history, newest first."""
    events, total = await get_entry_service().history(caller.user_id, limit=limit, offset=offset)
    return HistoryResponse(
        userId=caller.user_id,
        totalEntries=total,
        entries=[_history_entry(e) for e in events],
    )


@router.get("/history/{user_id}", response_model=HistoryResponse)
async def get_user_history(
    user_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    caller: Caller = Depends(require_privileged),
):
    """Get any user's entry history (librarian/admin)."""
    events, total = await get_entry_service().history(user_id, limit=limit, offset=offset)
    return HistoryResponse(
        userId=user_id,
        totalEntries=total,
        entries=[_history_entry(e) for e in events],
    )
