"""Personal calendar events."""
from fastapi import APIRouter, Body, Depends, Path

from greedoc.api.deps import get_current_user
from greedoc.models.event import CalendarEventCreate
from greedoc.services import event_service

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/calendar/{year}/{month}")
async def get_month_calendar(
    year: int = Path(..., ge=1970, le=2100),
    month: int = Path(..., ge=1, le=12),
    user=Depends(get_current_user),
):
    events = event_service.month_calendar(user["id"], year, month)
    return {"status": "success", "data": {"year": year, "month": month, "events": events}}


@router.post("/", status_code=201)
async def create_event(
    payload: CalendarEventCreate = Body(...),
    user=Depends(get_current_user),
):
    event = event_service.create_event(user["id"], payload.to_document(exclude_none=True))
    return {"status": "success", "message": "Event created successfully", "data": {"event": event}}
