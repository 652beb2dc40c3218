"""Personal calendar events (``calendarEvents`` collection)."""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List

from google.cloud.firestore import FieldFilter

from greedoc.core.firebase import get_db
from greedoc.services.time_utils import month_range, parse_date, utcnow

CALENDAR_EVENTS = "calendarEvents"


def create_event(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow()
    doc = {
        **data,
        "userId": user_id,
        "reminderSent": False,
        "createdAt": now,
        "updatedAt": now,
    }
    _, ref = get_db().collection(CALENDAR_EVENTS).add(doc)
    return {"id": ref.id, **doc}


def month_calendar(user_id: str, year: int, month: int) -> Dict[str, List[Dict[str, Any]]]:
    """The user's events in a month, grouped by "YYYY-MM-DD" and sorted by time."""
    first, last = month_range(parse_date(f"{year:04d}-{month:02d}-01"))
    query = get_db().collection(CALENDAR_EVENTS).where(filter=FieldFilter("userId", "==", user_id))

    grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for doc in query.stream():
        event = {"id": doc.id, **(doc.to_dict() or {})}
        day = parse_date(event.get("date"))
        if day and first <= day <= last:
            grouped[day.isoformat()].append(event)

    for events in grouped.values():
        events.sort(key=lambda e: e.get("time") or "")
    return dict(sorted(grouped.items()))


def due_on(day_iso: str) -> List[Dict[str, Any]]:
    """Events on a given day that have not been reminded yet."""
    query = get_db().collection(CALENDAR_EVENTS).where(filter=FieldFilter("date", "==", day_iso))
    events = [{"id": d.id, **(d.to_dict() or {})} for d in query.stream()]
    return [e for e in events if not e.get("reminderSent")]


def mark_reminded(event_id: str) -> None:
    get_db().collection(CALENDAR_EVENTS).document(event_id).update({"reminderSent": True})
