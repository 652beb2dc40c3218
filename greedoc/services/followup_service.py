"""Firestore access for the ``followUps`` collection."""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional

from google.cloud.firestore import FieldFilter

from greedoc.core.firebase import get_db
from greedoc.services.time_utils import combine_date_time, local_today, parse_date, utcnow

FOLLOW_UPS = "followUps"

UPCOMING_WINDOW_DAYS = 7


def when(item: Dict[str, Any]):
    return combine_date_time(item.get("followUpDate"), item.get("followUpTime"))


def with_derived(item: Dict[str, Any]) -> Dict[str, Any]:
    """Add isOverdue / isUpcoming / isToday relative to now, by the clinic's calendar."""
    now = utcnow()
    today = local_today(now)
    day = parse_date(item.get("followUpDate"))
    at = when(item)
    scheduled = item.get("status") == "scheduled"

    item["isToday"] = day == today
    item["isOverdue"] = bool(scheduled and at and at < now)
    item["isUpcoming"] = bool(
        scheduled and day and 0 <= (day - today).days <= UPCOMING_WINDOW_DAYS
    )
    return item


def _from_doc(doc) -> Dict[str, Any]:
    return with_derived({"id": doc.id, **(doc.to_dict() or {})})


def _sort_key(item: Dict[str, Any]):
    return (item.get("followUpDate") or "", item.get("followUpTime") or "")


def create_followup(data: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow()
    doc = {
        **{k: v for k, v in data.items() if v is not None},
        "status": "scheduled",
        "reminderSent": False,
        "createdAt": now,
        "updatedAt": now,
    }
    _, ref = get_db().collection(FOLLOW_UPS).add(doc)
    return with_derived({"id": ref.id, **doc})


def get_followup(followup_id: str) -> Optional[Dict[str, Any]]:
    doc = get_db().collection(FOLLOW_UPS).document(followup_id).get()
    if not doc.exists:
        return None
    return _from_doc(doc)


def update_followup(followup_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    # Moving the appointment re-arms its reminder
    if "followUpDate" in changes or "followUpTime" in changes:
        changes = {**changes, "reminderSent": False}
    ref = get_db().collection(FOLLOW_UPS).document(followup_id)
    ref.update({**changes, "updatedAt": utcnow()})
    return _from_doc(ref.get())


def delete_followup(followup_id: str) -> None:
    get_db().collection(FOLLOW_UPS).document(followup_id).delete()


def list_followups(
    doctor_id: Optional[str] = None,
    patient_id: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Matching follow-ups ordered by date then time, soonest first."""
    query = get_db().collection(FOLLOW_UPS)
    if doctor_id:
        query = query.where(filter=FieldFilter("doctorId", "==", doctor_id))
    if patient_id:
        query = query.where(filter=FieldFilter("patientId", "==", patient_id))
    if status:
        query = query.where(filter=FieldFilter("status", "==", status))
    if priority:
        query = query.where(filter=FieldFilter("priority", "==", priority))

    items = [_from_doc(d) for d in query.stream()]
    items.sort(key=_sort_key)
    return items


def upcoming_for_doctor(doctor_id: str, days: int = UPCOMING_WINDOW_DAYS) -> List[Dict[str, Any]]:
    """Scheduled follow-ups from today through ``days`` days ahead."""
    today = local_today()
    last = today + timedelta(days=days)
    items = []
    for f in list_followups(doctor_id=doctor_id, status="scheduled"):
        day = parse_date(f.get("followUpDate"))
        if day and today <= day <= last:
            items.append(f)
    return items


def due_on(day_iso: str) -> List[Dict[str, Any]]:
    """Scheduled follow-ups on a given day that have not been reminded yet."""
    query = (
        get_db().collection(FOLLOW_UPS)
        .where(filter=FieldFilter("followUpDate", "==", day_iso))
        .where(filter=FieldFilter("status", "==", "scheduled"))
    )
    return [
        f for f in (_from_doc(d) for d in query.stream())
        if not f.get("reminderSent")
    ]


def mark_reminded(followup_id: str) -> None:
    get_db().collection(FOLLOW_UPS).document(followup_id).update({"reminderSent": True})
