"""
Firestore access for the ``medications`` collection.

A medication belongs to one user and carries its own dose schedule
(``frequency.schedule`` of clinic "HH:MM" times, optionally limited to
``frequency.daysOfWeek``). ``status`` and ``nextDoseTime`` are derived on
read and never stored. Taken doses are logged under ``adherence.takenDoses``
for the last ADHERENCE_WINDOW_DAYS days.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from google.cloud.firestore import FieldFilter

from greedoc.core.config import settings
from greedoc.core.firebase import get_db
from greedoc.services.time_utils import as_utc, combine_date_time, local_today, parse_date, utcnow

MEDICATIONS = "medications"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

ADHERENCE_WINDOW_DAYS = 30


def schedule_times(item: Dict[str, Any]) -> List[str]:
    schedule = (item.get("frequency") or {}).get("schedule") or []
    return sorted(s["time"] for s in schedule if s.get("time"))


def takes_on(item: Dict[str, Any], day: date) -> bool:
    """Whether doses are scheduled on ``day`` (inside start/end and on a listed weekday)."""
    start = parse_date(item.get("startDate"))
    end = parse_date(item.get("endDate"))
    if (start and day < start) or (end and day > end):
        return False
    days = (item.get("frequency") or {}).get("daysOfWeek") or []
    return not days or WEEKDAYS[day.weekday()] in days


def next_dose_time(item: Dict[str, Any], now: datetime) -> Optional[datetime]:
    if not item.get("isActive", True):
        return None
    times = schedule_times(item)
    if not times:
        return None

    today = local_today(now)
    for offset in range(8):
        day = today + timedelta(days=offset)
        if not takes_on(item, day):
            continue
        for hhmm in times:
            at = combine_date_time(day, hhmm)
            if at > now:
                return at
    return None


def status_of(item: Dict[str, Any], today: date) -> str:
    if not item.get("isActive", True):
        return "discontinued"
    end = parse_date(item.get("endDate"))
    if end and today > end:
        return "completed"
    # Only flagged when refills are being tracked at all
    refills = item.get("refills") or {}
    if refills.get("total") and not refills.get("remaining"):
        return "needs_refill"
    return "active"


def with_derived(item: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow()
    item["status"] = status_of(item, local_today(now))
    item["nextDoseTime"] = next_dose_time(item, now)
    return item


def _from_doc(doc) -> Dict[str, Any]:
    return with_derived({"id": doc.id, **(doc.to_dict() or {})})


def dosage_text(item: Dict[str, Any]) -> str:
    dosage = item.get("dosage") or {}
    value = dosage.get("value")
    amount = f"{value:g}" if isinstance(value, (int, float)) else ""
    return f"{amount}{dosage.get('unit') or ''}"


def create_medication(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow()
    doc = {
        **{k: v for k, v in data.items() if v is not None},
        "userId": user_id,
        "isActive": True,
        "adherence": {"trackingEnabled": True, "takenDoses": [], "adherenceRate": 100},
        "createdAt": now,
        "updatedAt": now,
    }
    _, ref = get_db().collection(MEDICATIONS).add(doc)
    return with_derived({"id": ref.id, **doc})


def get_medication(medication_id: str) -> Optional[Dict[str, Any]]:
    doc = get_db().collection(MEDICATIONS).document(medication_id).get()
    if not doc.exists:
        return None
    return _from_doc(doc)


def update_medication(medication_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    ref = get_db().collection(MEDICATIONS).document(medication_id)
    ref.update({**changes, "updatedAt": utcnow()})
    return _from_doc(ref.get())


def delete_medication(medication_id: str) -> None:
    get_db().collection(MEDICATIONS).document(medication_id).delete()


def set_active(medication_id: str, is_active: bool, reason: Optional[str] = None) -> Dict[str, Any]:
    if is_active:
        changes = {"isActive": True, "discontinuedDate": None, "discontinuedReason": None}
    else:
        changes = {"isActive": False, "discontinuedDate": utcnow(), "discontinuedReason": reason}
    return update_medication(medication_id, changes)


def list_for_user(user_id: str, active: Optional[bool] = None) -> List[Dict[str, Any]]:
    """The user's medications, latest startDate first."""
    query = get_db().collection(MEDICATIONS).where(filter=FieldFilter("userId", "==", user_id))
    if active is not None:
        query = query.where(filter=FieldFilter("isActive", "==", active))

    items = [_from_doc(d) for d in query.stream()]
    items.sort(key=lambda m: m.get("startDate") or "", reverse=True)
    return items


def active_for_user(user_id: str) -> List[Dict[str, Any]]:
    return list_for_user(user_id, active=True)


# Reminders

def due_doses(item: Dict[str, Any], now: datetime) -> List[Tuple[str, str]]:
    """
    Today's doses starting within the medication's reminder window.

    Returns (dose key, "HH:MM") pairs; the key is "<YYYY-MM-DD> <HH:MM>" in
    clinic time.
    """
    reminders = item.get("reminders") or {}
    if not item.get("isActive", True) or not reminders.get("enabled", True):
        return []

    today = local_today(now)
    if not takes_on(item, today):
        return []

    window = timedelta(minutes=reminders.get("advanceTime") or settings.NOTIFICATION_ADVANCE_MINUTES)
    doses = []
    for hhmm in schedule_times(item):
        at = combine_date_time(today, hhmm)
        if now <= at <= now + window:
            doses.append((f"{today.isoformat()} {hhmm}", hhmm))
    return doses


def due_for_reminder(user_id: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or utcnow()
    return [m for m in active_for_user(user_id) if due_doses(m, now)]


def reminder_candidates() -> List[Dict[str, Any]]:
    """Active medications of every user with reminders switched on."""
    query = get_db().collection(MEDICATIONS).where(filter=FieldFilter("isActive", "==", True))
    return [
        m for m in (_from_doc(d) for d in query.stream())
        if (m.get("reminders") or {}).get("enabled", True)
    ]


def sent_dose_keys(item: Dict[str, Any]) -> List[str]:
    return list((item.get("reminders") or {}).get("sentDoses") or [])


def mark_reminded(item: Dict[str, Any], keys: List[str], today_iso: str) -> None:
    # Keys from earlier days are dropped so the list stays small
    kept = [k for k in sent_dose_keys(item) if k.startswith(today_iso)]
    get_db().collection(MEDICATIONS).document(item["id"]).update(
        {"reminders.sentDoses": kept + keys}
    )


# Adherence

def _window(today: date) -> Tuple[date, date]:
    return today - timedelta(days=ADHERENCE_WINDOW_DAYS - 1), today


def adherence_stats(item: Dict[str, Any], today: date) -> Tuple[int, int]:
    """
    (expected, taken) doses over the adherence window.

    Expected doses count completed days only, so a dose logged early today
    is credited but today's remaining doses are not missed yet.
    """
    first, _ = _window(today)
    per_day = (item.get("frequency") or {}).get("timesPerDay") or 1
    expected = 0
    day = first
    while day < today:
        if takes_on(item, day):
            expected += per_day
        day += timedelta(days=1)

    taken = 0
    for dose in (item.get("adherence") or {}).get("takenDoses") or []:
        at = as_utc(dose.get("takenAt"))
        if at and first <= local_today(at) <= today:
            taken += 1
    return expected, taken


def adherence_rate(item: Dict[str, Any], today: date) -> int:
    expected, taken = adherence_stats(item, today)
    if not expected:
        return 100
    return min(100, round(taken * 100 / expected))


def mark_dose_taken(
    item: Dict[str, Any],
    taken_at: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Log a dose, drop entries older than the window and refresh adherenceRate."""
    taken_at = as_utc(taken_at) or utcnow()
    today = local_today()
    first, _ = _window(today)

    entry = {"takenAt": taken_at}
    if notes:
        entry["notes"] = notes

    doses = [
        d for d in (item.get("adherence") or {}).get("takenDoses") or []
        if as_utc(d.get("takenAt")) and local_today(as_utc(d["takenAt"])) >= first
    ]
    doses.append(entry)

    adherence = {**(item.get("adherence") or {}), "takenDoses": doses}
    rate = adherence_rate({**item, "adherence": adherence}, today)

    return update_medication(item["id"], {
        "adherence.takenDoses": doses,
        "adherence.adherenceRate": rate,
        "adherence.lastTakenAt": taken_at,
    })


def adherence_summary(user_id: str) -> Dict[str, Any]:
    today = local_today()
    tracked = [
        m for m in active_for_user(user_id)
        if (m.get("adherence") or {}).get("trackingEnabled", True)
    ]

    summary = []
    for med in tracked:
        expected, taken = adherence_stats(med, today)
        summary.append({
            "id": med["id"],
            "name": med.get("name"),
            "adherenceRate": adherence_rate(med, today),
            "dosesTaken": taken,
            "missedDoses": max(expected - taken, 0),
            "status": med["status"],
        })

    overall = 100
    if summary:
        overall = round(sum(s["adherenceRate"] for s in summary) / len(summary))

    return {"summary": summary, "overallAdherence": overall, "totalMedications": len(summary)}
