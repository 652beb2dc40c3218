"""Doctor dashboard counters, computed over Firestore query results."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from greedoc.services import followup_service, user_service
from greedoc.services.time_utils import local_today, month_range, parse_date, week_range


def _between(item: Dict[str, Any], first, last) -> bool:
    day = parse_date(item.get("followUpDate"))
    return bool(day and first <= day <= last)


def patient_stats(doctor_id: str, patients: Optional[List[dict]] = None) -> Dict[str, int]:
    """Active / inactive split; ``pending`` are accounts that never logged in."""
    if patients is None:
        patients = user_service.list_patients_of(doctor_id)
    active = sum(1 for p in patients if p.get("isActive", True))
    return {
        "total": len(patients),
        "active": active,
        "inactive": len(patients) - active,
        "pending": sum(1 for p in patients if not p.get("lastLogin")),
    }


def report_stats(doctor_id: str, followups: Optional[List[dict]] = None) -> Dict[str, int]:
    """Follow-up outcomes: scheduled ones are still pending a report."""
    if followups is None:
        followups = followup_service.list_followups(doctor_id=doctor_id)
    return {
        "pending": sum(1 for f in followups if f.get("status") == "scheduled"),
        "completed": sum(1 for f in followups if f.get("status") == "completed"),
        "total": len(followups),
    }


def appointment_stats(doctor_id: str, followups: Optional[List[dict]] = None) -> Dict[str, int]:
    """Non-cancelled follow-ups today, this week (Sunday start), this month."""
    if followups is None:
        followups = followup_service.list_followups(doctor_id=doctor_id)
    booked = [f for f in followups if f.get("status") != "cancelled"]

    today = local_today()
    week_first, week_last = week_range(today)
    month_first, month_last = month_range(today)

    return {
        "today": sum(1 for f in booked if _between(f, today, today)),
        "thisWeek": sum(1 for f in booked if _between(f, week_first, week_last)),
        "thisMonth": sum(1 for f in booked if _between(f, month_first, month_last)),
        "total": len(booked),
    }


def overview(doctor_id: str) -> Dict[str, int]:
    patients = user_service.list_patients_of(doctor_id)
    followups = followup_service.list_followups(doctor_id=doctor_id)

    return {
        "totalPatients": len(patients),
        "activePatients": patient_stats(doctor_id, patients)["active"],
        "pendingReports": report_stats(doctor_id, followups)["pending"],
        "todayAppointments": appointment_stats(doctor_id, followups)["today"],
    }
