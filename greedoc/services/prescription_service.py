"""Firestore access for the ``prescriptions`` collection."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from google.cloud.firestore import FieldFilter

from greedoc.core.firebase import get_db
from greedoc.services.time_utils import as_utc, utcnow

PRESCRIPTIONS = "prescriptions"


def with_derived(item: Dict[str, Any]) -> Dict[str, Any]:
    """Add isActive / isExpired / needsFollowUp, computed against the current time."""
    now = utcnow()
    valid_until = as_utc(item.get("validUntil"))
    follow_up = as_utc(item.get("followUpDate"))

    item["isExpired"] = bool(valid_until and valid_until < now)
    item["isActive"] = item.get("status") == "active" and not item["isExpired"]
    item["needsFollowUp"] = bool(follow_up and follow_up <= now and item.get("status") == "active")
    return item


def _from_doc(doc) -> Dict[str, Any]:
    return with_derived({"id": doc.id, **(doc.to_dict() or {})})


def create_prescription(data: Dict[str, Any]) -> Dict[str, Any]:
    now = utcnow()
    doc = {
        "status": "draft",
        "prescriptionDate": now,
        **{k: v for k, v in data.items() if v is not None},
        "createdAt": now,
        "updatedAt": now,
    }
    _, ref = get_db().collection(PRESCRIPTIONS).add(doc)
    return with_derived({"id": ref.id, **doc})


def get_prescription(prescription_id: str) -> Optional[Dict[str, Any]]:
    doc = get_db().collection(PRESCRIPTIONS).document(prescription_id).get()
    if not doc.exists:
        return None
    return _from_doc(doc)


def update_prescription(prescription_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    ref = get_db().collection(PRESCRIPTIONS).document(prescription_id)
    ref.update({**changes, "updatedAt": utcnow()})
    return _from_doc(ref.get())


def delete_prescription(prescription_id: str) -> None:
    get_db().collection(PRESCRIPTIONS).document(prescription_id).delete()


def list_prescriptions(
    doctor_id: Optional[str] = None,
    patient_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Matching prescriptions, newest prescriptionDate first."""
    query = get_db().collection(PRESCRIPTIONS)
    if doctor_id:
        query = query.where(filter=FieldFilter("doctorId", "==", doctor_id))
    if patient_id:
        query = query.where(filter=FieldFilter("patientId", "==", patient_id))
    if status:
        query = query.where(filter=FieldFilter("status", "==", status))

    items = [_from_doc(d) for d in query.stream()]
    items.sort(key=lambda p: as_utc(p.get("prescriptionDate")) or utcnow(), reverse=True)
    return items


def active_for_patient(patient_id: str) -> List[Dict[str, Any]]:
    return [p for p in list_prescriptions(patient_id=patient_id, status="active") if p["isActive"]]
