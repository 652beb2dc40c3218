"""Follow-up appointment routes."""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from greedoc.api.deps import get_current_user, load_patient, require_role
from greedoc.models.followup import (
    FollowUpCreate,
    FollowUpPriority,
    FollowUpStatus,
    FollowUpStatusUpdate,
    FollowUpUpdate,
)
from greedoc.services import followup_service, user_service
from greedoc.services.pagination import paginate

router = APIRouter(prefix="/followups", tags=["followups"])


def _load(followup_id: str) -> dict:
    followup = followup_service.get_followup(followup_id)
    if followup is None:
        raise HTTPException(status_code=404, detail="Follow-up not found")
    return followup


def _load_own(followup_id: str, user: dict) -> dict:
    followup = _load(followup_id)
    if followup.get("doctorId") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to modify this follow-up")
    return followup


def _page(items, page, limit) -> dict:
    items, pagination = paginate(items, page, limit)
    return {"status": "success", "data": {"followUps": items, "pagination": pagination}}


@router.get("/")
async def list_followups(
    patient_id: Optional[str] = Query(None, alias="patientId"),
    status: Optional[FollowUpStatus] = None,
    priority: Optional[FollowUpPriority] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user=Depends(get_current_user),
):
    if user["role"] == "patient":
        items = followup_service.list_followups(patient_id=user["id"], status=status, priority=priority)
    elif user["role"] == "doctor":
        items = followup_service.list_followups(
            doctor_id=user["id"], patient_id=patient_id, status=status, priority=priority
        )
    else:
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    return _page(items, page, limit)


@router.get("/patient/{patient_id}")
async def list_patient_followups(
    patient_id: str,
    status: Optional[FollowUpStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user=Depends(require_role(["doctor"])),
):
    load_patient(patient_id, user)
    items = followup_service.list_followups(patient_id=patient_id, status=status)
    return _page(items, page, limit)


@router.get("/upcoming/{doctor_id}")
async def list_upcoming_followups(
    doctor_id: str,
    days: int = Query(7, ge=1, le=365),
    user=Depends(require_role(["doctor", "admin"])),
):
    if user["role"] == "doctor" and user["id"] != doctor_id:
        raise HTTPException(status_code=403, detail="Not authorized to view these follow-ups")

    items = followup_service.upcoming_for_doctor(doctor_id, days)
    return {"status": "success", "data": {"followUps": items, "count": len(items)}}


@router.get("/{followup_id}")
async def get_followup(followup_id: str, user=Depends(get_current_user)):
    followup = _load(followup_id)

    allowed = (
        (user["role"] == "patient" and followup.get("patientId") == user["id"])
        or (user["role"] == "doctor" and followup.get("doctorId") == user["id"])
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="Not authorized to view this follow-up")

    return {"status": "success", "data": {"followUp": followup}}


@router.post("/", status_code=201)
async def create_followup(
    payload: FollowUpCreate = Body(...),
    user=Depends(get_current_user),
):
    if user["role"] != "doctor":
        raise HTTPException(status_code=403, detail="Only doctors can create follow-ups")

    patient = load_patient(payload.patient_id, user)

    data = payload.to_document(exclude_none=True)
    data.update({
        "doctorId": user["id"],
        "doctorName": user_service.full_name(user),
        "patientName": payload.patient_name or user_service.full_name(patient),
    })
    followup = followup_service.create_followup(data)

    return {
        "status": "success",
        "message": "Follow-up scheduled successfully",
        "data": {"followUp": followup},
    }


@router.put("/{followup_id}")
async def update_followup(
    followup_id: str,
    payload: FollowUpUpdate = Body(...),
    user=Depends(require_role(["doctor"])),
):
    _load_own(followup_id, user)

    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    followup = followup_service.update_followup(followup_id, changes)
    return {
        "status": "success",
        "message": "Follow-up updated successfully",
        "data": {"followUp": followup},
    }


@router.put("/{followup_id}/status")
async def update_followup_status(
    followup_id: str,
    payload: FollowUpStatusUpdate = Body(...),
    user=Depends(require_role(["doctor", "patient"])),
):
    """Either side of the appointment may confirm, cancel or reschedule it."""
    followup = _load(followup_id)
    if user["id"] not in (followup.get("doctorId"), followup.get("patientId")):
        raise HTTPException(status_code=403, detail="Not authorized to update this follow-up")

    followup = followup_service.update_followup(followup_id, payload.changes())
    return {
        "status": "success",
        "message": "Follow-up status updated successfully",
        "data": {"followUp": followup},
    }


@router.delete("/{followup_id}")
async def delete_followup(followup_id: str, user=Depends(require_role(["doctor"]))):
    _load_own(followup_id, user)
    followup_service.delete_followup(followup_id)
    return {"status": "success", "message": "Follow-up deleted successfully"}
