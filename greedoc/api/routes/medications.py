"""Medication routes.

Every user keeps their own medication list; other users' entries answer
404 as if they did not exist.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from greedoc.api.deps import get_current_user
from greedoc.models.medication import (
    DoseTakenRequest,
    MedicationCreate,
    MedicationStatusUpdate,
    MedicationUpdate,
)
from greedoc.services import medication_service
from greedoc.services.pagination import paginate

router = APIRouter(prefix="/medications", tags=["medications"])


def _load_own(medication_id: str, user: dict) -> dict:
    medication = medication_service.get_medication(medication_id)
    if medication is None or medication.get("userId") != user["id"]:
        raise HTTPException(status_code=404, detail="Medication not found")
    return medication


@router.get("/")
async def list_medications(
    active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user=Depends(get_current_user),
):
    items = medication_service.list_for_user(user["id"], active=active)
    items, pagination = paginate(items, page, limit)
    return {"status": "success", "data": {"medications": items, "pagination": pagination}}


@router.post("/", status_code=201)
async def add_medication(payload: MedicationCreate = Body(...), user=Depends(get_current_user)):
    medication = medication_service.create_medication(user["id"], payload.to_document(exclude_none=True))
    return {
        "status": "success",
        "message": "Medication added successfully",
        "data": {"medication": medication},
    }


@router.get("/reminders/due")
async def due_medications(user=Depends(get_current_user)):
    items = medication_service.due_for_reminder(user["id"])
    return {"status": "success", "data": {"medications": items, "count": len(items)}}


@router.get("/adherence/summary")
async def adherence_summary(user=Depends(get_current_user)):
    return {"status": "success", "data": medication_service.adherence_summary(user["id"])}


@router.get("/{medication_id}")
async def get_medication(medication_id: str, user=Depends(get_current_user)):
    return {"status": "success", "data": {"medication": _load_own(medication_id, user)}}


@router.put("/{medication_id}")
async def update_medication(
    medication_id: str,
    payload: MedicationUpdate = Body(...),
    user=Depends(get_current_user),
):
    _load_own(medication_id, user)

    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    medication = medication_service.update_medication(medication_id, changes)
    return {
        "status": "success",
        "message": "Medication updated successfully",
        "data": {"medication": medication},
    }


@router.delete("/{medication_id}")
async def delete_medication(medication_id: str, user=Depends(get_current_user)):
    _load_own(medication_id, user)
    medication_service.delete_medication(medication_id)
    return {"status": "success", "message": "Medication deleted successfully"}


@router.put("/{medication_id}/status")
async def update_medication_status(
    medication_id: str,
    payload: MedicationStatusUpdate = Body(...),
    user=Depends(get_current_user),
):
    _load_own(medication_id, user)
    medication = medication_service.set_active(medication_id, payload.is_active, payload.discontinued_reason)
    action = "activated" if payload.is_active else "deactivated"
    return {
        "status": "success",
        "message": f"Medication {action} successfully",
        "data": {"medication": medication},
    }


@router.post("/{medication_id}/taken")
async def mark_taken(
    medication_id: str,
    payload: Optional[DoseTakenRequest] = Body(None),
    user=Depends(get_current_user),
):
    payload = payload or DoseTakenRequest()
    medication = _load_own(medication_id, user)
    if not medication.get("isActive", True):
        raise HTTPException(status_code=400, detail="Medication is not active")

    medication = medication_service.mark_dose_taken(medication, payload.date, payload.notes)
    return {
        "status": "success",
        "message": "Medication marked as taken",
        "data": {"medication": medication},
    }
