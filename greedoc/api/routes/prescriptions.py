"""Prescription routes.

Doctors write prescriptions for their patients; patients read their own.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from greedoc.api.deps import get_current_user, load_patient, require_role
from greedoc.models.prescription import (
    PrescriptionCreate,
    PrescriptionStatus,
    PrescriptionStatusUpdate,
    PrescriptionUpdate,
)
from greedoc.services import prescription_service, user_service
from greedoc.services.pagination import paginate

router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])


def _load(prescription_id: str) -> dict:
    prescription = prescription_service.get_prescription(prescription_id)
    if prescription is None:
        raise HTTPException(status_code=404, detail="Prescription not found")
    return prescription


def _load_own(prescription_id: str, user: dict) -> dict:
    prescription = _load(prescription_id)
    if prescription.get("doctorId") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to modify this prescription")
    return prescription


def _page(items, page, limit) -> dict:
    items, pagination = paginate(items, page, limit)
    return {"status": "success", "data": {"prescriptions": items, "pagination": pagination}}


@router.get("/")
async def list_prescriptions(
    patient_id: Optional[str] = Query(None, alias="patientId"),
    status: Optional[PrescriptionStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user=Depends(get_current_user),
):
    if user["role"] == "patient":
        items = prescription_service.list_prescriptions(patient_id=user["id"], status=status)
    elif user["role"] == "doctor":
        items = prescription_service.list_prescriptions(
            doctor_id=user["id"], patient_id=patient_id, status=status
        )
    else:
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    return _page(items, page, limit)


@router.get("/patient/{patient_id}")
async def list_patient_prescriptions(
    patient_id: str,
    status: Optional[PrescriptionStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user=Depends(require_role(["doctor"])),
):
    load_patient(patient_id, user)
    items = prescription_service.list_prescriptions(patient_id=patient_id, status=status)
    return _page(items, page, limit)


@router.get("/active/{patient_id}")
async def list_active_prescriptions(
    patient_id: str,
    user=Depends(require_role(["patient", "doctor"])),
):
    if user["role"] == "patient" and user["id"] != patient_id:
        raise HTTPException(status_code=403, detail="Not authorized to view these prescriptions")

    items = prescription_service.active_for_patient(patient_id)
    return {"status": "success", "data": {"prescriptions": items, "count": len(items)}}


@router.get("/{prescription_id}")
async def get_prescription(prescription_id: str, user=Depends(get_current_user)):
    prescription = _load(prescription_id)

    allowed = (
        (user["role"] == "patient" and prescription.get("patientId") == user["id"])
        or (user["role"] == "doctor" and prescription.get("doctorId") == user["id"])
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="Not authorized to view this prescription")

    return {"status": "success", "data": {"prescription": prescription}}


@router.post("/", status_code=201)
async def create_prescription(
    payload: PrescriptionCreate = Body(...),
    user=Depends(get_current_user),
):
    if user["role"] != "doctor":
        raise HTTPException(status_code=403, detail="Only doctors can create prescriptions")

    patient = load_patient(payload.patient_id, user)

    data = payload.to_document(exclude_none=True)
    data.update({
        "doctorId": user["id"],
        "doctorName": user_service.full_name(user),
        "patientName": payload.patient_name or user_service.full_name(patient),
    })
    prescription = prescription_service.create_prescription(data)

    return {
        "status": "success",
        "message": "Prescription created successfully",
        "data": {"prescription": prescription},
    }


@router.put("/{prescription_id}")
async def update_prescription(
    prescription_id: str,
    payload: PrescriptionUpdate = Body(...),
    user=Depends(require_role(["doctor"])),
):
    _load_own(prescription_id, user)

    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    prescription = prescription_service.update_prescription(prescription_id, changes)
    return {
        "status": "success",
        "message": "Prescription updated successfully",
        "data": {"prescription": prescription},
    }


@router.put("/{prescription_id}/status")
async def update_prescription_status(
    prescription_id: str,
    payload: PrescriptionStatusUpdate = Body(...),
    user=Depends(require_role(["doctor"])),
):
    _load_own(prescription_id, user)
    prescription = prescription_service.update_prescription(prescription_id, {"status": payload.status})
    return {
        "status": "success",
        "message": "Prescription status updated successfully",
        "data": {"prescription": prescription},
    }


@router.delete("/{prescription_id}")
async def delete_prescription(prescription_id: str, user=Depends(require_role(["doctor"]))):
    _load_own(prescription_id, user)
    prescription_service.delete_prescription(prescription_id)
    return {"status": "success", "message": "Prescription deleted successfully"}
