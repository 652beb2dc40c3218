"""Patient-related API routes (doctor portal)."""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from greedoc.api.deps import load_patient, require_role
from greedoc.core.config import settings
from greedoc.core.security import generate_password
from greedoc.models.user import MedicalInfo, PatientCreate, PatientUpdate
from greedoc.services import user_service
from greedoc.services.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("/")
async def list_patients(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user=Depends(require_role(["doctor", "admin"])),
):
    """List the caller's patients, newest first.

    - ``search`` matches first name, last name, email or CNIC.
    """
    patients = [
        user_service.to_public(p)
        for p in user_service.list_patients_of(user["id"], search=search)
    ]
    items, pagination = paginate(patients, page, limit)
    return {"status": "success", "data": {"patients": items, "pagination": pagination}}


@router.post("/", status_code=201)
async def create_patient(
    payload: PatientCreate = Body(...),
    user=Depends(require_role(["doctor"])),
):
    if user_service.find_by_email(payload.email):
        raise HTTPException(status_code=400, detail="Patient with this email already exists")
    if payload.cnic and user_service.find_by_cnic(payload.cnic):
        raise HTTPException(status_code=400, detail="Patient with this CNIC already exists")

    password = payload.password or generate_password()
    data = payload.to_document(exclude={"password"}, exclude_none=True)
    patient = user_service.create_user(
        {**data, "role": "patient", "doctorId": user["id"]},
        password,
    )
    logger.info("Doctor %s created patient %s", user["id"], patient["id"])

    return {
        "status": "success",
        "message": "Patient created successfully",
        "data": {
            "patient": user_service.to_public(patient),
            "loginCredentials": {
                "email": patient["email"],
                "cnic": patient.get("cnic"),
                "password": password,
                "loginUrl": f"{settings.CLIENT_URL.rstrip('/')}/patient/login",
            },
        },
    }


@router.get("/{patient_id}")
async def get_patient(patient_id: str, user=Depends(require_role(["doctor", "admin"]))):
    patient = load_patient(patient_id, user)
    return {"status": "success", "data": {"patient": user_service.to_public(patient)}}


@router.put("/{patient_id}")
async def update_patient(
    patient_id: str,
    payload: PatientUpdate = Body(...),
    user=Depends(require_role(["doctor", "admin"])),
):
    load_patient(patient_id, user)

    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    cnic = changes.get("cnic")
    if cnic:
        holder = user_service.find_by_cnic(cnic)
        if holder and holder["id"] != patient_id:
            raise HTTPException(status_code=400, detail="Patient with this CNIC already exists")

    updated = user_service.update_user(patient_id, changes)
    return {
        "status": "success",
        "message": "Patient updated successfully",
        "data": {"patient": user_service.to_public(updated)},
    }


@router.get("/{patient_id}/medical-info")
async def get_medical_info(patient_id: str, user=Depends(require_role(["doctor", "admin"]))):
    patient = load_patient(patient_id, user)
    return {"status": "success", "data": {"medicalInfo": patient.get("medicalInfo") or {}}}


@router.put("/{patient_id}/medical-info")
async def update_medical_info(
    patient_id: str,
    payload: MedicalInfo = Body(...),
    user=Depends(require_role(["doctor", "admin"])),
):
    patient = load_patient(patient_id, user)

    # Merge: fields not sent keep their stored values
    merged = {**(patient.get("medicalInfo") or {}), **payload.changes()}
    user_service.update_user(patient_id, {"medicalInfo": merged})

    return {
        "status": "success",
        "message": "Medical information updated successfully",
        "data": {"medicalInfo": merged},
    }


@router.get("/{patient_id}/doctor")
async def get_patient_doctor(
    patient_id: str,
    user=Depends(require_role(["patient", "doctor", "admin"])),
):
    """The doctor assigned to a patient, or ``null`` when none is assigned."""
    if user["role"] == "patient":
        if user["id"] != patient_id:
            raise HTTPException(status_code=403, detail="Not authorized to view this patient")
        patient = user
    else:
        patient = load_patient(patient_id, user)

    doctor = user_service.get_user(patient.get("doctorId"))
    return {"status": "success", "data": {"doctor": user_service.to_public(doctor)}}
