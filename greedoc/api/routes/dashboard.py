"""Doctor dashboard statistics."""
from fastapi import APIRouter, Depends, HTTPException

from greedoc.api.deps import require_role
from greedoc.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _check_access(doctor_id: str, user: dict):
    if user["role"] == "doctor" and user["id"] != doctor_id:
        raise HTTPException(status_code=403, detail="Not authorized to view this dashboard")


@router.get("/stats/{doctor_id}")
async def get_dashboard_stats(doctor_id: str, user=Depends(require_role(["doctor", "admin"]))):
    _check_access(doctor_id, user)
    return {"status": "success", "data": dashboard_service.overview(doctor_id)}


@router.get("/patients/{doctor_id}")
async def get_patient_stats(doctor_id: str, user=Depends(require_role(["doctor", "admin"]))):
    _check_access(doctor_id, user)
    return {"status": "success", "data": dashboard_service.patient_stats(doctor_id)}


@router.get("/reports/{doctor_id}")
async def get_report_stats(doctor_id: str, user=Depends(require_role(["doctor", "admin"]))):
    _check_access(doctor_id, user)
    return {"status": "success", "data": dashboard_service.report_stats(doctor_id)}


@router.get("/appointments/{doctor_id}")
async def get_appointment_stats(doctor_id: str, user=Depends(require_role(["doctor", "admin"]))):
    _check_access(doctor_id, user)
    return {"status": "success", "data": dashboard_service.appointment_stats(doctor_id)}
