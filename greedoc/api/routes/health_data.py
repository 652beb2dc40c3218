"""Health metric routes.

Patients record their own metrics; their doctor reads them. Each patient
has a single consolidated document holding the latest value per metric.
"""
from fastapi import APIRouter, Body, Depends, HTTPException

from greedoc.api.deps import load_patient, require_role
from greedoc.models.health_data import METRIC_TYPES, BulkMetricsUpdate, MetricReading
from greedoc.services import health_data_service

router = APIRouter(prefix="/health-data", tags=["health_data"])


def _listing(health) -> dict:
    items = [health] if health else []
    return {
        "status": "success",
        "data": {
            "healthData": items,
            "pagination": {"current": 1, "pages": 1 if items else 0, "total": len(items), "limit": 1},
        },
    }


def _own(record_id: str, user: dict):
    # The document id is the patient id
    if record_id != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to access this health data")


def _record(user: dict, payload: MetricReading) -> dict:
    metric = payload.model_dump(exclude={"type"})
    return health_data_service.record_metric(user["id"], payload.type, metric)


@router.get("/")
async def get_my_health_data(user=Depends(require_role(["patient"]))):
    return _listing(health_data_service.get_health_data(user["id"]))


@router.get("/metrics/types")
async def get_metric_types(user=Depends(require_role(["patient", "doctor", "admin"]))):
    return {"status": "success", "data": {"metricTypes": METRIC_TYPES}}


@router.get("/patient/{patient_id}")
async def get_patient_health_data(
    patient_id: str,
    user=Depends(require_role(["doctor", "admin"])),
):
    load_patient(patient_id, user)
    return _listing(health_data_service.get_health_data(patient_id))


@router.post("/", status_code=201)
async def record_health_metric(
    payload: MetricReading = Body(...),
    user=Depends(require_role(["patient"])),
):
    health = _record(user, payload)
    return {
        "status": "success",
        "message": "Health data recorded successfully",
        "data": {"healthData": health},
    }


@router.put("/bulk")
async def bulk_update_health_metrics(
    payload: BulkMetricsUpdate = Body(...),
    user=Depends(require_role(["patient"])),
):
    metrics = {t: m.model_dump() for t, m in payload.health_metrics.items()}
    health = health_data_service.upsert_metrics(user["id"], metrics)
    return {
        "status": "success",
        "message": "Health metrics updated successfully",
        "data": {"healthData": health},
    }


@router.get("/{record_id}")
async def get_health_record(record_id: str, user=Depends(require_role(["patient"]))):
    _own(record_id, user)
    health = health_data_service.get_health_data(record_id)
    if health is None:
        raise HTTPException(status_code=404, detail="Health data not found")
    return {"status": "success", "data": {"healthData": health}}


@router.put("/{record_id}")
async def update_health_record(
    record_id: str,
    payload: MetricReading = Body(...),
    user=Depends(require_role(["patient"])),
):
    _own(record_id, user)
    if health_data_service.get_health_data(record_id) is None:
        raise HTTPException(status_code=404, detail="Health data not found")

    health = _record(user, payload)
    return {
        "status": "success",
        "message": "Health data updated successfully",
        "data": {"healthData": health},
    }


@router.delete("/{record_id}")
async def delete_health_record(record_id: str, user=Depends(require_role(["patient"]))):
    _own(record_id, user)
    if not health_data_service.delete_health_data(record_id):
        raise HTTPException(status_code=404, detail="Health data not found")
    return {"status": "success", "message": "Health data deleted successfully"}
