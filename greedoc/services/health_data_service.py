"""
Consolidated health data: one ``patientHealthData`` document per patient.

The document id is the patient id and ``healthMetrics`` keeps only the
latest reading per metric type, so recording a metric is an upsert.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from greedoc.core.firebase import get_db
from greedoc.services.time_utils import utcnow

HEALTH_DATA = "patientHealthData"


def _ref(patient_id: str):
    return get_db().collection(HEALTH_DATA).document(patient_id)


def get_health_data(patient_id: str) -> Optional[Dict[str, Any]]:
    doc = _ref(patient_id).get()
    if not doc.exists:
        return None
    return {"id": doc.id, **(doc.to_dict() or {})}


def _stamp(metric: Dict[str, Any], now) -> Dict[str, Any]:
    return {
        "value": metric["value"],
        "unit": metric["unit"],
        "timestamp": metric.get("timestamp") or now,
        "notes": metric.get("notes"),
    }


def upsert_metrics(patient_id: str, metrics: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Replace the stored reading for each given metric type, keeping the others.

    Creates the patient's document on first use.
    """
    now = utcnow()
    ref = _ref(patient_id)
    existed = ref.get().exists

    payload = {
        "patientId": patient_id,
        "healthMetrics": {t: _stamp(m, now) for t, m in metrics.items()},
        "lastUpdated": now,
        "updatedAt": now,
    }
    if not existed:
        payload["createdAt"] = now

    # merge=True merges nested maps, so untouched metrics survive
    ref.set(payload, merge=True)
    return get_health_data(patient_id)


def record_metric(patient_id: str, metric_type: str, metric: Dict[str, Any]) -> Dict[str, Any]:
    return upsert_metrics(patient_id, {metric_type: metric})


def delete_health_data(patient_id: str) -> bool:
    ref = _ref(patient_id)
    if not ref.get().exists:
        return False
    ref.delete()
    return True
