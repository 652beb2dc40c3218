"""Pydantic models for the consolidated per-patient health metrics document."""
from datetime import datetime
from typing import Dict, Literal, Optional

from pydantic import Field, field_serializer, model_validator

from greedoc.models.base import CamelModel
from greedoc.services.time_utils import as_utc

MetricType = Literal["steps", "heart_rate", "sleep", "blood_pressure", "weight", "temperature"]

# Catalog served to the frontend; min/max also bound accepted readings.
METRIC_TYPES: Dict[str, dict] = {
    "steps": {"label": "Steps", "unit": "steps", "min": 0, "max": 50000, "step": 1},
    "heart_rate": {"label": "Heart Rate", "unit": "bpm", "min": 40, "max": 200, "step": 1},
    "sleep": {"label": "Sleep", "unit": "hours", "min": 0, "max": 24, "step": 0.5},
    "blood_pressure": {"label": "Blood Pressure", "unit": "mmHg", "min": 80, "max": 200, "step": 1},
    "weight": {"label": "Weight", "unit": "kg", "min": 30, "max": 200, "step": 0.1},
    "temperature": {"label": "Temperature", "unit": "°C", "min": 35, "max": 42, "step": 0.1},
}


def check_metric_range(metric_type: str, value: float) -> None:
    info = METRIC_TYPES[metric_type]
    if not info["min"] <= value <= info["max"]:
        raise ValueError(
            f"{info['label']} must be between {info['min']} and {info['max']} {info['unit']}"
        )


class MetricValue(CamelModel):
    value: float
    unit: str = Field(..., min_length=1, max_length=20)
    timestamp: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_serializer("timestamp")
    def _utc(self, value: Optional[datetime]):
        return as_utc(value)


class MetricReading(MetricValue):
    type: MetricType

    @model_validator(mode="after")
    def _in_range(self):
        check_metric_range(self.type, self.value)
        return self


class BulkMetricsUpdate(CamelModel):
    health_metrics: Dict[MetricType, MetricValue] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _in_range(self):
        for metric_type, metric in self.health_metrics.items():
            check_metric_range(metric_type, metric.value)
        return self
