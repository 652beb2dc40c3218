"""Pydantic models for prescriptions and their medication entries."""
import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_serializer, field_validator

from greedoc.models.base import CamelModel
from greedoc.services.time_utils import as_utc

PrescriptionStatus = Literal["draft", "active", "completed", "cancelled"]


class MedicationEntry(CamelModel):
    id: Optional[str] = Field(None, validate_default=True)
    name: str = Field(..., min_length=1, max_length=100)
    dosage: str = Field(..., min_length=1, max_length=50)
    frequency: str = Field(..., min_length=1, max_length=50)
    duration: Optional[str] = Field(None, max_length=50)
    instructions: Optional[str] = Field(None, max_length=200)

    @field_validator("id", mode="after")
    @classmethod
    def _ensure_id(cls, v):
        return v or uuid.uuid4().hex


class _PrescriptionFields(CamelModel):
    @field_serializer("prescription_date", "valid_until", "follow_up_date", check_fields=False)
    def _utc(self, value: Optional[datetime]):
        return as_utc(value)


class PrescriptionCreate(_PrescriptionFields):
    patient_id: str = Field(..., min_length=1)
    patient_name: Optional[str] = Field(None, max_length=100)
    medications: List[MedicationEntry] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)
    diagnosis: Optional[str] = Field(None, max_length=500)
    prescription_date: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    follow_up_date: Optional[datetime] = None
    allergies: List[str] = Field(default_factory=list)
    contraindications: List[str] = Field(default_factory=list)


class PrescriptionUpdate(_PrescriptionFields):
    medications: Optional[List[MedicationEntry]] = Field(None, min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)
    diagnosis: Optional[str] = Field(None, max_length=500)
    status: Optional[PrescriptionStatus] = None
    prescription_date: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    follow_up_date: Optional[datetime] = None
    allergies: Optional[List[str]] = None
    contraindications: Optional[List[str]] = None


class PrescriptionStatusUpdate(CamelModel):
    status: PrescriptionStatus
