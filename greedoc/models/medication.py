"""Pydantic models for a patient's own medication list and dose log."""
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import Field, field_serializer

from greedoc.models.base import CamelModel
from greedoc.models.followup import TIME_PATTERN

DosageUnit = Literal["mg", "g", "ml", "tablets", "capsules", "drops", "sprays", "patches", "units"]
DosageForm = Literal["tablet", "capsule", "liquid", "injection", "cream", "inhaler", "drops", "patch", "other"]
Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class MedicationDosage(CamelModel):
    value: float = Field(..., gt=0)
    unit: DosageUnit
    form: Optional[DosageForm] = None


class DoseTime(CamelModel):
    time: str = Field(..., pattern=TIME_PATTERN)


class MedicationFrequency(CamelModel):
    times_per_day: int = Field(..., ge=1, le=10)
    schedule: List[DoseTime] = Field(default_factory=list, max_length=10)
    # Empty means every day
    days_of_week: List[Weekday] = Field(default_factory=list)
    interval: Optional[str] = Field(None, max_length=50)


class MedicationReminders(CamelModel):
    enabled: bool = True
    # Minutes before a dose; the worker's default window when unset
    advance_time: Optional[int] = Field(15, ge=1, le=240)


class MedicationRefills(CamelModel):
    remaining: int = Field(0, ge=0)
    total: int = Field(0, ge=0)


class _MedicationFields(CamelModel):
    @field_serializer("start_date", "end_date", check_fields=False)
    def _iso_date(self, value: Optional[date]):
        return value.isoformat() if value else None


class MedicationCreate(_MedicationFields):
    name: str = Field(..., min_length=1, max_length=100)
    generic_name: Optional[str] = Field(None, max_length=100)
    brand_name: Optional[str] = Field(None, max_length=100)
    dosage: MedicationDosage
    frequency: MedicationFrequency
    start_date: date
    end_date: Optional[date] = None
    purpose: Optional[str] = Field(None, max_length=200)
    instructions: Optional[str] = Field(None, max_length=500)
    side_effects: List[str] = Field(default_factory=list)
    interactions: List[str] = Field(default_factory=list)
    reminders: MedicationReminders = Field(default_factory=MedicationReminders)
    refills: Optional[MedicationRefills] = None
    notes: Optional[str] = Field(None, max_length=1000)
    tags: List[str] = Field(default_factory=list)


class MedicationUpdate(_MedicationFields):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    generic_name: Optional[str] = Field(None, max_length=100)
    brand_name: Optional[str] = Field(None, max_length=100)
    dosage: Optional[MedicationDosage] = None
    frequency: Optional[MedicationFrequency] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    purpose: Optional[str] = Field(None, max_length=200)
    instructions: Optional[str] = Field(None, max_length=500)
    side_effects: Optional[List[str]] = None
    interactions: Optional[List[str]] = None
    reminders: Optional[MedicationReminders] = None
    refills: Optional[MedicationRefills] = None
    notes: Optional[str] = Field(None, max_length=1000)
    tags: Optional[List[str]] = None


class MedicationStatusUpdate(CamelModel):
    is_active: bool
    discontinued_reason: Optional[str] = Field(None, min_length=1, max_length=200)


class DoseTakenRequest(CamelModel):
    date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)
