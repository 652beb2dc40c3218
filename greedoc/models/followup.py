"""Pydantic models for follow-up appointments."""
from datetime import date
from typing import Literal, Optional

from pydantic import Field, field_serializer

from greedoc.models.base import CamelModel

FollowUpStatus = Literal["scheduled", "completed", "cancelled", "rescheduled"]
FollowUpPriority = Literal["low", "medium", "high", "urgent"]

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class _FollowUpFields(CamelModel):
    # Firestore has no date type; follow-up dates are stored as "YYYY-MM-DD"
    @field_serializer("follow_up_date", check_fields=False)
    def _iso_date(self, value: Optional[date]):
        return value.isoformat() if value else None


class FollowUpCreate(_FollowUpFields):
    patient_id: str = Field(..., min_length=1)
    patient_name: Optional[str] = Field(None, max_length=100)
    prescription_id: Optional[str] = None
    follow_up_date: date
    follow_up_time: str = Field(..., pattern=TIME_PATTERN)
    purpose: str = Field(..., min_length=3, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)
    priority: FollowUpPriority = "medium"


class FollowUpUpdate(_FollowUpFields):
    follow_up_date: Optional[date] = None
    follow_up_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    purpose: Optional[str] = Field(None, min_length=3, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)
    priority: Optional[FollowUpPriority] = None
    status: Optional[FollowUpStatus] = None
    prescription_id: Optional[str] = None


class FollowUpStatusUpdate(CamelModel):
    status: FollowUpStatus
    notes: Optional[str] = Field(None, max_length=500)
