"""Pydantic model for personal calendar events."""
from datetime import date
from typing import Literal, Optional

from pydantic import Field, field_serializer

from greedoc.models.base import CamelModel
from greedoc.models.followup import TIME_PATTERN

EventType = Literal["medication", "appointment", "exercise", "reminder"]


class CalendarEventCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    type: EventType
    date: date
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    description: Optional[str] = Field(None, max_length=500)

    @field_serializer("date")
    def _iso_date(self, value: date):
        return value.isoformat()
