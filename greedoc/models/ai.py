"""Request models for the AI assistant endpoints."""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field

from greedoc.models.base import CamelModel

Severity = Literal["mild", "moderate", "severe", "critical"]


class AiChatRequest(CamelModel):
    message: str = Field(..., min_length=1, max_length=2000)
    context: Optional[Union[str, Dict[str, Any]]] = None
    type: str = Field("general", max_length=50)


class HealthInsightsRequest(CamelModel):
    query: str = Field(..., min_length=1, max_length=1000)
    context: Optional[str] = Field(None, max_length=2000)


class Symptom(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    severity: Severity


class SymptomCheckRequest(CamelModel):
    symptoms: List[Symptom] = Field(..., min_length=1)
    duration: Optional[str] = Field(None, max_length=100)
    additional_info: Optional[str] = Field(None, max_length=1000)
