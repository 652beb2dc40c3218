"""AI assistant routes.

Handlers are plain ``def`` so the blocking provider calls run in
FastAPI's threadpool.
"""
from fastapi import APIRouter, Body, Depends

from greedoc.api.deps import get_current_user, require_role
from greedoc.models.ai import AiChatRequest, HealthInsightsRequest, SymptomCheckRequest
from greedoc.services import health_assistant

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/chat")
def ai_chat(payload: AiChatRequest = Body(...), user=Depends(get_current_user)):
    result = health_assistant.chat(user, payload.message, payload.context, payload.type)
    return {"status": "success", "data": result}


@router.post("/health-insights")
def health_insights(
    payload: HealthInsightsRequest = Body(...),
    user=Depends(require_role(["patient"])),
):
    result = health_assistant.health_insights(user, payload.query, payload.context)
    return {"status": "success", "data": result}


@router.post("/analyze-symptoms")
def analyze_symptoms(
    payload: SymptomCheckRequest = Body(...),
    user=Depends(require_role(["patient"])),
):
    symptoms = [s.model_dump() for s in payload.symptoms]
    result = health_assistant.analyze_symptoms(user, symptoms, payload.duration, payload.additional_info)
    return {"status": "success", "data": result}


@router.get("/health-summary")
def health_summary(user=Depends(require_role(["patient"]))):
    return {"status": "success", "data": health_assistant.health_summary(user)}


@router.post("/medication-analysis")
def medication_analysis(user=Depends(get_current_user)):
    return {"status": "success", "data": health_assistant.medication_analysis(user)}
