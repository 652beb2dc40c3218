"""Prompt building for the AI assistant endpoints.

Each operation gathers the caller's own records from Firestore, turns them
into a compact text context and asks ``ai_client`` for a completion.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from greedoc.models.health_data import METRIC_TYPES
from greedoc.services import (
    ai_client,
    followup_service,
    health_data_service,
    medication_service,
    prescription_service,
    user_service,
)
from greedoc.services.time_utils import age_from_birth_date, utcnow

SYSTEM_PROMPT = (
    "You are Greedoc's virtual health assistant. Give clear, friendly and "
    "medically cautious answers in plain language. You do not diagnose; "
    "recommend contacting the patient's doctor for anything serious and "
    "emergency services for urgent symptoms."
)

FALLBACK_REPLIES = {
    "general": ai_client.DEFAULT_FALLBACK,
    "insights": (
        "I can't generate personalised insights right now. Keep logging your "
        "health metrics and review them with your doctor at your next visit."
    ),
    "symptoms": (
        "I can't analyse symptoms right now. If your symptoms are severe or "
        "getting worse, contact your doctor or emergency services."
    ),
    "summary": "Here is an overview of your latest records. AI commentary is unavailable right now.",
    "medications": (
        "I can't analyse your medications right now. Ask your doctor or "
        "pharmacist to review them for interactions and side effects."
    ),
}

MEDICATION_ANALYSIS_PROMPT = (
    "You are a medication analysis assistant. Review the patient's medications "
    "for potential drug interactions, side effects worth monitoring, adherence "
    "tips and general medication management advice. Always remind the patient "
    "to consult their doctor or pharmacist for specific medical advice."
)


SEVERITY_URGENCY = {"mild": "low", "moderate": "medium", "severe": "high", "critical": "emergency"}
# Least to most urgent
URGENCY_ORDER = ["low", "medium", "high", "emergency"]


def _metrics_lines(health: Optional[Dict[str, Any]]) -> List[str]:
    lines = []
    for metric_type, reading in ((health or {}).get("healthMetrics") or {}).items():
        label = METRIC_TYPES.get(metric_type, {}).get("label", metric_type)
        lines.append(f"- {label}: {reading.get('value')} {reading.get('unit', '')}".rstrip())
    return lines


def _prescription_lines(prescriptions: List[Dict[str, Any]]) -> List[str]:
    lines = []
    for p in prescriptions:
        meds = ", ".join(
            f"{m.get('name')} {m.get('dosage')} ({m.get('frequency')})"
            for m in p.get("medications") or []
        )
        lines.append(f"- {p.get('diagnosis') or 'Prescription'}: {meds}")
    return lines


def _medication_lines(medications: List[Dict[str, Any]]) -> List[str]:
    lines = []
    for m in medications:
        times = (m.get("frequency") or {}).get("timesPerDay")
        line = f"- {m.get('name')} {medication_service.dosage_text(m)}"
        if times:
            line += f", {times}x daily"
        if m.get("purpose"):
            line += f" ({m['purpose']})"
        lines.append(line)
    return lines


def patient_context(user: Dict[str, Any]) -> str:
    """Profile, latest metrics, active prescriptions and medications as prompt text."""
    parts = [f"Patient: {user_service.full_name(user)}"]
    age = age_from_birth_date(user.get("dateOfBirth"))
    if age is not None:
        parts.append(f"Age: {age}")
    if user.get("gender"):
        parts.append(f"Gender: {user['gender']}")

    medical = user.get("medicalInfo") or {}
    for key in ("allergies", "conditions", "medications"):
        if medical.get(key):
            parts.append(f"{key.capitalize()}: {', '.join(medical[key])}")

    metrics = _metrics_lines(health_data_service.get_health_data(user["id"]))
    if metrics:
        parts.append("Latest health metrics:\n" + "\n".join(metrics))

    prescriptions = _prescription_lines(prescription_service.active_for_patient(user["id"]))
    if prescriptions:
        parts.append("Active prescriptions:\n" + "\n".join(prescriptions))

    medications = _medication_lines(medication_service.active_for_user(user["id"]))
    if medications:
        parts.append("Current medications:\n" + "\n".join(medications))

    return "\n".join(parts)


def _ask(
    prompt: str,
    fallback_key: str,
    system: str = SYSTEM_PROMPT,
    max_tokens: int = 500,
    temperature: float = 0.7,
) -> Dict[str, Any]:
    messages = [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]
    text, provider = ai_client.complete(
        messages,
        fallback=FALLBACK_REPLIES[fallback_key],
        max_tokens=max_tokens,
        temperature=temperature,
    )
    return {"response": text, "provider": provider, "timestamp": utcnow().isoformat()}


def chat(user: Dict[str, Any], message: str, context: Union[str, Dict[str, Any], None], chat_type: str) -> Dict[str, Any]:
    prompt = message
    if context:
        ctx = context if isinstance(context, str) else json.dumps(context, default=str)
        prompt = f"Context ({chat_type}): {ctx}\n\nQuestion: {message}"
    return _ask(prompt, "general")


def health_insights(user: Dict[str, Any], query: str, context: Optional[str]) -> Dict[str, Any]:
    prompt = f"{patient_context(user)}\n\n"
    if context:
        prompt += f"Additional context: {context}\n\n"
    prompt += f"Question: {query}\nGive practical, personalised health insights."
    return _ask(prompt, "insights")


def urgency_for(symptoms: List[Dict[str, Any]]) -> str:
    levels = [SEVERITY_URGENCY[s["severity"]] for s in symptoms]
    return max(levels, key=URGENCY_ORDER.index)


def analyze_symptoms(
    user: Dict[str, Any],
    symptoms: List[Dict[str, Any]],
    duration: Optional[str],
    additional_info: Optional[str],
) -> Dict[str, Any]:
    listed = "\n".join(f"- {s['name']} ({s['severity']})" for s in symptoms)
    prompt = f"{patient_context(user)}\n\nReported symptoms:\n{listed}\n"
    if duration:
        prompt += f"Duration: {duration}\n"
    if additional_info:
        prompt += f"Additional information: {additional_info}\n"
    prompt += "List possible causes, self-care steps and when to see a doctor."

    result = _ask(prompt, "symptoms")
    result["urgency"] = urgency_for(symptoms)
    return result


def health_summary(user: Dict[str, Any]) -> Dict[str, Any]:
    health = health_data_service.get_health_data(user["id"])
    active = prescription_service.active_for_patient(user["id"])
    upcoming = [
        f for f in followup_service.list_followups(patient_id=user["id"], status="scheduled")
        if f["isUpcoming"]
    ]

    prompt = (
        f"{patient_context(user)}\n\nUpcoming follow-ups: {len(upcoming)}\n"
        "Write a short summary of this patient's current health status."
    )
    result = _ask(prompt, "summary")
    result.update({
        "healthMetrics": (health or {}).get("healthMetrics") or {},
        "activePrescriptions": active,
        "upcomingFollowUps": upcoming,
    })
    return result


def medication_analysis(user: Dict[str, Any]) -> Dict[str, Any]:
    """Interaction and side-effect review of the caller's active medications."""
    medications = [
        {
            "name": m.get("name"),
            "genericName": m.get("genericName"),
            "dosage": m.get("dosage"),
            "frequency": m.get("frequency"),
            "purpose": m.get("purpose"),
            "sideEffects": m.get("sideEffects") or [],
            "interactions": m.get("interactions") or [],
        }
        for m in medication_service.active_for_user(user["id"])
    ]
    if not medications:
        return {
            "medications": [],
            "analysis": "No active medications found for analysis.",
            "recommendations": ["Continue maintaining a healthy lifestyle."],
        }

    prompt = (
        f"Patient's medications:\n{json.dumps(medications, indent=2, default=str)}\n\n"
        "Please analyse these medications and give safety-focused insights."
    )
    result = _ask(prompt, "medications", system=MEDICATION_ANALYSIS_PROMPT, max_tokens=800, temperature=0.6)
    return {
        "medications": medications,
        "analysis": result["response"],
        "provider": result["provider"],
        "timestamp": result["timestamp"],
    }
