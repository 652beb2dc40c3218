"""
Chat-completion client with provider fallback.

Providers are tried in order: OpenAI, then GLM (Zhipu), each only when its
API key is configured. A provider that errors or returns no text is skipped.
There are no retries; when nothing answers the caller's fallback text is
returned with provider ``"fallback"``.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from greedoc.core.config import settings
from greedoc.services.logger import log_debug

logger = logging.getLogger(__name__)

FALLBACK_PROVIDER = "fallback"

DEFAULT_FALLBACK = (
    "I'm sorry, the AI assistant is unavailable right now. "
    "Please try again later or contact your doctor for medical advice."
)


def _providers() -> List[Tuple[str, str, str, str]]:
    """(name, url, api key, model) for every configured provider, in fallback order."""
    candidates = [
        ("openai", settings.OPENAI_API_URL, settings.OPENAI_API_KEY, settings.OPENAI_MODEL),
        ("glm", settings.GLM_API_URL, settings.GLM_API_KEY, settings.GLM_MODEL),
    ]
    return [c for c in candidates if c[2]]


def _headers(api_key: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def _extract_output_text(resp_json: Dict[str, Any]) -> str:
    # Chat Completions structure: choices[0].message.content (OpenAI and GLM alike)
    choices = resp_json.get("choices", [])
    if choices and isinstance(choices, list):
        return (choices[0].get("message", {}).get("content") or "").strip()
    return ""


def _call_provider(
    url: str,
    api_key: str,
    model: str,
    messages: List[Dict[str, str]],
    max_tokens: int,
    temperature: float,
) -> str:
    payload = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    r = requests.post(
        url,
        headers=_headers(api_key),
        json=payload,
        timeout=settings.AI_REQUEST_TIMEOUT_MS / 1000,
    )
    r.raise_for_status()
    return _extract_output_text(r.json())


def complete(
    messages: List[Dict[str, str]],
    fallback: Optional[str] = None,
    max_tokens: int = 500,
    temperature: float = 0.7,
) -> Tuple[str, str]:
    """
    Run a chat completion through the provider chain.

    Returns (text, provider name).
    """
    for name, url, api_key, model in _providers():
        try:
            text = _call_provider(url, api_key, model, messages, max_tokens, temperature)
        except (requests.RequestException, ValueError) as exc:
            # ValueError covers a non-JSON body
            logger.warning("AI provider %s failed: %s", name, exc)
            log_debug("ai_provider_error", {"provider": name, "error": str(exc)})
            continue

        if text:
            log_debug("ai_provider_ok", {"provider": name, "model": model, "chars": len(text)})
            return text, name

        logger.warning("AI provider %s returned no content", name)

    return (fallback or DEFAULT_FALLBACK), FALLBACK_PROVIDER
