from __future__ import annotations

import openai
from fastapi import APIRouter, Request

from eduassist.core.config import settings
from eduassist.services.llm_service import looks_like_placeholder_key, llm_available, ping_model


router = APIRouter(tags=["llm"])


def _provider() -> str:
    base_url = (settings.OPENAI_BASE_URL or "").strip().lower()
    if (settings.AZURE_OPENAI_ENDPOINT or "").strip():
        return "azure_openai"
    if base_url:
        if "ollama" in base_url or "11434" in base_url:
            return "ollama"
        return "openai_compatible"
    return "openai"


@router.get("/llm/status")
def llm_status(request: Request):
    """Configuration and a quick ping of the chat model. Never exposes API keys."""
    base_url = (settings.OPENAI_BASE_URL or "").strip()
    azure_endpoint = (settings.AZURE_OPENAI_ENDPOINT or "").strip()
    data = {
        "llm_available": bool(llm_available()),
        "provider": _provider(),
        "sdk_version": getattr(openai, "__version__", None),
        "base_url": base_url or None,
        "azure_endpoint": azure_endpoint or None,
        "api_key_set": bool((settings.OPENAI_API_KEY or "").strip()),
        "azure_api_key_set": bool((settings.AZURE_OPENAI_API_KEY or "").strip()),
        "api_key_is_placeholder": bool(looks_like_placeholder_key(settings.OPENAI_API_KEY)),
        "models": {
            "chat": settings.OPENAI_CHAT_MODEL,
            "tools": settings.tool_model,
            "image": settings.OPENAI_IMAGE_MODEL,
            "tts": settings.OPENAI_TTS_MODEL,
            "video": settings.OPENAI_VIDEO_MODEL,
        },
    }

    if not llm_available():
        return {"request_id": request.state.request_id, "data": data, "error": None}

    # Timeouts are reported in test_response; the endpoint itself stays responsive.
    data["test_response"] = {
        "chat_model": ping_model(
            model=settings.OPENAI_CHAT_MODEL,
            timeout_sec=float(settings.OPENAI_STATUS_TEST_TIMEOUT_SEC),
            max_tokens=int(settings.OPENAI_STATUS_TEST_MAX_TOKENS),
        )
    }
    return {"request_id": request.state.request_id, "data": data, "error": None}
