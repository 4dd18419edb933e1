"""OpenAI SDK access: client construction, JSON/text chat helpers and a status ping.

Works against OpenAI, Azure OpenAI and OpenAI-compatible servers (gateways,
Ollama, LM Studio), selected through settings. Higher-level code should go
through :mod:`eduassist.services.generation`.
"""

from __future__ import annotations

import ast
import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

import openai

from eduassist.core.config import settings


logger = logging.getLogger(__name__)

_client = None

_PLACEHOLDER_RE = re.compile(
    r"your[_\- ]?(openai[_\- ]?)?api[_\- ]?key|^openai_api_key$|replace[_\-]?me|change[_\-]?me|x{4,}"
)
_PLACEHOLDER_WORDS = ("your", "demo", "sample", "example", "replace")


def looks_like_placeholder_key(key: Optional[str]) -> bool:
    """True for template values such as ``your_api_key`` or ``sk-xxxx`` left in .env."""
    k = (key or "").strip().lower()
    if not k:
        return False
    if _PLACEHOLDER_RE.search(k):
        return True
    return not k.startswith("sk-") and "key" in k and any(w in k for w in _PLACEHOLDER_WORDS)


def _base_url() -> str:
    return (settings.OPENAI_BASE_URL or "").strip()


def _is_ollama() -> bool:
    # Ollama only implements /v1/chat/completions reliably
    url = _base_url().lower()
    return bool(url) and ("ollama" in url or "11434" in url)


def llm_available() -> bool:
    """Whether a provider is configured. Does not call it."""
    azure_key = (settings.AZURE_OPENAI_API_KEY or "").strip()
    if (settings.AZURE_OPENAI_ENDPOINT or "").strip() or azure_key:
        return bool(azure_key) and not looks_like_placeholder_key(azure_key)
    if _base_url():
        return True
    key = (settings.OPENAI_API_KEY or "").strip()
    return bool(key) and not looks_like_placeholder_key(key)


def _json_setting(name: str) -> Optional[Dict[str, Any]]:
    """Settings such as OPENAI_EXTRA_HEADERS_JSON hold a JSON object as a string."""
    raw = (getattr(settings, name) or "").strip()
    if not raw:
        return None
    try:
        obj = json.loads(raw)
    except ValueError as e:
        raise RuntimeError(f'{name} must be a JSON object string, e.g. {name}={{"foo":"bar"}} ({str(e)[:120]})') from e
    if not isinstance(obj, dict):
        raise RuntimeError(f"{name} must be a JSON object, got {type(obj).__name__}.")
    return obj


def get_client():
    """Shared OpenAI / AzureOpenAI client, built on first use.

    Azure wins when AZURE_OPENAI_ENDPOINT is set, then OPENAI_BASE_URL
    (gateways and local servers), then OpenAI cloud.
    """
    global _client
    if _client is not None:
        return _client

    common: Dict[str, Any] = {
        "timeout": float(settings.OPENAI_HTTP_TIMEOUT_SEC),
        "max_retries": int(settings.OPENAI_MAX_RETRIES),
        "default_headers": _json_setting("OPENAI_EXTRA_HEADERS_JSON"),
        "default_query": _json_setting("OPENAI_EXTRA_QUERY_JSON"),
    }

    endpoint = (settings.AZURE_OPENAI_ENDPOINT or "").strip()
    if endpoint:
        azure_key = (settings.AZURE_OPENAI_API_KEY or "").strip()
        if not azure_key or looks_like_placeholder_key(azure_key):
            raise RuntimeError("AZURE_OPENAI_ENDPOINT is set but AZURE_OPENAI_API_KEY is missing or a placeholder.")
        # Azure: model ids are deployment names
        _client = openai.AzureOpenAI(
            azure_endpoint=endpoint,
            api_key=azure_key,
            api_version=(settings.AZURE_OPENAI_API_VERSION or "").strip() or "2024-10-21",
            **common,
        )
        return _client

    base_url = _base_url()
    api_key = (settings.OPENAI_API_KEY or "").strip()
    if not base_url and looks_like_placeholder_key(api_key):
        raise RuntimeError("OPENAI_API_KEY looks like a placeholder. Put your real key in .env.")
    if not base_url and not api_key:
        raise RuntimeError(
            "LLM is not configured. Set OPENAI_API_KEY, OPENAI_BASE_URL (Ollama/LM Studio) "
            "or AZURE_OPENAI_ENDPOINT + AZURE_OPENAI_API_KEY in .env"
        )
    # local servers ignore the key but the SDK insists on one
    _client = openai.OpenAI(api_key=api_key or "local", base_url=base_url or None, **common)
    return _client


# ---------------------------------------------------------------------------
# Model output parsing
# ---------------------------------------------------------------------------

_REASONING_RE = re.compile(r"<\s*(think|analysis)\s*>.*?<\s*/\s*\1\s*>", re.IGNORECASE | re.DOTALL)
_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_JSON_LITERAL_RE = re.compile(r"\b(true|false|null)\b")
_PY_LITERALS = {"true": "True", "false": "False", "null": "None"}


def strip_reasoning(text: str) -> str:
    """Drop <think>/<analysis> blocks and markdown fences some models wrap around answers."""
    return _FENCE_RE.sub("", _REASONING_RE.sub("", text or "")).strip()


def _loads(text: str) -> Optional[Dict[str, Any]]:
    try:
        obj = json.loads(text)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def _last_object(text: str) -> Optional[Dict[str, Any]]:
    decoder = json.JSONDecoder()
    found = None
    pos = text.find("{")
    while pos >= 0:
        try:
            obj, end = decoder.raw_decode(text, pos)
        except ValueError:
            pos = text.find("{", pos + 1)
            continue
        if isinstance(obj, dict):
            found = obj
        pos = text.find("{", end)
    return found


def _literal(text: str) -> Optional[Dict[str, Any]]:
    # no code execution: literal_eval only
    for candidate in (text, _JSON_LITERAL_RE.sub(lambda m: _PY_LITERALS[m.group(1)], text)):
        try:
            obj = ast.literal_eval(candidate)
        except (ValueError, SyntaxError):
            continue
        if isinstance(obj, dict):
            return obj
    return None


def parse_json_object(text: str) -> Dict[str, Any]:
    """Parse the JSON object in a model answer.

    Tolerates reasoning blocks, markdown fences, prose around the object,
    trailing commas and Python-style literals. Raises ValueError when nothing
    parses.
    """
    cleaned = strip_reasoning(text)
    if not cleaned:
        raise ValueError("Empty model response (expected JSON).")
    fixed = _TRAILING_COMMA_RE.sub(r"\1", cleaned)
    for parse, candidate in ((_loads, cleaned), (_loads, fixed), (_last_object, fixed), (_literal, fixed)):
        obj = parse(candidate)
        if obj is not None:
            return obj
    raise ValueError(f"Could not parse JSON from model output. Head={cleaned[:200]!r}")


def _text_of(part: Any) -> str:
    if isinstance(part, str):
        return part.strip()
    if isinstance(part, dict):
        val = part.get("text") or part.get("content")
    else:
        val = getattr(part, "text", None) or getattr(part, "content", None)
    return val.strip() if isinstance(val, str) else ""


def response_text(resp: Any) -> str:
    """Text of a Responses API result."""
    text = getattr(resp, "output_text", None)
    if isinstance(text, str) and text.strip():
        return text.strip()
    parts: List[str] = []
    for item in getattr(resp, "output", None) or []:
        if str(getattr(item, "type", "message")) != "message":
            continue
        for c in getattr(item, "content", None) or []:
            if str(getattr(c, "type", "")) in ("output_text", "text"):
                parts.append(_text_of(c))
    return "\n".join(p for p in parts if p)


def completion_text(res: Any) -> str:
    """Assistant text of a Chat Completions result.

    Compatible servers may return content parts instead of a string, or leave
    content empty and put the answer into ``reasoning_content``.
    """
    try:
        choice = res.choices[0]
    except (AttributeError, IndexError, TypeError):
        return ""

    msg = getattr(choice, "message", None)
    content = getattr(msg, "content", None)
    if isinstance(content, list):
        text = "\n".join(t for t in (_text_of(p) for p in content) if t)
    else:
        text = _text_of(content or "")
    if text:
        return text
    for key in ("reasoning_content", "reasoning", "thinking"):
        text = _text_of(getattr(msg, key, None) or "")
        if text:
            return text
    # legacy completions
    return _text_of(getattr(choice, "text", None) or "")


# ---------------------------------------------------------------------------
# Chat helpers
# ---------------------------------------------------------------------------

JSON_GUARD = (
    "You are a strict JSON generator. "
    "Output exactly ONE valid JSON object and nothing else. "
    "Do NOT include explanations, markdown fences, or <think>/<analysis> blocks."
)
_RETRY_GUARD = "CRITICAL: Output ONLY a single valid JSON object. No reasoning text, markdown fences or explanations."


def _prefer_chat(messages: List[Dict[str, Any]]) -> bool:
    """Image prompts and Ollama go straight to Chat Completions."""
    return _is_ollama() or any(isinstance(m.get("content"), list) for m in messages)


def _request_extras(timeout_sec: Optional[float]) -> Dict[str, Any]:
    extras: Dict[str, Any] = {}
    body = _json_setting("OPENAI_EXTRA_BODY_JSON")
    if body:
        extras["extra_body"] = body
    if timeout_sec is not None:
        extras["timeout"] = float(timeout_sec)
    return extras


def _responses(client, *, model: str, messages: List[Dict[str, Any]], max_tokens: int, temperature: float,
               extras: Dict[str, Any], json_mode: bool) -> str:
    """Responses API call; '' when the provider has no /responses endpoint."""
    kwargs: Dict[str, Any] = {
        "model": model,
        "input": messages,
        "max_output_tokens": int(max_tokens),
        "temperature": float(temperature),
        **extras,
    }
    if json_mode:
        kwargs["text"] = {"format": {"type": "json_object"}}
    try:
        return response_text(client.responses.create(**kwargs))
    except openai.APIStatusError as e:
        logger.info("responses API rejected the call (%s); using chat.completions", e.status_code)
        return ""


def _chat(client, *, model: str, messages: List[Dict[str, Any]], max_tokens: int, temperature: float,
          extras: Dict[str, Any], json_mode: bool) -> str:
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": int(max_tokens),
        "temperature": float(temperature),
        **extras,
    }
    if json_mode and not _is_ollama():
        try:
            return completion_text(client.chat.completions.create(response_format={"type": "json_object"}, **kwargs))
        except openai.BadRequestError:
            logger.info("model %s does not accept response_format; retrying without it", model)
    return completion_text(client.chat.completions.create(**kwargs))


def chat_json(
    *,
    messages: List[Dict[str, Any]],
    model: Optional[str] = None,
    temperature: float = 0.3,
    max_tokens: int = 2400,
    timeout_sec: float | None = None,
) -> Dict[str, Any]:
    """Ask for one JSON object and return it parsed.

    Text-only prompts try the Responses API first. When the answer does not
    parse, one retry is made with a stricter guard at temperature 0; a second
    failure raises ValueError.
    """
    client = get_client()
    m = model or settings.OPENAI_CHAT_MODEL
    extras = _request_extras(timeout_sec)
    guarded = [{"role": "system", "content": JSON_GUARD}, *(messages or [])]
    call = dict(model=m, max_tokens=max_tokens, extras=extras, json_mode=True)

    if not _prefer_chat(messages or []) and hasattr(client, "responses"):
        text = _responses(client, messages=guarded, temperature=temperature, **call)
        if text:
            try:
                return parse_json_object(text)
            except ValueError:
                logger.info("responses answer from %s was not JSON; asking chat.completions", m)

    text = _chat(client, messages=guarded, temperature=temperature, **call)
    try:
        return parse_json_object(text)
    except ValueError:
        logger.warning("model %s returned unparsable JSON; retrying once", m)

    call["max_tokens"] = min(int(max_tokens) * 2, 8192)
    text = _chat(client, messages=[{"role": "system", "content": _RETRY_GUARD}, *guarded], temperature=0.0, **call)
    return parse_json_object(text)


def chat_text(
    *,
    messages: List[Dict[str, Any]],
    model: Optional[str] = None,
    temperature: float = 0.5,
    max_tokens: int = 3000,
    timeout_sec: float | None = None,
) -> str:
    """Plain-text answer, for long Markdown documents where JSON mode is brittle."""
    client = get_client()
    call = dict(
        model=model or settings.OPENAI_CHAT_MODEL,
        messages=messages or [],
        max_tokens=max_tokens,
        temperature=temperature,
        extras=_request_extras(timeout_sec),
        json_mode=False,
    )
    if not _prefer_chat(messages or []) and hasattr(client, "responses"):
        text = _responses(client, **call)
        if text:
            return text
    return _chat(client, **call)


def ping_model(
    model: str,
    prompt: str = 'Return ONLY JSON: {"ok": true}',
    timeout_sec: float | None = None,
    max_tokens: int | None = None,
) -> Dict[str, Any]:
    """Quick round trip for the status page. Reports failures instead of raising."""
    timeout = float(timeout_sec or settings.OPENAI_STATUS_TEST_TIMEOUT_SEC)
    tokens = max(16, int(max_tokens or settings.OPENAI_STATUS_TEST_MAX_TOKENS))
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": [{"role": "system", "content": JSON_GUARD}, {"role": "user", "content": prompt}],
        "temperature": 0,
        "max_tokens": tokens,
    }
    if not _is_ollama():
        kwargs["response_format"] = {"type": "json_object"}

    try:
        client = get_client()
        started = time.perf_counter()
        res = client.chat.completions.create(**kwargs, **_request_extras(timeout))
        latency = time.perf_counter() - started
    except Exception as e:
        return {"ok": False, "error": f"{type(e).__name__}: {str(e)[:200]}", "timeout_sec": timeout, "requested_model": model}

    text = completion_text(res)
    try:
        parsed: Optional[Dict[str, Any]] = parse_json_object(text)
    except ValueError:
        parsed = None
    returned = str(getattr(res, "model", "") or "")
    choices = getattr(res, "choices", None) or [None]
    # gateways report fully qualified ids ("openai/gpt-4o-mini")
    mismatch = bool(model and returned and model not in returned and returned not in model)
    return {
        "ok": True,
        "latency_sec": round(latency, 3),
        "requested_model": model,
        "returned_model": returned or None,
        "finish_reason": getattr(choices[0], "finish_reason", None),
        "content_head": strip_reasoning(text)[:160],
        "json_parse_ok": parsed is not None,
        "ok_value": (parsed or {}).get("ok"),
        "model_mismatch": mismatch,
    }
