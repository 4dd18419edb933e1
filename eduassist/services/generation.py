"""Thin generation client on top of the OpenAI SDK.

Every flow in :mod:`eduassist.services` goes through this module: text and
structured generation (optionally with images and tools), image generation,
speech and long-running video operations.
"""

from __future__ import annotations

import base64
import io
import json
import logging
import time
import wave
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, Union

from pydantic import BaseModel, ValidationError

from eduassist.core.config import settings
from eduassist.services import llm_service


logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """The generation API returned nothing usable. The message is safe to show to users."""


@dataclass
class MediaPart:
    url: str
    content_type: Optional[str] = None


@dataclass
class Tool:
    name: str
    description: str
    input_model: Type[BaseModel]
    fn: Callable[[Any], Any]

    def spec(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_model.model_json_schema(),
            },
        }


@dataclass
class ToolCall:
    name: str
    input: Dict[str, Any]
    output: Any


@dataclass
class GenerateResult:
    text: str = ""
    output: Any = None
    tool_calls: List[ToolCall] = field(default_factory=list)
    media: List[MediaPart] = field(default_factory=list)

    def tool_outputs(self, name: str) -> List[Any]:
        return [c.output for c in self.tool_calls if c.name == name]


@dataclass
class Operation:
    id: str
    done: bool = False
    error: Optional[str] = None
    output: Any = None


PromptPart = Union[str, MediaPart]


def _content_parts(prompt: Union[str, Sequence[PromptPart]], media: Sequence[MediaPart] | None) -> Union[str, List[Dict[str, Any]]]:
    parts: List[PromptPart] = [prompt] if isinstance(prompt, str) else list(prompt)
    parts.extend(media or [])
    if all(isinstance(p, str) for p in parts):
        return "\n\n".join(parts)

    out: List[Dict[str, Any]] = []
    for p in parts:
        if isinstance(p, MediaPart):
            out.append({"type": "image_url", "image_url": {"url": p.url}})
        elif p:
            out.append({"type": "text", "text": p})
    return out


def _schema_instruction(schema: Type[BaseModel]) -> str:
    return (
        "Respond with a single JSON object that matches this JSON schema:\n"
        + json.dumps(schema.model_json_schema(), ensure_ascii=False)
    )


def _validate_output(schema: Type[BaseModel], obj: Dict[str, Any]) -> BaseModel:
    try:
        return schema.model_validate(obj)
    except ValidationError as e:
        logger.warning("schema %s rejected model output: %s", schema.__name__, str(e)[:300])
        raise GenerationError("Model output did not match the expected schema.") from e


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def generate(
    prompt: Union[str, Sequence[PromptPart]],
    *,
    system: Optional[str] = None,
    media: Sequence[MediaPart] | None = None,
    tools: Sequence[Tool] | None = None,
    output_schema: Optional[Type[BaseModel]] = None,
    model: Optional[str] = None,
    temperature: float = 0.5,
) -> GenerateResult:
    """Run one generation call.

    With ``output_schema`` the answer must be a JSON object validating against
    it (``result.output`` holds the parsed model). With ``tools`` the model may
    call them; every call is recorded on ``result.tool_calls``.
    """
    system_parts = [s for s in [system, _schema_instruction(output_schema) if output_schema else None] if s]
    messages: List[Dict[str, Any]] = []
    if system_parts:
        messages.append({"role": "system", "content": "\n\n".join(system_parts)})
    messages.append({"role": "user", "content": _content_parts(prompt, media)})

    if tools:
        return _generate_with_tools(messages, list(tools), output_schema, model or settings.tool_model, temperature)

    if output_schema is not None:
        try:
            obj = llm_service.chat_json(messages=messages, model=model, temperature=temperature)
        except ValueError as e:
            raise GenerationError("The model returned no output.") from e
        parsed = _validate_output(output_schema, obj)
        return GenerateResult(text=json.dumps(obj, ensure_ascii=False), output=parsed)

    text = llm_service.chat_text(messages=messages, model=model, temperature=temperature)
    if not text:
        raise GenerationError("The model returned no output.")
    return GenerateResult(text=text)


def _tool_input(tool: Tool, raw_args: str) -> BaseModel:
    args = llm_service.parse_json_object(raw_args) if (raw_args or "").strip() else {}
    return tool.input_model.model_validate(args)


def _generate_with_tools(
    messages: List[Dict[str, Any]],
    tools: List[Tool],
    output_schema: Optional[Type[BaseModel]],
    model: str,
    temperature: float,
) -> GenerateResult:
    client = llm_service.get_client()
    by_name = {t.name: t for t in tools}
    tool_specs = [t.spec() for t in tools]
    calls: List[ToolCall] = []
    text = ""

    for _round in range(max(1, int(settings.LLM_MAX_TOOL_ROUNDS))):
        res = client.chat.completions.create(
            model=model,
            messages=messages,
            tools=tool_specs,
            temperature=float(temperature),
        )
        msg = res.choices[0].message
        requested = list(getattr(msg, "tool_calls", None) or [])
        if not requested:
            text = llm_service.completion_text(res)
            break

        messages.append({
            "role": "assistant",
            "content": msg.content or "",
            "tool_calls": [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {"name": tc.function.name, "arguments": tc.function.arguments or "{}"},
                }
                for tc in requested
            ],
        })
        for tc in requested:
            tool = by_name.get(tc.function.name)
            if tool is None:
                payload: Any = {"error": f"Unknown tool: {tc.function.name}"}
            else:
                try:
                    tool_input = _tool_input(tool, tc.function.arguments)
                except (ValidationError, ValueError) as e:
                    logger.warning("tool %s rejected arguments: %s", tool.name, str(e)[:200])
                    payload = {"error": f"Invalid arguments for {tool.name}: {str(e)[:200]}"}
                else:
                    # Errors raised by the tool itself propagate to the caller.
                    payload = _jsonable(tool.fn(tool_input))
                    calls.append(ToolCall(name=tool.name, input=tool_input.model_dump(), output=payload))
            messages.append({
                "role": "tool",
                "tool_call_id": tc.id,
                "content": payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False, default=str),
            })
    else:
        logger.info("tool loop stopped after %s rounds", settings.LLM_MAX_TOOL_ROUNDS)

    text = (text or "").strip()
    if not text and not calls:
        raise GenerationError("The model returned no output.")

    result = GenerateResult(text=text, tool_calls=calls)
    if output_schema is not None:
        try:
            obj = llm_service.parse_json_object(text)
        except ValueError as e:
            raise GenerationError("Model output did not match the expected schema.") from e
        result.output = _validate_output(output_schema, obj)
    return result


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------


def data_uri(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> tuple[bytes, str]:
    """Split a ``data:<type>;base64,<payload>`` URI into raw bytes and its content type."""
    if not (uri or "").startswith("data:") or "," not in uri:
        raise ValueError("Expected a base64 data URI.")
    header, payload = uri.split(",", 1)
    content_type = header[len("data:"):].split(";", 1)[0] or "application/octet-stream"
    return base64.b64decode(payload), content_type


def generate_image(prompt: str, *, model: Optional[str] = None, size: Optional[str] = None) -> Optional[str]:
    """Return a data URI (or URL) for one generated image, None when the API returned no media."""
    client = llm_service.get_client()
    m = model or settings.OPENAI_IMAGE_MODEL
    kwargs: Dict[str, Any] = {"model": m, "prompt": prompt, "size": size or settings.OPENAI_IMAGE_SIZE, "n": 1}
    # gpt-image-* always returns base64; dall-e needs asking
    if m.startswith("dall-e"):
        kwargs["response_format"] = "b64_json"
    resp = client.images.generate(**kwargs)

    items = list(getattr(resp, "data", None) or [])
    if not items:
        return None
    item = items[0]
    if getattr(item, "b64_json", None):
        return f"data:image/png;base64,{item.b64_json}"
    return getattr(item, "url", None) or None


def pcm_to_wav(pcm: bytes, *, channels: int = 1, rate: int = 24000, sample_width: int = 2) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(rate)
        wf.writeframes(pcm)
    return buf.getvalue()


def generate_speech(text: str, *, voice: Optional[str] = None, model: Optional[str] = None) -> str:
    """Narrate ``text``; returns ``data:audio/wav;base64,...``."""
    client = llm_service.get_client()
    resp = client.audio.speech.create(
        model=model or settings.OPENAI_TTS_MODEL,
        voice=voice or settings.OPENAI_TTS_VOICE,
        input=text,
        response_format="pcm",
    )
    pcm = resp.read()
    if not pcm:
        raise GenerationError("Speech generation returned no audio.")
    return data_uri(pcm_to_wav(pcm), "audio/wav")


def _to_operation(video: Any) -> Operation:
    status = str(getattr(video, "status", "") or "")
    err = getattr(video, "error", None)
    message = None
    if status == "failed":
        message = getattr(err, "message", None) or str(err or "unknown error")
    return Operation(id=str(getattr(video, "id", "") or ""), done=status in ("completed", "failed"), error=message, output=video)


def start_video(prompt: str, *, reference: Optional[str] = None) -> Operation:
    """Start a video generation job; ``reference`` is an optional image data URI."""
    client = llm_service.get_client()
    kwargs: Dict[str, Any] = {
        "model": settings.OPENAI_VIDEO_MODEL,
        "prompt": prompt,
        "seconds": str(settings.VIDEO_DURATION_SEC),
        "size": settings.VIDEO_SIZE,
    }
    if reference:
        data, content_type = decode_data_uri(reference)
        ext = content_type.split("/")[-1] or "png"
        kwargs["input_reference"] = (f"reference.{ext}", data, content_type)

    video = client.videos.create(**kwargs)
    if not getattr(video, "id", None):
        raise GenerationError("Failed to start video generation operation.")
    logger.info("video operation %s started (%s)", video.id, settings.OPENAI_VIDEO_MODEL)
    return _to_operation(video)


def check_operation(op: Operation) -> Operation:
    client = llm_service.get_client()
    return _to_operation(client.videos.retrieve(op.id))


def wait_for_operation(
    op: Operation,
    *,
    poll_interval: Optional[float] = None,
    max_attempts: Optional[int] = None,
) -> Operation:
    """Poll until the operation reports done. Raises GenerationError if it failed."""
    interval = settings.VIDEO_POLL_INTERVAL_SEC if poll_interval is None else float(poll_interval)
    limit = settings.VIDEO_POLL_MAX_ATTEMPTS if max_attempts is None else int(max_attempts)

    attempts = 0
    while not op.done:
        if limit is not None and attempts >= limit:
            raise GenerationError("Video generation did not finish in time.")
        time.sleep(interval)
        op = check_operation(op)
        attempts += 1

    if op.error:
        raise GenerationError(f"Failed to generate video. Error: {op.error}")
    return op


def download_video(op: Operation) -> str:
    """Fetch the finished video as ``data:video/mp4;base64,...``."""
    if not op.id or not op.done:
        raise GenerationError("Failed to find the generated video.")
    client = llm_service.get_client()
    try:
        content = client.videos.download_content(op.id, variant="video")
        data = content.read()
    except Exception as e:
        raise GenerationError(f"Failed to download video: {e}") from e
    if not data:
        raise GenerationError("Failed to find the generated video.")
    return data_uri(data, "video/mp4")


def render_video(prompt: str, *, reference: Optional[str] = None) -> str:
    """start -> wait -> download in one call."""
    op = start_video(prompt, reference=reference)
    op = wait_for_operation(op)
    logger.info("video operation %s finished", op.id)
    return download_video(op)
