import base64
import io
import json
import wave
from types import SimpleNamespace

import pytest
from pydantic import BaseModel

from eduassist.services import generation, llm_service
from eduassist.services.generation import GenerationError, MediaPart, Operation, Tool


class _Answer(BaseModel):
    title: str
    count: int


class _Lookup(BaseModel):
    word: str


class _FakeCompletions:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append({**kwargs, "messages": list(kwargs.get("messages") or [])})
        return self.responses.pop(0)


def _text_response(text):
    msg = SimpleNamespace(content=text, tool_calls=None)
    return SimpleNamespace(choices=[SimpleNamespace(message=msg, finish_reason="stop")])


def _tool_response(name, args, call_id="call_1"):
    tc = SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=json.dumps(args)))
    msg = SimpleNamespace(content=None, tool_calls=[tc])
    return SimpleNamespace(choices=[SimpleNamespace(message=msg, finish_reason="tool_calls")])


def _client(**parts):
    return SimpleNamespace(**parts)


def test_generate_validates_structured_output(monkeypatch):
    captured = {}

    def _fake_chat_json(*, messages, model=None, temperature=0.3, **_kw):
        captured["messages"] = messages
        return {"title": "Photosynthesis", "count": 3}

    monkeypatch.setattr(llm_service, "chat_json", _fake_chat_json)

    res = generation.generate("Explain photosynthesis", output_schema=_Answer)

    assert res.output == _Answer(title="Photosynthesis", count=3)
    assert captured["messages"][0]["role"] == "system"
    assert "JSON schema" in captured["messages"][0]["content"]


def test_generate_schema_mismatch_raises_generation_error(monkeypatch):
    monkeypatch.setattr(llm_service, "chat_json", lambda **_kw: {"title": "x", "count": "many"})

    with pytest.raises(GenerationError, match="did not match the expected schema"):
        generation.generate("anything", output_schema=_Answer)


def test_generate_empty_text_raises(monkeypatch):
    monkeypatch.setattr(llm_service, "chat_text", lambda **_kw: "")

    with pytest.raises(GenerationError, match="no output"):
        generation.generate("hello")


def test_generate_attaches_media_as_image_parts(monkeypatch):
    captured = {}

    def _fake_chat_text(*, messages, **_kw):
        captured["messages"] = messages
        return "ok"

    monkeypatch.setattr(llm_service, "chat_text", _fake_chat_text)

    generation.generate("Describe", media=[MediaPart(url="data:image/png;base64,AAAA")])

    content = captured["messages"][-1]["content"]
    assert content[0] == {"type": "text", "text": "Describe"}
    assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}


def test_tool_loop_runs_tool_and_feeds_result_back(monkeypatch):
    seen = []

    def _define(args: _Lookup):
        seen.append(args)
        return {"definition": f"{args.word} means water"}

    tool = Tool(name="lookup", description="Dictionary lookup", input_model=_Lookup, fn=_define)
    completions = _FakeCompletions([_tool_response("lookup", {"word": "aqua"}), _text_response("Aqua means water.")])
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(chat=SimpleNamespace(completions=completions)))

    res = generation.generate("What does aqua mean?", tools=[tool])

    assert res.text == "Aqua means water."
    assert seen == [_Lookup(word="aqua")]
    assert res.tool_calls[0].input == {"word": "aqua"}
    assert res.tool_outputs("lookup") == [{"definition": "aqua means water"}]
    assert completions.calls[0]["tools"][0]["function"]["name"] == "lookup"
    tool_msg = completions.calls[1]["messages"][-1]
    assert tool_msg["role"] == "tool"
    assert json.loads(tool_msg["content"]) == {"definition": "aqua means water"}


def test_tool_loop_stops_after_max_rounds(monkeypatch):
    tool = Tool(name="lookup", description="d", input_model=_Lookup, fn=lambda a: {"ok": True})
    completions = _FakeCompletions([_tool_response("lookup", {"word": "x"}, call_id=f"c{i}") for i in range(5)])
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(chat=SimpleNamespace(completions=completions)))
    monkeypatch.setattr(generation.settings, "LLM_MAX_TOOL_ROUNDS", 2)

    res = generation.generate("loop", tools=[tool])

    assert len(completions.calls) == 2
    assert len(res.tool_calls) == 2
    assert res.text == ""


def test_tool_loop_reports_bad_arguments_to_model(monkeypatch):
    tool = Tool(name="lookup", description="d", input_model=_Lookup, fn=lambda a: {"ok": True})
    completions = _FakeCompletions([_tool_response("lookup", {"nope": 1}), _text_response("Sorry.")])
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(chat=SimpleNamespace(completions=completions)))

    res = generation.generate("x", tools=[tool])

    assert res.tool_calls == []
    assert "Invalid arguments" in completions.calls[1]["messages"][-1]["content"]


def test_tool_loop_lets_tool_errors_propagate(monkeypatch):
    def _broken(args: _Lookup):
        raise ValueError("tool blew up")

    tool = Tool(name="lookup", description="d", input_model=_Lookup, fn=_broken)
    completions = _FakeCompletions([_tool_response("lookup", {"word": "x"}), _text_response("All good!")])
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(chat=SimpleNamespace(completions=completions)))

    with pytest.raises(ValueError, match="tool blew up"):
        generation.generate("x", tools=[tool])
    assert len(completions.calls) == 1


def test_pcm_to_wav_header():
    pcm = b"\x01\x00" * 2400
    wav_bytes = generation.pcm_to_wav(pcm)
    with wave.open(io.BytesIO(wav_bytes), "rb") as wf:
        assert wf.getnchannels() == 1
        assert wf.getframerate() == 24000
        assert wf.getsampwidth() == 2
        assert wf.getnframes() == 2400


def test_generate_speech_returns_wav_data_uri(monkeypatch):
    captured = {}

    def _create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(read=lambda: b"\x00\x00" * 10)

    speech = SimpleNamespace(create=_create)
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(audio=SimpleNamespace(speech=speech)))

    uri = generation.generate_speech("Once upon a time")

    assert uri.startswith("data:audio/wav;base64,")
    assert base64.b64decode(uri.split(",", 1)[1])[:4] == b"RIFF"
    assert captured["response_format"] == "pcm"
    assert captured["input"] == "Once upon a time"


def test_generate_image_returns_data_uri_or_none(monkeypatch):
    calls = []

    def _generate(**kwargs):
        calls.append(kwargs)
        if kwargs["prompt"] == "empty":
            return SimpleNamespace(data=[])
        return SimpleNamespace(data=[SimpleNamespace(b64_json="iVBORw0", url=None)])

    monkeypatch.setattr(llm_service, "get_client", lambda: _client(images=SimpleNamespace(generate=_generate)))

    assert generation.generate_image("a red apple") == "data:image/png;base64,iVBORw0"
    assert generation.generate_image("empty") is None
    assert "response_format" not in calls[0]

    generation.generate_image("a red apple", model="dall-e-3")
    assert calls[-1]["response_format"] == "b64_json"


class _FakeVideos:
    def __init__(self, statuses):
        self.statuses = list(statuses)
        self.retrieved = 0
        self.created = None

    def create(self, **kwargs):
        self.created = kwargs
        return SimpleNamespace(id="video_123", status="queued", error=None)

    def retrieve(self, video_id):
        self.retrieved += 1
        status = self.statuses.pop(0)
        err = SimpleNamespace(message="content policy") if status == "failed" else None
        return SimpleNamespace(id=video_id, status=status, error=err)

    def download_content(self, video_id, variant="video"):
        return SimpleNamespace(read=lambda: b"\x00\x00\x00\x18ftypmp42")


def test_wait_for_operation_stops_when_done(monkeypatch):
    videos = _FakeVideos(["in_progress", "in_progress", "completed", "completed"])
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(videos=videos))
    sleeps = []
    monkeypatch.setattr(generation.time, "sleep", lambda s: sleeps.append(s))

    op = generation.wait_for_operation(Operation(id="video_123"), poll_interval=5)

    assert op.done is True
    assert videos.retrieved == 3
    assert sleeps == [5, 5, 5]


def test_wait_for_operation_raises_operation_error(monkeypatch):
    videos = _FakeVideos(["failed"])
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(videos=videos))
    monkeypatch.setattr(generation.time, "sleep", lambda s: None)

    with pytest.raises(GenerationError, match="Failed to generate video. Error: content policy"):
        generation.wait_for_operation(Operation(id="video_123"))


def test_wait_for_operation_respects_attempt_ceiling(monkeypatch):
    videos = _FakeVideos(["in_progress"] * 5)
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(videos=videos))
    monkeypatch.setattr(generation.time, "sleep", lambda s: None)

    with pytest.raises(GenerationError):
        generation.wait_for_operation(Operation(id="video_123"), max_attempts=2)
    assert videos.retrieved == 2


def test_start_video_passes_reference_image(monkeypatch):
    videos = _FakeVideos([])
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(videos=videos))
    ref = "data:image/png;base64," + base64.b64encode(b"PNGDATA").decode()

    op = generation.start_video("A fox in a forest", reference=ref)

    assert op.id == "video_123" and op.done is False
    assert videos.created["input_reference"] == ("reference.png", b"PNGDATA", "image/png")
    assert videos.created["seconds"] == str(generation.settings.VIDEO_DURATION_SEC)


def test_start_video_without_id_fails(monkeypatch):
    videos = SimpleNamespace(create=lambda **kw: SimpleNamespace(id=None, status="failed", error=None))
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(videos=videos))

    with pytest.raises(GenerationError, match="Failed to start video generation operation."):
        generation.start_video("x")


def test_download_video(monkeypatch):
    videos = _FakeVideos([])
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(videos=videos))

    uri = generation.download_video(Operation(id="video_123", done=True))
    assert uri.startswith("data:video/mp4;base64,")

    with pytest.raises(GenerationError, match="Failed to find the generated video."):
        generation.download_video(Operation(id="", done=True))


def test_download_video_wraps_transport_errors(monkeypatch):
    def _fail(video_id, variant="video"):
        raise ConnectionError("reset by peer")

    videos = SimpleNamespace(download_content=_fail)
    monkeypatch.setattr(llm_service, "get_client", lambda: _client(videos=videos))

    with pytest.raises(GenerationError, match="Failed to download video: reset by peer"):
        generation.download_video(Operation(id="video_123", done=True))
