from types import SimpleNamespace

import pytest

from eduassist.services import llm_service
from eduassist.services.llm_service import looks_like_placeholder_key, parse_json_object, strip_reasoning


def testparse_json_object_handles_fences_and_think_blocks():
    raw = "<think>let me plan the quiz</think>\n```json\n{\"quiz\": {\"questions\": []}}\n```"
    assert parse_json_object(raw) == {"quiz": {"questions": []}}


def testparse_json_object_fixes_trailing_commas():
    assert parse_json_object('{"steps": [{"step_description": "a"},],}') == {"steps": [{"step_description": "a"}]}


def testparse_json_object_picks_object_out_of_prose():
    raw = 'Sure! Here is the plan: {"title": "Water cycle", "scenes": []} Hope it helps.'
    assert parse_json_object(raw)["title"] == "Water cycle"


def testparse_json_object_accepts_python_literals():
    assert parse_json_object("{'ok': True, 'note': None}") == {"ok": True, "note": None}


def testparse_json_object_rejects_empty_output():
    with pytest.raises(ValueError):
        parse_json_object("   ")


def test_strip_reasoning_drops_analysis_block():
    assert strip_reasoning("<analysis>x</analysis>Hello") == "Hello"


@pytest.mark.parametrize(
    "key,expected",
    [
        ("your_api_key", True),
        ("sk-xxxxxxxxxxxx", True),
        ("Your OpenAI key here", True),
        ("sk-proj-9f8a7b6c5d4e3f2a1b0c", False),
        (None, False),
    ],
)
def test_placeholder_key_detection(key, expected):
    assert looks_like_placeholder_key(key) is expected


def test_llm_available_false_without_configuration(monkeypatch):
    monkeypatch.setattr(llm_service.settings, "OPENAI_API_KEY", None)
    monkeypatch.setattr(llm_service.settings, "OPENAI_BASE_URL", None)
    monkeypatch.setattr(llm_service.settings, "AZURE_OPENAI_ENDPOINT", None)
    monkeypatch.setattr(llm_service.settings, "AZURE_OPENAI_API_KEY", None)
    assert llm_service.llm_available() is False


def test_llm_available_rejects_placeholder_cloud_key(monkeypatch):
    monkeypatch.setattr(llm_service.settings, "OPENAI_API_KEY", "your_api_key")
    monkeypatch.setattr(llm_service.settings, "OPENAI_BASE_URL", None)
    monkeypatch.setattr(llm_service.settings, "AZURE_OPENAI_ENDPOINT", None)
    monkeypatch.setattr(llm_service.settings, "AZURE_OPENAI_API_KEY", None)
    assert llm_service.llm_available() is False


def test_llm_available_with_local_base_url(monkeypatch):
    monkeypatch.setattr(llm_service.settings, "OPENAI_API_KEY", None)
    monkeypatch.setattr(llm_service.settings, "OPENAI_BASE_URL", "http://localhost:11434/v1")
    monkeypatch.setattr(llm_service.settings, "AZURE_OPENAI_ENDPOINT", None)
    monkeypatch.setattr(llm_service.settings, "AZURE_OPENAI_API_KEY", None)
    assert llm_service.llm_available() is True


def test_ping_model_reports_failures_instead_of_raising(monkeypatch):
    def _boom():
        raise RuntimeError("LLM is not configured.")

    monkeypatch.setattr(llm_service, "get_client", _boom)
    out = llm_service.ping_model("gpt-4o-mini", timeout_sec=1)
    assert out["ok"] is False
    assert "LLM is not configured" in out["error"]


def test_parse_json_object_keeps_empty_object():
    assert parse_json_object("{}") == {}


def test_completion_text_falls_back_to_reasoning_content():
    msg = SimpleNamespace(content="", reasoning_content='{"ok": true}')
    res = SimpleNamespace(choices=[SimpleNamespace(message=msg)])
    assert llm_service.completion_text(res) == '{"ok": true}'


def test_completion_text_joins_content_parts():
    msg = SimpleNamespace(content=[{"type": "text", "text": "Hello"}, {"type": "text", "text": "world"}])
    res = SimpleNamespace(choices=[SimpleNamespace(message=msg)])
    assert llm_service.completion_text(res) == "Hello\nworld"


class _FakeCompletions:
    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        msg = SimpleNamespace(content=self.answers.pop(0))
        return SimpleNamespace(model=kwargs["model"], choices=[SimpleNamespace(message=msg, finish_reason="stop")])


def _chat_only_client(completions):
    # no .responses attribute: goes straight to chat.completions
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_chat_json_retries_once_with_stricter_guard(monkeypatch):
    completions = _FakeCompletions(["Sorry, I cannot do JSON", '{"title": "Plants"}'])
    monkeypatch.setattr(llm_service, "get_client", lambda: _chat_only_client(completions))
    monkeypatch.setattr(llm_service.settings, "OPENAI_BASE_URL", None)
    monkeypatch.setattr(llm_service.settings, "OPENAI_EXTRA_BODY_JSON", None)

    out = llm_service.chat_json(messages=[{"role": "user", "content": "Title?"}], model="gpt-4o-mini")

    assert out == {"title": "Plants"}
    assert len(completions.calls) == 2
    assert completions.calls[0]["response_format"] == {"type": "json_object"}
    assert completions.calls[1]["temperature"] == 0.0
    assert completions.calls[1]["messages"][0]["content"].startswith("CRITICAL")


def test_chat_json_raises_value_error_after_retry(monkeypatch):
    completions = _FakeCompletions(["nope", "still nope"])
    monkeypatch.setattr(llm_service, "get_client", lambda: _chat_only_client(completions))
    monkeypatch.setattr(llm_service.settings, "OPENAI_BASE_URL", None)
    monkeypatch.setattr(llm_service.settings, "OPENAI_EXTRA_BODY_JSON", None)

    with pytest.raises(ValueError):
        llm_service.chat_json(messages=[{"role": "user", "content": "x"}])


def test_ping_model_reports_latency_and_mismatch(monkeypatch):
    completions = _FakeCompletions(['{"ok": true}'])
    monkeypatch.setattr(llm_service, "get_client", lambda: _chat_only_client(completions))
    monkeypatch.setattr(llm_service.settings, "OPENAI_BASE_URL", None)
    monkeypatch.setattr(llm_service.settings, "OPENAI_EXTRA_BODY_JSON", None)

    out = llm_service.ping_model("gpt-4o-mini", timeout_sec=2)

    assert out["ok"] is True
    assert out["json_parse_ok"] is True
    assert out["ok_value"] is True
    assert out["model_mismatch"] is False
    assert completions.calls[0]["timeout"] == 2.0
