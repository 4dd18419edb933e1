from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from eduassist.api.routes import assessment as assessment_routes
from eduassist.api.routes import exports as export_routes
from eduassist.api.routes import media as media_routes
from eduassist.api.routes import research as research_routes
from eduassist.api.routes import teaching as teaching_routes
from eduassist.api.routes.tools import TOOLS
from eduassist.core.config import settings
from eduassist.db.session import get_db
from eduassist.main import app
from eduassist.services import student_service
from eduassist.services.exporters import export_markdown_pdf
from eduassist.services.generation import GenerationError
from eduassist.services.student_service import StoreError
from eduassist.tasks import media_tasks


class _FakeDB:
    pass


@pytest.fixture()
def client():
    app.dependency_overrides[get_db] = lambda: _FakeDB()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client, monkeypatch):
    monkeypatch.setattr(settings, "ASYNC_QUEUE_ENABLED", False)

    res = client.get("/api/health")

    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.json()["async_queue"] == {"enabled": False}


def test_tools_catalogue(client):
    res = client.get("/api/tools", headers={"X-Request-ID": "rid-tools"})

    body = res.json()
    assert res.headers["X-Request-ID"] == "rid-tools"
    assert body["request_id"] == "rid-tools"
    assert body["error"] is None
    assert [t["id"] for t in body["data"]["tools"]] == [t["id"] for t in TOOLS]
    assert len(TOOLS) == 13


def test_explainer_envelope(client, monkeypatch):
    monkeypatch.setattr(teaching_routes, "explain_teaching_methods", lambda **kw: {"teaching_methods": f"for {kw['subject']}"})

    res = client.post("/api/explainer", json={"content": "Fractions", "grade": "4", "subject": "Math"})

    assert res.status_code == 200
    body = res.json()
    assert body["data"] == {"teaching_methods": "for Math"}
    assert body["error"] is None
    assert body["request_id"] == res.headers["X-Request-ID"]


def test_validation_error_envelope(client):
    res = client.post("/api/quiz/generate", json={"topic": "Plants", "number_of_questions": 11})

    assert res.status_code == 422
    body = res.json()
    assert body["data"] is None
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert res.headers["X-Request-ID"] == body["request_id"]


def test_short_story_rejected(client):
    res = client.post("/api/animated-storybook/analyze", json={"story": "Too short", "grade": "2"})

    assert res.status_code == 422


def test_generation_failure_maps_to_502(client, monkeypatch):
    def _fail(**kwargs):
        raise GenerationError("The model returned no output.")

    monkeypatch.setattr(teaching_routes, "generate_weekly_plan", _fail)

    res = client.post(
        "/api/weekly-plans",
        json={
            "teacher_name": "Ms. Rao",
            "teacher_email": "rao@school.test",
            "teacher_availability": "Mornings",
            "subject": "Science",
            "class_name": "7B",
            "teaching_goals": "Photosynthesis",
        },
        headers={"X-Request-ID": "rid-502"},
    )

    assert res.status_code == 502
    assert res.json() == {
        "request_id": "rid-502",
        "data": None,
        "error": {"code": "GENERATION_FAILED", "message": "The model returned no output."},
    }
    assert res.headers["X-Request-ID"] == "rid-502"


def test_store_failure_maps_to_503(client, monkeypatch):
    def _fail(db):
        raise StoreError("Could not retrieve students from database.")

    monkeypatch.setattr(student_service, "list_students", _fail)

    res = client.get("/api/students")

    assert res.status_code == 503
    assert res.json()["error"] == {"code": "STORE_UNAVAILABLE", "message": "Could not retrieve students from database."}


def test_students_list_and_create(client, monkeypatch):
    created = {}

    def _add(db, **kwargs):
        created.update(kwargs)
        return 7

    monkeypatch.setattr(student_service, "add_student", _add)
    listed = [{"id": 7, "name": "Asha", "class_name": "5B", "avatar": "https://placehold.co/100x100.png"}]
    monkeypatch.setattr(student_service, "list_students", lambda db: listed)

    res = client.post("/api/students", json={"name": "Asha", "class_name": "5B"})
    assert res.status_code == 200
    assert res.json()["data"] == {"id": 7}
    assert created["accommodations"] == []

    res = client.get("/api/students")
    students = res.json()["data"]["students"]
    assert [s["name"] for s in students] == ["Asha"]
    assert students[0]["status"] == "Needs Attention"
    assert students[0]["quizzes_completed"] == 0


def test_quiz_result_for_unknown_student_is_404(client, monkeypatch):
    monkeypatch.setattr(student_service, "get_student", lambda db, sid: None)

    res = client.post("/api/students/99/quiz-results", json={"quiz_name": "Plants", "quiz_data": {"questions": []}})

    assert res.status_code == 404
    assert res.json()["error"] == {"code": "HTTP_ERROR", "message": "Student not found"}


def test_quiz_result_saved(client, monkeypatch):
    saved = {}

    def _save(db, **kwargs):
        saved.update(kwargs)
        return 3

    monkeypatch.setattr(student_service, "get_student", lambda db, sid: SimpleNamespace(id=sid))
    monkeypatch.setattr(student_service, "save_quiz_result", _save)

    res = client.post("/api/students/5/quiz-results", json={"quiz_name": "Plants", "quiz_data": {"score_percent": 80}})

    assert res.json()["data"] == {"id": 3}
    assert saved == {"student_id": 5, "quiz_name": "Plants", "quiz_data": {"score_percent": 80}}


def test_exam_grade_saves_result_when_asked(client, monkeypatch):
    stored = {}

    def _save(db, result):
        stored.update(result)
        return 11

    monkeypatch.setattr(
        assessment_routes,
        "grade_exam_paper",
        lambda **kw: {"student_name": "Ravi", "score": 8.0, "total_marks": 10.0, "feedback": "Good"},
    )
    monkeypatch.setattr(student_service, "save_grading_result", _save)
    payload = {
        "exam_topic": "Capitals",
        "class_name": "6A",
        "subject": "Geography",
        "total_marks": 10,
        "answer_key": "1. Paris",
        "exam_image": "data:image/jpeg;base64,EXAM",
    }

    res = client.post("/api/exams/grade", json=payload)
    assert res.json()["data"]["grading_result_id"] is None
    assert stored == {}

    res = client.post("/api/exams/grade", json={**payload, "save_result": True})
    assert res.json()["data"]["grading_result_id"] == 11
    assert stored["class_name"] == "6A"
    assert stored["exam_topic"] == "Capitals"
    assert stored["score"] == 8.0


def test_scene_background_runs_inline_when_queue_disabled(client, monkeypatch):
    monkeypatch.setattr(settings, "ASYNC_QUEUE_ENABLED", False)

    async def _fake_scene(**kwargs):
        return {"narration_audio": "a", "video_url": f"v:{kwargs['illustration_prompt']}"}

    monkeypatch.setattr(media_tasks, "generate_scene", _fake_scene)

    res = client.post(
        "/api/animated-storybook/scene?background=true",
        json={"narration_text": "Mia smiled.", "illustration_prompt": "Mia under a tree"},
    )

    data = res.json()["data"]
    assert data["job_id"] is None
    assert data["sync_executed"] is True
    assert data["result"] == {"narration_audio": "a", "video_url": "v:Mia under a tree"}


def test_concept_video_scene_inline(client, monkeypatch):
    monkeypatch.setattr(media_routes, "generate_concept_video_scene", lambda **kw: {"video_url": "data:video/mp4;base64,V"})

    res = client.post("/api/concept-video/scene", json={"video_prompt": "apple falls"})

    assert res.json()["data"] == {"video_url": "data:video/mp4;base64,V"}


def test_research_agent_route(client, monkeypatch):
    monkeypatch.setattr(research_routes, "run_academic_research_agent", lambda **kw: {"report": "r", "references": []})

    res = client.post("/api/research/agent", json={"topic": "Photosynthesis"})

    assert res.json()["data"] == {"report": "r", "references": []}


def test_job_status_requires_queue(client, monkeypatch):
    monkeypatch.setattr(settings, "ASYNC_QUEUE_ENABLED", False)

    res = client.get("/api/jobs/status/abc")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "HTTP_ERROR"


def test_export_pdf_route(client, monkeypatch):
    written = []

    def _export(title, content):
        path = export_markdown_pdf(title, content)
        written.append(path)
        return path

    monkeypatch.setattr(export_routes, "export_markdown_pdf", _export)

    res = client.post("/api/exports/pdf", json={"title": "Lesson: Plants!", "content": "# Plants\n- roots"})

    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert res.content[:4] == b"%PDF"
    assert 'filename="Lesson_Plants.pdf"' in res.headers["content-disposition"]
    assert len(written) == 1
    assert not written[0].exists()
