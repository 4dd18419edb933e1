from fastapi import APIRouter, Request


router = APIRouter(tags=["tools"])


TOOLS = [
    {"id": "lesson-creator", "title": "AI Lesson Creator", "description": "Teaching methods, a quiz and visuals synthesized into one lesson plan.", "endpoint": "/api/lesson-plans"},
    {"id": "exam-grader", "title": "AI Exam Grader", "description": "Grade a handwritten exam paper against an answer key.", "endpoint": "/api/exams/grade"},
    {"id": "explainer", "title": "Teaching Method Explainer", "description": "Simplified teaching methods for lesson content.", "endpoint": "/api/explainer"},
    {"id": "planner", "title": "Weekly Teaching Planner", "description": "A Monday to Friday plan from availability and goals.", "endpoint": "/api/weekly-plans"},
    {"id": "image-generator", "title": "Concept Image Generator", "description": "A concept explained in three illustrated steps.", "endpoint": "/api/images/concept"},
    {"id": "video-generator", "title": "Concept Video Generator", "description": "Short explainer video scenes for a concept.", "endpoint": "/api/concept-video/analyze"},
    {"id": "assessor", "title": "Student Assessor", "description": "Quizzes, answer evaluation and student performance reports.", "endpoint": "/api/quiz/generate"},
    {"id": "storybook-generator", "title": "Storybook Generator", "description": "An illustrated 5-7 page educational story.", "endpoint": "/api/storybooks"},
    {"id": "animated-storybook", "title": "Animated Storybook", "description": "Turn a story into narrated, animated scenes.", "endpoint": "/api/animated-storybook/analyze"},
    {"id": "worksheet-generator", "title": "Worksheet Generator", "description": "Printable worksheets from a textbook page or photo.", "endpoint": "/api/worksheets"},
    {"id": "academic-coordinator", "title": "Academic Research Coordinator", "description": "Seminal topic analysis, recent papers and future directions.", "endpoint": "/api/research/coordinator"},
    {"id": "gmail-assistant", "title": "Gmail Assistant", "description": "Send a request to the Gmail workflow.", "endpoint": "/api/assistants/gmail"},
    {"id": "calendar-assistant", "title": "Calendar Assistant", "description": "Create calendar events from plain text.", "endpoint": "/api/assistants/calendar"},
]


@router.get("/tools")
def list_tools(request: Request):
    return {"request_id": request.state.request_id, "data": {"tools": TOOLS}, "error": None}
