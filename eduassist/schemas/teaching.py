from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


# Images travel as data URIs ("data:image/png;base64,...") straight from the browser.


class ExplainerRequest(BaseModel):
    content: str = Field(min_length=1)
    grade: str
    subject: str
    language: str = "English"
    image: Optional[str] = None


class ExplainerOutput(BaseModel):
    teaching_methods: str


class QuizGenerateRequest(BaseModel):
    topic: str = Field(min_length=1)
    grade_level: Optional[str] = None
    number_of_questions: int = Field(default=5, ge=1, le=10)
    language: str = "English"
    image: Optional[str] = None


class QuizQuestion(BaseModel):
    question: str
    options: List[str]
    answer: str


class Quiz(BaseModel):
    questions: List[QuizQuestion]


class QuizDraft(BaseModel):
    quiz: Quiz


class ConceptImagesRequest(BaseModel):
    concept_description: str = Field(min_length=1)
    grade: str
    subject: str
    language: str = "English"


class StepDescription(BaseModel):
    step_description: str


class StepDescriptions(BaseModel):
    steps: List[StepDescription] = Field(default_factory=list)


class ConceptImageStep(BaseModel):
    step_description: str
    image_url: str = ""


class ConceptImagesOutput(BaseModel):
    steps: List[ConceptImageStep]


class LessonPlanRequest(BaseModel):
    topic: str = Field(min_length=1)
    grade: str
    subject: str
    language: str = "English"
    image: Optional[str] = None


class LessonPlanOutput(BaseModel):
    lesson_plan: str
    image_url: str = ""


class WeeklyPlanRequest(BaseModel):
    teacher_name: str
    teacher_email: str
    teacher_availability: str
    subject: str
    class_name: str
    teaching_goals: str
    constraints: str = ""
    language: str = "English"


class DayPlan(BaseModel):
    day: str
    topic: str
    activities: List[str] = Field(default_factory=list)
    assignments: str = ""


class JsonPlan(BaseModel):
    teacher_name: str
    teacher_email: str
    subject: str
    class_name: str
    week: List[DayPlan]


class WeeklyPlanOutput(BaseModel):
    readable_plan: str
    json_plan: JsonPlan


class WorksheetRequest(BaseModel):
    grade: str
    subject: str
    language: str = "English"
    worksheet_count: int = Field(default=1, ge=1, le=5)
    image: str = Field(min_length=1)


class Worksheet(BaseModel):
    title: str
    type: str
    content: str


class WorksheetsOutput(BaseModel):
    worksheets: List[Worksheet] = Field(default_factory=list)
