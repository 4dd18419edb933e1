from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class StorybookRequest(BaseModel):
    topic: str = Field(min_length=1)
    grade: str
    language: str = "English"


class StoryPageDraft(BaseModel):
    text: str
    illustration_prompt: str


class StoryDraft(BaseModel):
    title: str
    pages: List[StoryPageDraft] = Field(default_factory=list)


class StoryPage(BaseModel):
    text: str
    image_url: str = ""


class StorybookOutput(BaseModel):
    title: str
    pages: List[StoryPage]


# ---- animated storybook ----


class StoryAnalysisRequest(BaseModel):
    story: str = Field(min_length=20)
    grade: str


class StoryScene(BaseModel):
    scene_description: str
    characters: List[str] = Field(default_factory=list)
    setting: str
    mood: str
    narration_text: str
    illustration_prompt: str


class KeyConcept(BaseModel):
    concept: str
    explanation: str
    visual_prompt: str


class StoryAnalysis(BaseModel):
    title: str
    main_character: str
    character_sheet_prompt: str
    scenes: List[StoryScene] = Field(min_length=1)
    key_concepts: List[KeyConcept] = Field(default_factory=list)


class CharacterSheetRequest(BaseModel):
    prompt: str = Field(min_length=1)


class CharacterSheetOutput(BaseModel):
    character_sheet_data_uri: str


class ConceptImageRequest(BaseModel):
    prompt: str = Field(min_length=1)


class ConceptImageOutput(BaseModel):
    image_url: str


class SceneRequest(BaseModel):
    narration_text: str = Field(min_length=1)
    illustration_prompt: str = Field(min_length=1)
    character_sheet_data_uri: Optional[str] = None


class SceneOutput(BaseModel):
    narration_audio: str
    video_url: str


# ---- concept video ----


class ConceptVideoRequest(BaseModel):
    concept: str = Field(min_length=10)
    grade: str
    subject: str
    language: str = "English"


class VideoScene(BaseModel):
    scene_title: str
    video_prompt: str
    explanation: str


class ConceptVideoPlan(BaseModel):
    title: str
    scenes: List[VideoScene] = Field(min_length=1)


class ConceptVideoSceneRequest(BaseModel):
    video_prompt: str = Field(min_length=1)


class ConceptVideoSceneOutput(BaseModel):
    video_url: str
