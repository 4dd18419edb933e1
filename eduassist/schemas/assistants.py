from __future__ import annotations

from pydantic import BaseModel, Field


class AssistantRequest(BaseModel):
    prompt: str = Field(min_length=1)


class AssistantResponse(BaseModel):
    response: str


class GmailWebhookInput(BaseModel):
    prompt_text: str = Field(description="The user's full request, forwarded verbatim.")


class CalendarEventInput(BaseModel):
    event_text: str = Field(description="Natural-language description of the event, e.g. 'Team meeting tomorrow at 10am'.")
