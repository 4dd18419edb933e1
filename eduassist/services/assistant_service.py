"""Gmail / Calendar assistants that forward requests to n8n webhooks."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any, Dict, Tuple

from eduassist.core.config import settings
from eduassist.schemas.assistants import CalendarEventInput, GmailWebhookInput
from eduassist.services.generation import Tool, generate


logger = logging.getLogger(__name__)


class WebhookError(RuntimeError):
    pass


def _post_json(url: str, payload: Dict[str, Any], *, timeout_sec: float) -> Tuple[int, str]:
    data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    req = urllib.request.Request(
        url,
        data=data,
        method="POST",
        headers={"Content-Type": "application/json", "User-Agent": "eduassist/1.0"},
    )
    try:
        with urllib.request.urlopen(req, timeout=float(timeout_sec)) as resp:
            return int(resp.status), resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as e:
        return int(e.code), e.read().decode("utf-8", errors="replace")


def post_webhook_text(url: str, text: str, *, default_message: str = "") -> Dict[str, Any]:
    """POST ``{"text": text}`` to a webhook.

    Returns ``{"success": bool, "message": str}``; failures are reported in the
    result, never raised.
    """
    try:
        status, body = _post_json(url, {"text": text}, timeout_sec=settings.WEBHOOK_TIMEOUT_SEC)
        if not 200 <= status < 300:
            raise WebhookError(f"Webhook failed with status {status}: {body}")
    except (WebhookError, OSError, ValueError) as e:
        logger.warning("webhook %s failed: %s", url, e)
        return {"success": False, "message": str(e) or "An unknown error occurred."}

    message = ""
    try:
        parsed = json.loads(body) if body.strip() else None
    except ValueError:
        parsed = None
    if isinstance(parsed, dict) and isinstance(parsed.get("message"), str):
        message = parsed["message"]
    logger.info("webhook %s accepted the request", url)
    return {"success": True, "message": message or default_message}


def send_text_to_gmail_webhook(args: GmailWebhookInput) -> Dict[str, Any]:
    res = post_webhook_text(
        settings.GMAIL_WEBHOOK_URL,
        args.prompt_text,
        default_message="Your request was successfully sent to the Gmail workflow.",
    )
    if not res["success"]:
        return {"success": False, "message": f"Failed to send request to Gmail workflow: {res['message']}"}
    return res


def add_calendar_event_from_text(args: CalendarEventInput) -> Dict[str, Any]:
    res = post_webhook_text(settings.CALENDAR_WEBHOOK_URL, args.event_text)
    if not res["success"]:
        return {"success": False, "message": f"Failed to send event to calendar: {res['message']}"}
    # The calendar workflow's reply text is not shown; confirm with the event itself.
    return {"success": True, "message": f'Event "{args.event_text}" was successfully sent to the calendar.'}


GMAIL_TOOL = Tool(
    name="sendTextToGmailWebhook",
    description="Takes a text prompt and sends it to a service to be processed by a Gmail workflow.",
    input_model=GmailWebhookInput,
    fn=send_text_to_gmail_webhook,
)

CALENDAR_TOOL = Tool(
    name="addCalendarEventFromText",
    description="Takes a text description of a calendar event and sends it to a service to be created.",
    input_model=CalendarEventInput,
    fn=add_calendar_event_from_text,
)


def _system(kind: str, tool_name: str) -> str:
    return (
        f"You are a helpful {kind} assistant.\n"
        f"Understand the user's request and use the '{tool_name}' tool to send it on. "
        "You must call the tool; do not just say you've sent it.\n"
        "If the tool returns a success message, report that back to the user. "
        "If it returns a failure message, report the error to the user."
    )


def _run(prompt: str, tool: Tool, kind: str) -> Dict[str, Any]:
    res = generate(prompt, system=_system(kind, tool.name), tools=[tool])
    if res.tool_calls:
        first = res.tool_calls[0].output or {}
        return {"response": str(first.get("message") or "")}
    return {"response": res.text}


def run_gmail_assistant(*, prompt: str) -> Dict[str, Any]:
    return _run(prompt, GMAIL_TOOL, "Gmail")


def run_calendar_assistant(*, prompt: str) -> Dict[str, Any]:
    return _run(prompt, CALENDAR_TOOL, "calendar")
