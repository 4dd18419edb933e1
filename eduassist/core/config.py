import json

from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Resolve the eduassist project root regardless of current working directory
BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"

# n8n workflow that fans the text out to Gmail / Google Calendar.
DEFAULT_N8N_WEBHOOK_URL = "https://n8n-aptask-com-u23220.vm.elestio.app/webhook/4009c9dc-dddd-47d3-b4a4-23de4bd518b3"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "EduAssist"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    # One origin or several: a JSON list or comma separated.
    # Example: "http://localhost:3000,https://example.com"
    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:3000", "http://localhost:9002"]

    # Local SQLite file by default; set a postgresql+psycopg2:// URL in production.
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'eduassist.db'}"
    # Create missing tables on startup (alembic is the source of truth in production).
    DB_AUTO_CREATE: bool = True

    # ===== Async Queue (RQ/Redis) =====
    # Video generation takes minutes; with the queue enabled those flows can run as jobs.
    ASYNC_QUEUE_ENABLED: bool = False
    REDIS_URL: str = "redis://localhost:6379/0"
    RQ_DEFAULT_TIMEOUT_SEC: int = 1800

    # ===== LLM settings =====
    # OPENAI_API_KEY:
    # - OpenAI API: set the real key.
    # - Local OpenAI-compatible server (Ollama/LM Studio): may stay empty, set OPENAI_BASE_URL only.
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None

    # JSON object strings, e.g. OPENAI_EXTRA_HEADERS_JSON={"X-Foo":"bar"}
    OPENAI_EXTRA_HEADERS_JSON: str | None = None
    OPENAI_EXTRA_QUERY_JSON: str | None = None
    OPENAI_EXTRA_BODY_JSON: str | None = None

    # ===== Azure OpenAI (optional) =====
    # Set AZURE_OPENAI_ENDPOINT + AZURE_OPENAI_API_KEY and use deployment names as model ids.
    AZURE_OPENAI_ENDPOINT: str | None = None
    AZURE_OPENAI_API_KEY: str | None = None
    AZURE_OPENAI_API_VERSION: str = "2024-10-21"

    # Text / vision model used by every prompt flow.
    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    # Model for tool-calling agents (research, assistants). Empty -> OPENAI_CHAT_MODEL.
    OPENAI_TOOL_MODEL: str | None = None
    # Upper bound on model <-> tool round trips inside one generation call.
    LLM_MAX_TOOL_ROUNDS: int = 5

    # ===== Media generation =====
    OPENAI_IMAGE_MODEL: str = "gpt-image-1"
    OPENAI_IMAGE_SIZE: str = "1024x1024"
    OPENAI_TTS_MODEL: str = "gpt-4o-mini-tts"
    OPENAI_TTS_VOICE: str = "alloy"
    OPENAI_VIDEO_MODEL: str = "sora-2"
    VIDEO_DURATION_SEC: int = 8
    # 16:9
    VIDEO_SIZE: str = "1280x720"
    VIDEO_POLL_INTERVAL_SEC: float = 5.0
    # None -> keep polling until the operation reports done.
    VIDEO_POLL_MAX_ATTEMPTS: int | None = None

    # ===== OpenAI SDK / Gateway timeouts =====
    OPENAI_HTTP_TIMEOUT_SEC: int = 120
    OPENAI_MAX_RETRIES: int = 1

    # LLM status (health page) should stay fast; we test with this shorter timeout.
    OPENAI_STATUS_TEST_TIMEOUT_SEC: int = 12
    OPENAI_STATUS_TEST_MAX_TOKENS: int = 64

    # ===== Webhook assistants (n8n) =====
    GMAIL_WEBHOOK_URL: str = DEFAULT_N8N_WEBHOOK_URL
    CALENDAR_WEBHOOK_URL: str = DEFAULT_N8N_WEBHOOK_URL
    WEBHOOK_TIMEOUT_SEC: int = 30

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if v is None or v == "":
            return []

        if isinstance(v, list):
            return v

        # JSON list first, comma separated as fallback
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                try:
                    return json.loads(s)
                except ValueError:
                    pass
            return [item.strip() for item in s.split(",") if item.strip()]

        return v

    @property
    def tool_model(self) -> str:
        return (self.OPENAI_TOOL_MODEL or "").strip() or self.OPENAI_CHAT_MODEL


settings = Settings()
