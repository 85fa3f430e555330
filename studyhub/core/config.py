# config.py

"""
Runtime configuration for StudyHub.

Values come from the process environment (optionally populated from a
.env file) with hardcoded fallbacks for local development.
"""

from __future__ import annotations

import os
from functools import lru_cache

from dateutil import tz
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from a .env file, including SUPABASE_URL
load_dotenv()

DEFAULT_API_BASE = "http://localhost:3000"
DEFAULT_AI_BACKEND_URL = "https://visualstudy.onrender.com"
DEFAULT_CALENDAR_HOST = "api.studyhub.app"
DEFAULT_TIMEZONE = "UTC"


class Settings(BaseModel):
    """
    Connection settings for the backend-as-a-service and the AI proxy.
    """
    supabase_url: str = Field(default="", description="Project URL of the Supabase backend.")
    supabase_anon_key: str = Field(default="", description="Public anon key for the Supabase backend.")
    api_base: str = Field(default=DEFAULT_API_BASE, description="Base URL of the generation API.")
    ai_backend_url: str = Field(default=DEFAULT_AI_BACKEND_URL, description="Base URL of the chat backend.")
    calendar_host: str = Field(default=DEFAULT_CALENDAR_HOST, description="Host used in webcal subscription URLs.")
    request_timeout: float = Field(default=30.0, gt=0, description="Seconds before an HTTP call is abandoned.")
    documents_bucket: str = Field(default="documents")
    timezone: str = Field(default=DEFAULT_TIMEZONE, description="IANA zone that due dates typed into forms are read in.")

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, value: str) -> str:
        if tz.gettz(value) is None:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @property
    def tzinfo(self):
        return tz.gettz(self.timezone)

    @property
    def document_ai_url(self) -> str:
        """
        Edge function that runs summarize/quiz/flashcards on stored content.
        """
        return f"{self.supabase_url.rstrip('/')}/functions/v1/document-ai"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            supabase_url=os.getenv("SUPABASE_URL", ""),
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY", ""),
            api_base=os.getenv("STUDYHUB_API_BASE") or DEFAULT_API_BASE,
            ai_backend_url=os.getenv("STUDYHUB_AI_BACKEND_URL") or DEFAULT_AI_BACKEND_URL,
            calendar_host=os.getenv("STUDYHUB_CALENDAR_HOST") or DEFAULT_CALENDAR_HOST,
            request_timeout=float(os.getenv("STUDYHUB_REQUEST_TIMEOUT", "30")),
            timezone=os.getenv("STUDYHUB_TIMEZONE") or DEFAULT_TIMEZONE,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Process-wide settings, read once.
    """
    return Settings.from_env()
