from datetime import date, datetime, time, timedelta, timezone

import pytest
from pydantic import ValidationError

from core.config import DEFAULT_AI_BACKEND_URL, DEFAULT_API_BASE, Settings
from core.results import CancelToken, OperationCancelled, Result, error_message


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("STUDYHUB_REQUEST_TIMEOUT", "12")
    monkeypatch.delenv("STUDYHUB_API_BASE", raising=False)
    monkeypatch.delenv("STUDYHUB_AI_BACKEND_URL", raising=False)

    settings = Settings.from_env()

    assert settings.api_base == DEFAULT_API_BASE
    assert settings.ai_backend_url == DEFAULT_AI_BACKEND_URL
    assert settings.request_timeout == 12
    assert settings.document_ai_url == "https://project.supabase.co/functions/v1/document-ai"


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(request_timeout=0)


def test_timezone_setting(monkeypatch):
    monkeypatch.setenv("STUDYHUB_TIMEZONE", "Europe/Berlin")
    settings = Settings.from_env()

    due = datetime.combine(date(2026, 3, 10), time(23, 59), tzinfo=settings.tzinfo).astimezone(timezone.utc)

    assert settings.timezone == "Europe/Berlin"
    assert due == datetime(2026, 3, 10, 22, 59, tzinfo=timezone.utc)


def test_timezone_defaults_to_utc(monkeypatch):
    monkeypatch.delenv("STUDYHUB_TIMEZONE", raising=False)
    settings = Settings.from_env()
    assert datetime(2026, 7, 1, 12, tzinfo=settings.tzinfo).utcoffset() == timedelta(0)


def test_unknown_timezone_is_rejected():
    with pytest.raises(ValidationError):
        Settings(timezone="Mars/Olympus_Mons")


def test_result_unpacks_like_a_pair():
    data, error = Result.success([1])
    assert (data, error) == ([1], None)
    assert not Result.failure(ValueError("bad")).ok


def test_error_message():
    class APIError(Exception):
        message = "duplicate key"

    assert error_message(APIError("ignored")) == "duplicate key"
    assert error_message({"message": "from dict"}) == "from dict"
    assert error_message("") == "An error occurred"
    assert error_message(None) == "An error occurred"


def test_cancel_token():
    token = CancelToken()
    token.raise_if_cancelled()
    token.cancel()
    assert token.cancelled
    with pytest.raises(OperationCancelled):
        token.raise_if_cancelled()
