# ai_client.py

"""
HTTP façade for the AI proxy service.

Covers the flashcard/quiz generation protocol, the authenticated document-AI
function, the chat endpoint and text-to-speech. Unlike the backend façade,
these calls raise ``AIServiceError`` (or a subclass) on failure; pages catch
them at the component boundary.
"""

from __future__ import annotations

from typing import List, Optional

import requests
from pydantic import ValidationError
from rich.console import Console

from core.config import Settings, get_settings
from core.logger import get_logger
from core.model_schemas import FlashcardItem, QuizQuestion
from core.results import CancelToken

logger = get_logger("ai")

DOCUMENT_ACTIONS = ("summarize", "quiz", "flashcards")
TTS_MAX_CHARS = 5000

NON_JSON_MESSAGE = (
    "Server returned non-JSON response. "
    "Please check if the API server is running correctly."
)
NO_FLASHCARDS_MESSAGE = "No flashcards were generated. Please try again with different input."
NO_QUIZ_MESSAGE = "No quiz questions were generated. Please try again with different content."


class AIServiceError(Exception):
    """
    Transport or protocol failure talking to the AI service.
    """
    pass


class NonJSONResponseError(AIServiceError):
    """
    The server answered with something other than JSON (e.g. an HTML error page).
    """
    pass


class EmptyGenerationError(AIServiceError):
    """
    The generation field was missing or an empty list.
    """
    pass


def _is_json(response: requests.Response) -> bool:
    content_type = response.headers.get("content-type") or ""
    return "application/json" in content_type.lower()


class AIClient:
    """
    Calls the generation, chat, document-AI and TTS endpoints.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.http = session or requests.Session()
        self.console = Console(stderr=True) # For previews of raw payloads

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _post(
        self,
        url: str,
        payload: dict,
        headers: Optional[dict] = None,
        cancel: Optional[CancelToken] = None,
    ) -> requests.Response:
        """
        POST JSON with the configured timeout; network errors become AIServiceError.
        """
        if cancel is not None:
            cancel.raise_if_cancelled()

        request_headers = {"Content-Type": "application/json"}
        request_headers.update(headers or {})
        try:
            response = self.http.post(
                url,
                json=payload,
                headers=request_headers,
                timeout=self.settings.request_timeout,
            )
        except requests.Timeout as e:
            logger.error("Request to %s timed out: %s", url, e)
            raise AIServiceError("The AI service took too long to respond. Please try again.") from e
        except requests.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise AIServiceError("Could not reach the AI service. Please try again.") from e

        # cancelled while the request was in flight: drop the response
        if cancel is not None:
            cancel.raise_if_cancelled()
        return response

    def _read_generation(self, response: requests.Response, field: str, empty_message: str) -> list:
        """
        Validate a generation response and return the raw list under ``field``.

        1. Non-JSON content type fails before any parsing is attempted.
        2. Non-2xx surfaces the body's ``error`` or a generic status message.
        3. A missing or empty list is a failure, never a valid empty result.
        """
        if not _is_json(response):
            logger.error("Non-JSON response received: %s", response.text[:200])
            raise NonJSONResponseError(NON_JSON_MESSAGE)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Malformed JSON body (status %s): %s", response.status_code, e)
            raise AIServiceError(f"Server error: {response.status_code}") from e

        if not response.ok:
            message = data.get("error") if isinstance(data, dict) else None
            raise AIServiceError(message or f"Server error: {response.status_code}")

        items = data.get(field) if isinstance(data, dict) else None
        if not isinstance(items, list) or not items:
            raise EmptyGenerationError(empty_message)

        self.console.log(f"[bold yellow]{field} response:[/bold yellow] {len(items)} item(s)")
        return items

    @staticmethod
    def _validate_items(items: list, model, empty_message: str) -> list:
        """
        Keep only well-formed items; an all-invalid list counts as empty.
        """
        valid = []
        for item in items:
            try:
                valid.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning("Dropping malformed %s: %s", model.__name__, e.errors()[:1])
        if not valid:
            raise EmptyGenerationError(empty_message)
        return valid

    # ------------------------------------------------------------------
    # Generation protocol
    # ------------------------------------------------------------------

    def generate_flashcards(
        self,
        topic: Optional[str] = None,
        content: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> List[FlashcardItem]:
        """
        Generate flashcards from exactly one of ``topic`` or ``content``.
        """
        topic = (topic or "").strip() or None
        content = (content or "").strip() or None
        if bool(topic) == bool(content):
            raise ValueError("Please provide either a topic or content to generate flashcards.")

        payload = {"topic": topic} if topic else {"content": content}
        response = self._post(f"{self.settings.api_base}/api/flashcards/generate", payload, cancel=cancel)
        items = self._read_generation(response, "flashcards", NO_FLASHCARDS_MESSAGE)
        return self._validate_items(items, FlashcardItem, NO_FLASHCARDS_MESSAGE)

    def generate_quiz(self, content: str, cancel: Optional[CancelToken] = None) -> List[QuizQuestion]:
        """
        Generate quiz questions from study content.
        """
        if not content or not content.strip():
            raise ValueError("Please provide some content to generate a quiz.")

        response = self._post(f"{self.settings.api_base}/api/quiz/generate", {"content": content}, cancel=cancel)
        items = self._read_generation(response, "quiz", NO_QUIZ_MESSAGE)
        return self._validate_items(items, QuizQuestion, NO_QUIZ_MESSAGE)

    # ------------------------------------------------------------------
    # Document AI, chat, speech
    # ------------------------------------------------------------------

    def call_document_ai(
        self,
        action: str,
        content: str,
        access_token: str,
        cancel: Optional[CancelToken] = None,
    ) -> str:
        """
        Run summarize/quiz/flashcards on stored document text via the
        authenticated edge function. Returns the raw ``result`` text.
        """
        if action not in DOCUMENT_ACTIONS:
            raise ValueError(f"Unknown document action: {action}")
        if not access_token:
            raise AIServiceError("You must be signed in to use document AI.")

        response = self._post(
            self.settings.document_ai_url,
            {"action": action, "content": content},
            headers={"Authorization": f"Bearer {access_token}"},
            cancel=cancel,
        )
        if not response.ok or not _is_json(response):
            logger.error("Document AI '%s' failed with status %s", action, response.status_code)
            raise AIServiceError("Failed to process document")
        return response.json().get("result", "")

    def ask(self, question: str, cancel: Optional[CancelToken] = None) -> str:
        """
        Free-form question to the chat backend.
        """
        response = self._post(f"{self.settings.ai_backend_url}/api/ask", {"question": question}, cancel=cancel)
        if not response.ok or not _is_json(response):
            logger.error("Chat request failed with status %s", response.status_code)
            raise AIServiceError("Failed to get AI response")
        return response.json().get("answer", "")

    def synthesize_speech(self, text: str, cancel: Optional[CancelToken] = None) -> bytes:
        """
        Convert a script to MP3 audio through the TTS endpoint.
        """
        if not text or not text.strip():
            raise ValueError("Text is required for text-to-speech conversion")

        response = self._post(f"{self.settings.api_base}/api/tts", {"text": text[:TTS_MAX_CHARS]}, cancel=cancel)
        if not response.ok:
            message = response.json().get("error") if _is_json(response) else None
            raise AIServiceError(message or f"Server error: {response.status_code}")
        if _is_json(response):
            raise AIServiceError("Text-to-speech did not return audio")
        return response.content
