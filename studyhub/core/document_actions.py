# document_actions.py

"""
AI actions scoped to a single stored document.

Summaries, quizzes and flashcards need the document's extracted text. When
that text is missing the actions are disabled up front, before any request
goes out.
"""

from __future__ import annotations

from typing import Optional

from core.ai_client import DOCUMENT_ACTIONS, AIClient, AIServiceError
from core.backend import BackendFacade
from core.model_schemas import Document
from core.results import CancelToken

NOT_PROCESSED_MESSAGE = (
    "Document processing not complete. "
    "AI features will be available once text extraction finishes."
)

ACTION_LABELS = {
    "summarize": "Summarize",
    "quiz": "Generate quiz",
    "flashcards": "Generate flashcards",
}


class DocumentNotProcessedError(Exception):
    """
    Raised when an AI action is requested for a document without text content.
    """
    pass


def ai_actions_enabled(document: Document) -> bool:
    return document.is_processed


def disabled_reason(document: Document) -> Optional[str]:
    """
    Message explaining why the action buttons are disabled, or None.
    """
    return None if document.is_processed else NOT_PROCESSED_MESSAGE


def run_document_action(
    document: Document,
    action: str,
    ai: AIClient,
    backend: BackendFacade,
    cancel: Optional[CancelToken] = None,
) -> str:
    """
    Check the precondition, fetch the session token and call document AI.
    """
    if action not in DOCUMENT_ACTIONS:
        raise ValueError(f"Unknown document action: {action}")
    if not document.is_processed:
        raise DocumentNotProcessedError(NOT_PROCESSED_MESSAGE)

    token, error = backend.get_session_token()
    if error or not token:
        raise AIServiceError(error or "You must be signed in to use document AI.")
    return ai.call_document_ai(action, document.content, token, cancel=cancel)
