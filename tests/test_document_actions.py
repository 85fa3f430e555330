from unittest.mock import MagicMock

import pytest

from core.ai_client import AIClient, AIServiceError
from core.backend import BackendFacade
from core.document_actions import (
    NOT_PROCESSED_MESSAGE, DocumentNotProcessedError, ai_actions_enabled, disabled_reason, run_document_action
)
from core.model_schemas import Document
from core.results import Result


def make_document(content):
    return Document(id="d1", course_id="c1", name="a.pdf", file_path="u/c1/a.pdf", content=content)


@pytest.fixture
def ai():
    client = MagicMock(spec=AIClient)
    client.call_document_ai.return_value = "A summary"
    return client


@pytest.fixture
def doc_backend():
    backend = MagicMock(spec=BackendFacade)
    backend.get_session_token.return_value = Result.success("jwt")
    return backend


@pytest.mark.parametrize("content", [None, "", "   \n"])
def test_unprocessed_document_makes_no_calls(ai, doc_backend, content):
    document = make_document(content)

    assert not ai_actions_enabled(document)
    assert disabled_reason(document) == NOT_PROCESSED_MESSAGE
    with pytest.raises(DocumentNotProcessedError):
        run_document_action(document, "summarize", ai, doc_backend)

    doc_backend.get_session_token.assert_not_called()
    ai.call_document_ai.assert_not_called()


def test_processed_document_runs_action(ai, doc_backend):
    document = make_document("Cells are the basic unit of life.")

    assert disabled_reason(document) is None
    assert run_document_action(document, "summarize", ai, doc_backend) == "A summary"
    ai.call_document_ai.assert_called_once_with(
        "summarize", "Cells are the basic unit of life.", "jwt", cancel=None
    )


def test_missing_session_token(ai, doc_backend):
    doc_backend.get_session_token.return_value = Result.success(None)
    with pytest.raises(AIServiceError):
        run_document_action(make_document("text"), "quiz", ai, doc_backend)
    ai.call_document_ai.assert_not_called()


def test_unknown_action(ai, doc_backend):
    with pytest.raises(ValueError):
        run_document_action(make_document("text"), "translate", ai, doc_backend)
