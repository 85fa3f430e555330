from unittest.mock import MagicMock

from core.ai_client import AIClient, AIServiceError
from core.chat import FALLBACK_REPLY, GREETING, ChatConversation
from core.results import OperationCancelled


def make_conversation(**ask):
    ai = MagicMock(spec=AIClient)
    ai.ask.configure_mock(**ask)
    return ChatConversation(ai), ai


def test_starts_with_greeting():
    conversation, _ = make_conversation()
    assert [(m.role, m.content) for m in conversation.messages] == [("assistant", GREETING)]


def test_reply_is_appended():
    conversation, ai = make_conversation(return_value="Mitochondria")

    reply = conversation.send("  Powerhouse of the cell? ")

    assert reply.content == "Mitochondria"
    ai.ask.assert_called_once_with("Powerhouse of the cell?", cancel=None)
    assert [m.role for m in conversation.messages] == ["assistant", "user", "assistant"]


def test_failures_use_fallback_reply():
    conversation, _ = make_conversation(side_effect=AIServiceError("Failed to get AI response"))
    assert conversation.send("Hello").content == FALLBACK_REPLY


def test_empty_answer_uses_fallback_reply():
    conversation, _ = make_conversation(return_value="")
    assert conversation.send("Hello").content == FALLBACK_REPLY


def test_blank_question_is_ignored():
    conversation, ai = make_conversation()
    assert conversation.send("   ") is None
    ai.ask.assert_not_called()
    assert len(conversation.messages) == 1


def test_cancelled_request_adds_no_reply():
    conversation, _ = make_conversation(side_effect=OperationCancelled("Request cancelled"))
    assert conversation.send("Hello") is None
    assert conversation.messages[-1].role == "user"


def test_clear():
    conversation, _ = make_conversation(return_value="Hi")
    conversation.send("Hello")
    conversation.clear()
    assert len(conversation.messages) == 1
