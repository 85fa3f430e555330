# chat.py

"""
Chat assistant conversation.

Any failure from the chat endpoint becomes one friendly fallback reply;
raw error text is logged, never shown in the conversation.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from core.ai_client import AIClient
from core.logger import get_logger
from core.results import CancelToken, OperationCancelled

logger = get_logger("chat")

FALLBACK_REPLY = "Sorry, something went wrong. Try again."
GREETING = "Hi! Ask me anything about your studies."


class ChatMessage(BaseModel):
    role: str # "user" | "assistant"
    content: str


class ChatConversation:
    """
    Message history for one chat panel.
    """

    def __init__(self, ai: AIClient):
        self.ai = ai
        self.messages: List[ChatMessage] = [ChatMessage(role="assistant", content=GREETING)]

    def send(self, question: str, cancel: Optional[CancelToken] = None) -> Optional[ChatMessage]:
        """
        Append the question and the assistant's reply; returns the reply.

        Blank questions are ignored. A cancelled request adds no reply.
        """
        question = (question or "").strip()
        if not question:
            return None

        self.messages.append(ChatMessage(role="user", content=question))
        try:
            answer = self.ai.ask(question, cancel=cancel) or FALLBACK_REPLY
        except OperationCancelled:
            return None
        except Exception as e:
            logger.error("AI chat error: %s", e)
            answer = FALLBACK_REPLY

        reply = ChatMessage(role="assistant", content=answer)
        self.messages.append(reply)
        return reply

    def clear(self) -> None:
        self.messages = [ChatMessage(role="assistant", content=GREETING)]
