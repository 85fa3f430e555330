# results.py

"""
Uniform return shape for backend calls and the cancellation token shared by
store actions and AI requests.
"""

from __future__ import annotations

import threading
from typing import Any, NamedTuple, Optional


class Result(NamedTuple):
    """
    Outcome of a backend call: either ``data`` or an ``error`` message.

    Unpacks like the ``{data, error}`` pair callers are used to::

        data, error = backend.get_courses(user_id)
    """
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any = None) -> "Result":
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: Any) -> "Result":
        return cls(data=None, error=error_message(error))


def error_message(error: Any) -> str:
    """
    Reduce an exception or error payload to a human-readable string.
    """
    if error is None:
        return "An error occurred"
    if isinstance(error, str):
        return error or "An error occurred"
    # postgrest APIError and gotrue AuthApiError both carry .message
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(error, dict):
        return str(error.get("message") or error.get("error") or error)
    return str(error) or error.__class__.__name__


class OperationCancelled(Exception):
    """
    Raised when a request is attempted with a token that was already cancelled.
    """
    pass


class CancelToken:
    """
    Abort signal tied to the lifetime of a view or a generation run.

    Store actions check it before applying results; AI calls check it before
    issuing the request.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Request cancelled")


def is_cancelled(token: Optional[CancelToken]) -> bool:
    return token is not None and token.cancelled
