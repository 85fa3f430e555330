# journal.py

"""
Journal passcode handling and the lock gate in front of the journal view.

The passcode only gates a UI view: entries are not encrypted and nothing is
enforced on the server. Hashing uses werkzeug's password helpers.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from core.backend import BackendFacade
from core.logger import get_logger
from core.results import Result

logger = get_logger("journal")

MIN_PASSCODE_LENGTH = 4
DEFAULT_AUTO_LOCK_MINUTES = 30
MOODS = ("happy", "sad", "neutral", "excited")


def validate_new_passcode(passcode: str, confirm: str) -> Optional[str]:
    """
    Return an error message for an unacceptable new passcode, else None.
    """
    if len(passcode or "") < MIN_PASSCODE_LENGTH:
        return f"Passcode must be at least {MIN_PASSCODE_LENGTH} characters"
    if passcode != confirm:
        return "Passcodes do not match"
    return None


def hash_passcode(passcode: str) -> str:
    return generate_password_hash(passcode)


def set_passcode(
    backend: BackendFacade,
    user_id: str,
    passcode: str,
    auto_lock_minutes: int = DEFAULT_AUTO_LOCK_MINUTES,
) -> Result:
    return backend.upsert_journal_settings(user_id, hash_passcode(passcode), auto_lock_minutes)


def verify_passcode(backend: BackendFacade, user_id: str, passcode: str) -> bool:
    settings, error = backend.get_journal_settings(user_id)
    if error or settings is None or not settings.passcode_hash:
        return False
    return check_password_hash(settings.passcode_hash, passcode)


def has_passcode(backend: BackendFacade, user_id: str) -> bool:
    settings, error = backend.get_journal_settings(user_id)
    return not error and settings is not None and bool(settings.passcode_hash)


class JournalGate:
    """
    Lock state for the journal view.

    Unlocks after a verified passcode and locks again once
    ``auto_lock_minutes`` pass without activity.
    """

    def __init__(self, auto_lock_minutes: int = DEFAULT_AUTO_LOCK_MINUTES, clock: Callable[[], float] = time.monotonic):
        self.auto_lock_minutes = auto_lock_minutes
        self._clock = clock
        self._last_activity: Optional[float] = None

    @property
    def is_unlocked(self) -> bool:
        if self._last_activity is None:
            return False
        if self._clock() - self._last_activity > self.auto_lock_minutes * 60:
            logger.info("Journal auto-locked after %s minutes idle", self.auto_lock_minutes)
            self.lock()
            return False
        return True

    def unlock(self, backend: BackendFacade, user_id: str, passcode: str) -> bool:
        if not verify_passcode(backend, user_id, passcode):
            return False
        self._last_activity = self._clock()
        return True

    def unlock_without_passcode(self) -> None:
        """
        Open the journal for users who never set a passcode.
        """
        self._last_activity = self._clock()

    def touch(self) -> None:
        if self.is_unlocked:
            self._last_activity = self._clock()

    def lock(self) -> None:
        self._last_activity = None
