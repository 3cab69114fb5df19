"""
Failed-login tracking per login identifier.

An identifier with five or more recorded failures, the latest of which
is less than thirty minutes old, is locked out.  Records only disappear
on a successful login; they are kept in memory and lost on restart.

The throttle is an object owned by the application (see
``main.create_app``) rather than module state, so every app instance and
every test gets its own attempt store.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..core.errors import LockedOutError

logger = logging.getLogger(__name__)

MAX_FAILED_ATTEMPTS = 5
LOCKOUT_WINDOW_SECONDS = 30 * 60

_CURRENT = object()


@dataclass(frozen=True)
class LoginAttempt:
    attempts: int
    last_attempt: float


class InMemoryAttemptStore:
    """Process-local attempt records guarded by a lock."""

    def __init__(self) -> None:
        self._records: Dict[str, LoginAttempt] = {}
        self._lock = threading.Lock()

    def get(self, identifier: str) -> Optional[LoginAttempt]:
        with self._lock:
            return self._records.get(identifier)

    def increment(self, identifier: str, now: float) -> LoginAttempt:
        with self._lock:
            current = self._records.get(identifier)
            attempts = current.attempts + 1 if current else 1
            record = LoginAttempt(attempts=attempts, last_attempt=now)
            self._records[identifier] = record
            return record

    def delete(self, identifier: str) -> None:
        with self._lock:
            self._records.pop(identifier, None)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class LoginThrottle:
    """Gate login attempts on the number of recent failures.

    Parameters
    ----------
    store : InMemoryAttemptStore, optional
        Where attempt records live.  Anything with ``get``,
        ``increment`` and ``delete`` works.
    clock : callable, optional
        Returns the current UNIX time in seconds.
    """

    def __init__(self, store: Optional[InMemoryAttemptStore] = None, clock: Callable[[], float] = time.time) -> None:
        self.store = store or InMemoryAttemptStore()
        self.clock = clock

    def lookup(self, identifier: str) -> Optional[LoginAttempt]:
        return self.store.get(identifier)

    @staticmethod
    def is_locked(record: Optional[LoginAttempt], now: float) -> bool:
        if record is None:
            return False
        return record.attempts >= MAX_FAILED_ATTEMPTS and now - record.last_attempt < LOCKOUT_WINDOW_SECONDS

    @staticmethod
    def remaining_minutes(record: LoginAttempt, now: float) -> int:
        remaining = LOCKOUT_WINDOW_SECONDS - (now - record.last_attempt)
        return max(math.ceil(remaining / 60), 0)

    def check_gate(self, identifier: str, now: Optional[float] = None, record=_CURRENT) -> None:
        """Raise ``LockedOutError`` if ``identifier`` is locked out.

        ``record`` lets the caller decide on a snapshot taken earlier
        (``None`` meaning no record); when omitted the current record is
        used.
        """
        now = self.clock() if now is None else now
        if record is _CURRENT:
            record = self.lookup(identifier)
        if self.is_locked(record, now):
            wait = self.remaining_minutes(record, now)
            logger.warning("Login for %s refused: locked out for %s more minutes", identifier, wait)
            raise LockedOutError(
                f"Too many failed login attempts. Please try again in {wait} minutes",
                wait_minutes=wait,
            )

    def record_failure(self, identifier: str, now: Optional[float] = None) -> LoginAttempt:
        now = self.clock() if now is None else now
        record = self.store.increment(identifier, now)
        logger.info("Failed login %s for %s", record.attempts, identifier)
        return record

    def reset(self, identifier: str) -> None:
        self.store.delete(identifier)
