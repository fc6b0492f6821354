"""
Per-account login throttle to prevent brute-force attacks.

Locks an account for LOCKOUT_SECONDS once MAX_ATTEMPTS failed attempts have
been recorded. State lives in the confidential store (see AttemptTracker),
keyed by the sanitized email.

Expiry is lazy: only is_locked() notices an elapsed window and clears the
counter. remaining_attempts() is read-only, so a countdown UI that polls it
must call AttemptTracker.reset() itself when its countdown reaches zero.
"""

import logging
import time
from typing import Optional

from src.services.attempt_tracker import AttemptTracker
from src.utils.structured_logger import get_logger, log_with_context

logger = get_logger(__name__)

MAX_ATTEMPTS = 5
LOCKOUT_SECONDS = 30


def _now_ms() -> int:
    return int(time.time() * 1000)


class LockoutPolicy:
    """Lock/unlock decisions from the failure count and lockout timestamp"""

    def __init__(
        self,
        tracker: AttemptTracker,
        max_attempts: int = MAX_ATTEMPTS,
        lockout_seconds: int = LOCKOUT_SECONDS,
    ):
        self.tracker = tracker
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds

    async def arm(self, account: str) -> int:
        """Start a lockout window now. Returns the expiry in epoch ms."""
        until = _now_ms() + self.lockout_seconds * 1000
        await self.tracker.set_lockout_until(account, until)
        log_with_context(
            logger, logging.WARNING, f"Account locked for {self.lockout_seconds}s",
            account=account, locked_until_ms=until,
        )
        return until

    async def is_locked(self, account: str) -> bool:
        """Check the lockout, clearing it if the window has elapsed."""
        failures = await self.tracker.get_failed_count(account)
        if failures < self.max_attempts:
            return False

        locked_until = await self.tracker.get_lockout_until(account)
        if not locked_until:
            return False

        if _now_ms() > locked_until:
            # Lock has expired, reset
            await self.tracker.reset(account)
            log_with_context(logger, logging.INFO, "Lockout expired, attempts reset", account=account)
            return False

        return True

    async def remaining_attempts(self, account: str) -> int:
        """Attempts left before lockout. Never resets state."""
        failures = await self.tracker.get_failed_count(account)
        locked_until = await self.tracker.get_lockout_until(account)

        if locked_until and locked_until > _now_ms() and failures >= self.max_attempts:
            return 0

        return max(0, self.max_attempts - failures)

    async def seconds_until_unlock(self, account: str) -> int:
        """Whole seconds left in an active lockout window, else 0."""
        failures = await self.tracker.get_failed_count(account)
        if failures < self.max_attempts:
            return 0
        locked_until: Optional[int] = await self.tracker.get_lockout_until(account)
        if not locked_until:
            return 0
        remaining_ms = locked_until - _now_ms()
        if remaining_ms <= 0:
            return 0
        return -(-remaining_ms // 1000)
