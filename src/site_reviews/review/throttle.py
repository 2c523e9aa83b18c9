"""Fixed-window throttle for review submissions.

Counts accepted submissions per key (scope + client address) in windows of
``window_seconds``. A key is refused only once its current window already
holds ``limit`` submissions, so the request that reaches the limit is still
let through.
"""

import threading
import time
from dataclasses import dataclass

import structlog

from site_reviews.config import settings
from site_reviews.exceptions import RateLimited

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ThrottleRule:
    key_prefix: str
    limit: int
    window_seconds: int


class SubmissionThrottle:
    def __init__(self, rule: ThrottleRule, clock=time.time):
        self.rule = rule
        self._clock = clock
        self._lock = threading.Lock()
        self._bucket = None
        self._counts: dict[str, int] = {}

    @property
    def _window(self) -> int:
        return max(1, self.rule.window_seconds)

    def _roll(self, now: float) -> None:
        bucket = int(now // self._window)
        if bucket != self._bucket:
            # Counts from earlier windows can never block again
            self._bucket = bucket
            self._counts.clear()

    def _key(self, key: str) -> str:
        return f"{self.rule.key_prefix}:{key}"

    def hit(self, key: str) -> int:
        """Record one submission for ``key`` and return the count in this window.

        Raises ``RateLimited`` without recording anything when the window is full.
        """
        now = self._clock()
        with self._lock:
            self._roll(now)
            current = self._counts.get(self._key(key), 0)
            if current >= self.rule.limit:
                retry_after = max(1, int(self._window - (now % self._window)))
                logger.warning("review.throttled", key=key, retry_after=retry_after)
                raise RateLimited(retry_after)
            self._counts[self._key(key)] = current + 1
            return current + 1

    def release(self, key: str) -> None:
        """Give back a slot taken by ``hit`` whose submission was not stored."""
        with self._lock:
            self._roll(self._clock())
            current = self._counts.get(self._key(key), 0)
            if current > 0:
                self._counts[self._key(key)] = current - 1

    def count(self, key: str) -> int:
        with self._lock:
            self._roll(self._clock())
            return self._counts.get(self._key(key), 0)

    def reset(self) -> None:
        with self._lock:
            self._bucket = None
            self._counts.clear()


_submission_throttle: SubmissionThrottle | None = None


def submission_throttle() -> SubmissionThrottle:
    """The process-wide throttle for review submissions, built from settings on first use."""
    global _submission_throttle
    if _submission_throttle is None:
        rate_limit = settings()["rate_limit"]
        _submission_throttle = SubmissionThrottle(
            ThrottleRule(
                key_prefix="reviews:submit",
                limit=rate_limit["limit"],
                window_seconds=rate_limit["window_seconds"],
            )
        )
    return _submission_throttle
