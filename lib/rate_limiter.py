# =============================================================================
# lib/rate_limiter.py - In-Memory Rate Limiter
# =============================================================================
# Sliding-window limiter keyed by an arbitrary string (client IP, user id).
# State lives in process memory: it resets on restart and is not shared
# between workers.
#
# Usage:
#   from lib.rate_limiter import billing_webhook_limiter
#   allowed, retry_after = billing_webhook_limiter.check(request.client.host)
# =============================================================================

import logging
import threading
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window rate limiter.

    Args:
        max_requests: Allowed calls per key within the window
        window_seconds: Window length

    Example:
        limiter = RateLimiter(max_requests=5, window_seconds=60)
        allowed, retry_after = limiter.check("203.0.113.7")
        if not allowed:
            raise RateLimitedError(retry_after=retry_after)
    """

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window = timedelta(seconds=window_seconds)
        self.attempts: dict[str, list[datetime]] = {}
        self._lock = threading.Lock()

    def check(self, key: str, now: datetime | None = None) -> tuple[bool, int]:
        """
        Record a call for key if it is within quota.

        Returns:
            (allowed, retry_after_seconds). retry_after is 0 when allowed.
        """
        now = now or datetime.now(timezone.utc)
        with self._lock:
            self._prune(now)
            recent = self.attempts.get(key, [])
            if len(recent) >= self.max_requests:
                retry_after = int((min(recent) + self.window - now).total_seconds()) + 1
                logger.warning(f"Rate limit exceeded for {key}, retry in {retry_after}s")
                return False, retry_after

            recent.append(now)
            self.attempts[key] = recent
            return True, 0

    def _prune(self, now: datetime) -> None:
        """Drop expired timestamps and forget keys with none left."""
        for key in list(self.attempts):
            recent = [ts for ts in self.attempts[key] if now - ts < self.window]
            if recent:
                self.attempts[key] = recent
            else:
                del self.attempts[key]

    def reset(self, key: str | None = None) -> None:
        """Forget recorded calls for one key, or all keys."""
        with self._lock:
            if key is None:
                self.attempts.clear()
            else:
                self.attempts.pop(key, None)


def _build_billing_limiter() -> RateLimiter:
    from app.config import settings

    return RateLimiter(
        max_requests=settings.BILLING_WEBHOOK_RATE_LIMIT,
        window_seconds=settings.BILLING_WEBHOOK_RATE_WINDOW_SECONDS,
    )


billing_webhook_limiter = _build_billing_limiter()
