"""
Rate Limiter.

Config-driven, per-client, per-category sliding-window rate limiting.
Reads limits from config/settings/security.yaml (rate_limiting section).
Uses in-memory storage, so limits are per process.

Usage:
    @router.post("", dependencies=[Depends(rate_limit("write"))])
    async def create_list(...): ...
"""

import time
from collections.abc import Callable

from fastapi import Request

from snack.backend.core.config import get_app_config
from snack.backend.core.exceptions import RateLimitError
from snack.backend.core.logging import get_logger
from snack.backend.core.utils import get_client_ip

logger = get_logger(__name__)

USER_AGENT_KEY_LENGTH = 50
SWEEP_INTERVAL_SECONDS = 60


class RateLimitResult:
    """Result of a rate limit check."""

    def __init__(self, allowed: bool, remaining: int = 0, retry_after_seconds: int = 0) -> None:
        self.allowed = allowed
        self.remaining = remaining
        self.retry_after_seconds = retry_after_seconds


class RateLimiter:
    """
    Per-client, per-category rate limiter.

    Each category in security.yaml has a request budget and a window in
    seconds. Timestamps older than the window are discarded on each check,
    and clients whose window has emptied are dropped by a periodic sweep.
    """

    def __init__(self) -> None:
        self._requests: dict[str, list[float]] = {}
        self._last_sweep: float | None = None

    def _sweep(self, now: float) -> None:
        rules = get_app_config().security.rate_limiting
        for key in list(self._requests):
            rule = getattr(rules, key.split(":", 1)[0], None)
            timestamps = self._requests[key]
            # Timestamps are appended in order, so the last one is the newest
            if rule is None or not timestamps or timestamps[-1] <= now - rule.window_seconds:
                del self._requests[key]
        self._last_sweep = now

    def check(self, category: str, identifier: str) -> RateLimitResult:
        """
        Check and record a request for this client in this category.

        Args:
            category: Limit category (auth, api, write, read, upload)
            identifier: Client identifier (see client_identifier)

        Returns:
            RateLimitResult indicating whether the request is allowed
        """
        rule = getattr(get_app_config().security.rate_limiting, category, None)
        if rule is None:
            return RateLimitResult(allowed=True)

        now = time.monotonic()
        if self._last_sweep is None or now - self._last_sweep >= SWEEP_INTERVAL_SECONDS:
            self._sweep(now)

        key = f"{category}:{identifier}"
        cutoff = now - rule.window_seconds
        window = [ts for ts in self._requests.get(key, ()) if ts > cutoff]
        self._requests[key] = window

        if len(window) >= rule.requests:
            oldest = min(window)
            retry_after = int(rule.window_seconds - (now - oldest)) + 1
            logger.warning(
                "Rate limit exceeded",
                extra={"category": category, "limit": rule.requests, "retry_after": retry_after},
            )
            return RateLimitResult(allowed=False, retry_after_seconds=retry_after)

        window.append(now)
        return RateLimitResult(allowed=True, remaining=rule.requests - len(window))

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests.clear()
        self._last_sweep = None


def client_identifier(request: Request) -> str:
    """Build the limiter key from the client IP and a truncated user agent."""
    fallback = request.client.host if request.client else None
    ip = get_client_ip(request.headers, fallback=fallback)
    user_agent = request.headers.get("user-agent", "unknown")[:USER_AGENT_KEY_LENGTH]
    return f"{ip}:{user_agent}"


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the rate limiter singleton."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def rate_limit(category: str) -> Callable:
    """
    Build a FastAPI dependency enforcing the given limit category.

    Disabled entirely when features.auth_rate_limit_enabled is false.
    """

    async def _enforce(request: Request) -> None:
        if not get_app_config().features.auth_rate_limit_enabled:
            return

        result = get_rate_limiter().check(category, client_identifier(request))
        if not result.allowed:
            raise RateLimitError(
                "Too many requests. Please try again later.",
                retry_after_seconds=result.retry_after_seconds,
            )

    return _enforce
