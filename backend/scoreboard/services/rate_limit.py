"""Fixed-window rate limiting keyed by caller and endpoint class."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from scoreboard.exceptions import TooManyRequestsError

logger = logging.getLogger(__name__)

DEFAULT = "default"
SCORE_SUBMIT = "scores:submit"


@dataclass(frozen=True)
class RateLimitRule:
    limit: int
    window_seconds: float

    @property
    def rate(self) -> float:
        return self.limit / self.window_seconds


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    count: int
    limit: int
    reset_after: float


@dataclass
class _Window:
    started_at: float
    count: int


class FixedWindowRateLimiter:
    """Counts hits per (caller, endpoint class) in wall-clock windows.

    Every endpoint class is subject to the default rule. An endpoint class
    with its own rule uses whichever of the two allows the lower rate.

    At most ``max_keys`` windows are kept. When the table is full, expired
    windows are dropped first, then the oldest live window.
    """

    def __init__(
        self,
        default_rule: RateLimitRule,
        rules: dict[str, RateLimitRule] | None = None,
        clock: Callable[[], float] = time.time,
        max_keys: int = 10_000,
    ):
        self.default_rule = default_rule
        self.rules = dict(rules or {})
        self.clock = clock
        self.max_keys = max_keys
        self._windows: dict[tuple[str, str], _Window] = {}
        self._lock = threading.Lock()

    def rule_for(self, endpoint_class: str) -> RateLimitRule:
        specific = self.rules.get(endpoint_class)
        if specific is None or specific.rate >= self.default_rule.rate:
            return self.default_rule
        return specific

    def hit(self, caller: str, endpoint_class: str = DEFAULT) -> RateLimitResult:
        rule = self.rule_for(endpoint_class)
        key = (caller, endpoint_class)
        with self._lock:
            now = self.clock()
            window = self._windows.get(key)
            if window is None or now - window.started_at >= rule.window_seconds:
                if window is None and len(self._windows) >= self.max_keys:
                    self._sweep(now)
                window = _Window(started_at=now, count=1)
                self._windows[key] = window
            else:
                window.count += 1
            reset_after = rule.window_seconds - (now - window.started_at)
            return RateLimitResult(
                allowed=window.count <= rule.limit,
                count=window.count,
                limit=rule.limit,
                reset_after=reset_after,
            )

    def check(self, caller: str, endpoint_class: str = DEFAULT) -> RateLimitResult:
        """Like ``hit`` but raises TooManyRequestsError when denied."""
        result = self.hit(caller, endpoint_class)
        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded for {caller} on {endpoint_class} "
                f"({result.count}/{result.limit})"
            )
            raise TooManyRequestsError(retry_after=result.reset_after)
        return result

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _sweep(self, now: float) -> None:
        # Caller holds the lock
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.rule_for(key[1]).window_seconds
        ]
        for key in expired:
            del self._windows[key]
        if not expired:
            # Table is full of live windows; drop the oldest one
            oldest = min(self._windows, key=lambda k: self._windows[k].started_at)
            del self._windows[oldest]
