"""
Session Timer

Elapsed-time tracker for a play-through. The timer starts on the player's
first interaction and freezes when the session becomes terminal. Instances are
immutable so they can live inside a SessionState snapshot.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .helpers import format_time


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


def iso_timestamp(at_ms: int) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing Z."""
    moment = datetime.fromtimestamp(at_ms / 1000, tz=timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{at_ms % 1000:03d}Z"


@dataclass(frozen=True)
class Timer:
    started_at_ms: Optional[int] = None
    stopped_at_ms: Optional[int] = None

    @property
    def started(self) -> bool:
        return self.started_at_ms is not None

    @property
    def stopped(self) -> bool:
        return self.stopped_at_ms is not None

    def start(self, at_ms: int) -> "Timer":
        """Starts the clock. Later calls keep the original start."""
        if self.started:
            return self
        return Timer(started_at_ms=at_ms)

    def stop(self, at_ms: int) -> "Timer":
        """Freezes the clock. A timer that never started stays at zero."""
        if not self.started or self.stopped:
            return self
        return Timer(started_at_ms=self.started_at_ms, stopped_at_ms=at_ms)

    def reset(self) -> "Timer":
        return Timer()

    def elapsed(self, at_ms: Optional[int] = None) -> int:
        """Whole seconds elapsed, frozen once stopped."""
        if not self.started:
            return 0
        end = self.stopped_at_ms if self.stopped else (at_ms if at_ms is not None else now_ms())
        return max(end - self.started_at_ms, 0) // 1000

    def display(self, at_ms: Optional[int] = None) -> str:
        return format_time(self.elapsed(at_ms))
