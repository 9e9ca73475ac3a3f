from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def make_session_id(prefix: str = "session") -> str:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{stamp}"


def monotonic_time_ms() -> float:
    return time.monotonic() * 1000.0


class ManualClock:
    """Hand-driven millisecond clock for replays and tests."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = float(start_ms)

    def __call__(self) -> float:
        return self.now_ms

    def set(self, t_ms: float) -> None:
        t_ms = float(t_ms)
        if t_ms < self.now_ms:
            raise ValueError(f"Clock cannot move backwards: {t_ms} < {self.now_ms}")
        self.now_ms = t_ms

    def advance(self, delta_ms: float) -> None:
        if delta_ms < 0:
            raise ValueError(f"delta_ms must be >= 0, got {delta_ms}")
        self.now_ms += float(delta_ms)
