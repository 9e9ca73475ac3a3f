from __future__ import annotations

from typing import Callable, Optional

from signal_debounce.utils.time_utils import monotonic_time_ms

Clock = Callable[[], float]


class ElapsedTimer:
    def __init__(self, clock: Optional[Clock] = None):
        self._clock: Clock = clock or monotonic_time_ms
        self._start_ms = 0.0
        self._accumulated_ms = 0.0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if not self._running:
            self._start_ms = self._clock()
            self._running = True

    def stop(self) -> None:
        if self._running:
            self._accumulated_ms = self.elapsed_ms()
            self._running = False

    def elapsed_ms(self) -> float:
        if self._running:
            return self._clock() - self._start_ms + self._accumulated_ms
        return self._accumulated_ms

    def elapsed_s(self) -> float:
        return self.elapsed_ms() / 1000.0

    def reset(self) -> None:
        # Running state is left as is.
        self._start_ms = self._clock()
        self._accumulated_ms = 0.0

    def reset_and_start(self) -> None:
        self.reset()
        self.start()

    def stop_and_reset(self) -> None:
        self.stop()
        self.reset()

    def has_elapsed(self, threshold_ms: float) -> bool:
        return self.elapsed_ms() >= threshold_ms
