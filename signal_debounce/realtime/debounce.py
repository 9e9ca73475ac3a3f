from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Optional, Union

from signal_debounce.realtime.timer import Clock, ElapsedTimer


class InvalidDurationError(ValueError):
    pass


class EdgeMode(str, Enum):
    BOTH = "both"
    RISING = "rising"
    FALLING = "falling"

    @classmethod
    def parse(cls, raw: object) -> "EdgeMode":
        if isinstance(raw, cls):
            return raw
        text = str(raw).strip().lower()
        for mode in cls:
            if mode.value == text:
                return mode
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown edge mode {raw!r}, expected one of: {choices}")


def _validate_duration(value: float) -> float:
    if isinstance(value, (bool, str)):
        raise InvalidDurationError(f"debounce_ms must be a real number, got {value!r}")
    try:
        duration = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidDurationError(f"debounce_ms must be a real number, got {value!r}") from exc
    if math.isnan(duration) or duration < 0.0:
        raise InvalidDurationError(f"debounce_ms cannot be negative, got {value!r}")
    return duration


class Debouncer:
    """Time-based debouncer for one polled boolean stream."""

    def __init__(
        self,
        debounce_ms: float,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._debounce_ms = _validate_duration(debounce_ms)
        self._timer = ElapsedTimer(clock)
        self._previous: Optional[bool] = None
        self._output: Optional[bool] = None
        self.logger = logger or logging.getLogger("signal_debounce")

    @property
    def debounce_ms(self) -> float:
        return self._debounce_ms

    @debounce_ms.setter
    def debounce_ms(self, value: float) -> None:
        self._debounce_ms = _validate_duration(value)

    @property
    def previous_value(self) -> Optional[bool]:
        return self._previous

    @property
    def output(self) -> Optional[bool]:
        return self._output

    @property
    def elapsed_ms(self) -> float:
        return self._timer.elapsed_ms()

    def debounce(self, new_value: bool) -> bool:
        if not self._debounce_ms >= 0.0:
            raise InvalidDurationError(f"debounce_ms cannot be negative, got {self._debounce_ms!r}")

        new_value = bool(new_value)
        if self._previous is None:
            self._output = new_value
            self._timer.reset_and_start()
        elif new_value != self._previous:
            self._timer.reset_and_start()
        elif self._timer.has_elapsed(self._debounce_ms):
            self._set_output(new_value)

        self._previous = new_value
        return self._output

    def debounce_rising_edge(self, new_value: bool) -> bool:
        new_value = bool(new_value)
        if new_value:
            self.debounce(True)
        else:
            self._set_output(False)
        self._previous = new_value
        return self._output

    def debounce_falling_edge(self, new_value: bool) -> bool:
        new_value = bool(new_value)
        if not new_value:
            self.debounce(False)
        else:
            self._set_output(True)
        self._previous = new_value
        return self._output

    def poll(self, new_value: bool, edge: Union[EdgeMode, str] = EdgeMode.BOTH) -> bool:
        edge = EdgeMode.parse(edge)
        if edge is EdgeMode.RISING:
            return self.debounce_rising_edge(new_value)
        if edge is EdgeMode.FALLING:
            return self.debounce_falling_edge(new_value)
        return self.debounce(new_value)

    def reset(self, new_value: bool) -> None:
        new_value = bool(new_value)
        self._previous = new_value
        self._output = new_value
        self._timer.reset_and_start()
        self.logger.debug("Debouncer reset -> %s", int(new_value))

    def _set_output(self, value: bool) -> None:
        if self._output is not None and value != self._output:
            self.logger.debug(
                "Debounced output -> %s after %.1f ms",
                int(value),
                self._timer.elapsed_ms(),
            )
        self._output = value

    def __str__(self) -> str:
        return (
            f"Last value: {self._previous}\n"
            f"Time ms since change: {self._timer.elapsed_ms():.1f}\n"
            f"Debounce time ms: {self._debounce_ms}"
        )
