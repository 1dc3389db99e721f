"""Timer configuration supplied by the quiz or session that owns the timer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from quiztimer.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_WARNING_THRESHOLD = 300
DEFAULT_DANGER_THRESHOLD = 60

_SECONDS_PER_MINUTE = 60


class TimerMode(Enum):
    """Direction the timer counts in."""

    COUNTDOWN = "countdown"
    STOPWATCH = "stopwatch"


def _require_int(name: str, value: Any) -> None:
    # bool is an int subclass but never a meaningful number of seconds
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {type(value).__name__}")


@dataclass(frozen=True)
class TimerConfiguration:
    """Immutable settings for a single timer instance.

    Durations and thresholds are whole seconds.  Thresholds are measured in
    seconds *remaining* and only affect countdown timers.  Validation happens
    at construction, so a timer can never be built from a bad configuration.
    """

    total_duration: int
    mode: TimerMode = TimerMode.COUNTDOWN
    warning_threshold: int = DEFAULT_WARNING_THRESHOLD
    danger_threshold: int = DEFAULT_DANGER_THRESHOLD
    auto_start: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.mode, TimerMode):
            try:
                object.__setattr__(self, "mode", TimerMode(self.mode))
            except ValueError:
                raise ConfigurationError(f"unknown timer mode: {self.mode!r}") from None

        _require_int("total_duration", self.total_duration)
        _require_int("warning_threshold", self.warning_threshold)
        _require_int("danger_threshold", self.danger_threshold)

        if self.total_duration <= 0:
            raise ConfigurationError(
                f"total_duration must be positive, got {self.total_duration}"
            )
        if self.warning_threshold < 0 or self.danger_threshold < 0:
            raise ConfigurationError(
                "thresholds must be non-negative, got "
                f"warning={self.warning_threshold} danger={self.danger_threshold}"
            )
        if self.danger_threshold > self.warning_threshold:
            raise ConfigurationError(
                f"danger_threshold ({self.danger_threshold}) must not exceed "
                f"warning_threshold ({self.warning_threshold})"
            )

        if self.mode is TimerMode.COUNTDOWN and self.warning_threshold >= self.total_duration:
            logger.warning(
                "warning threshold %ds is not below the %ds duration; "
                "the timer starts in the warning band",
                self.warning_threshold,
                self.total_duration,
            )

    @classmethod
    def from_time_limit(cls, minutes: int, **kwargs: Any) -> TimerConfiguration:
        """Build a configuration from a quiz time limit given in whole minutes."""
        _require_int("minutes", minutes)
        return cls(total_duration=minutes * _SECONDS_PER_MINUTE, **kwargs)

    @property
    def initial_time_left(self) -> int:
        """Value of ``time_left`` for a freshly created or reset timer."""
        if self.mode is TimerMode.COUNTDOWN:
            return self.total_duration
        return 0
