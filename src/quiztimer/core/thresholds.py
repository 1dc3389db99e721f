"""Status and progress derived from a timer reading, plus display helpers."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from quiztimer.core.config import TimerMode
from quiztimer.core.machine import TimerPhase


class TimerStatus(Enum):
    """Presentation classification of a timer reading."""

    NORMAL = "normal"
    WARNING = "warning"
    DANGER = "danger"
    FINISHED = "finished"


_LABELS = {
    TimerStatus.DANGER: "Time Running Out!",
    TimerStatus.WARNING: "Warning",
    TimerStatus.NORMAL: "Running",
}


def evaluate_status(
    mode: TimerMode,
    time_left: int,
    total_duration: int,
    warning_threshold: int,
    danger_threshold: int,
    phase: TimerPhase,
) -> TimerStatus:
    """Classify a reading.

    FINISHED wins over everything.  Countdown readings escalate to WARNING and
    then DANGER as ``time_left`` drops to each threshold (inclusive).  A
    stopwatch has no terminal or danger concept and is always NORMAL.
    *total_duration* is accepted so callers can pass a full reading; the
    classification itself depends only on the thresholds.
    """
    if phase is TimerPhase.FINISHED:
        return TimerStatus.FINISHED
    if mode is TimerMode.STOPWATCH:
        return TimerStatus.NORMAL
    if time_left <= danger_threshold:
        return TimerStatus.DANGER
    if time_left <= warning_threshold:
        return TimerStatus.WARNING
    return TimerStatus.NORMAL


def _percent(part: int, whole: int) -> int:
    """Return ``part / whole * 100`` rounded half-up, in exact arithmetic."""
    return (200 * part + whole) // (2 * whole)


def progress_percentage(
    mode: TimerMode, time_left: int, total_duration: int, cap: Optional[int] = None
) -> Optional[int]:
    """Return how far along the timer is, as a whole percentage.

    Countdown progress is the share of *total_duration* already consumed.
    Stopwatch progress is measured against *cap* and saturates at 100; with
    no cap it is undefined and ``None`` is returned.
    """
    if mode is TimerMode.COUNTDOWN:
        return _percent(total_duration - time_left, total_duration)
    if cap is None:
        return None
    return min(100, _percent(time_left, cap))


def status_label(phase: TimerPhase, status: TimerStatus) -> str:
    """Return the badge text shown next to the timer."""
    if status is TimerStatus.FINISHED or phase is TimerPhase.FINISHED:
        return "Finished"
    if phase is TimerPhase.PAUSED:
        return "Paused"
    if phase is TimerPhase.IDLE:
        return "Ready"
    return _LABELS[status]


def mode_caption(mode: TimerMode) -> str:
    """Return the caption describing what the displayed number means."""
    if mode is TimerMode.COUNTDOWN:
        return "Time Remaining"
    return "Time Elapsed"


def format_time(seconds: int) -> str:
    """Format *seconds* as ``M:SS``, or ``H:MM:SS`` from one hour upwards."""
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
