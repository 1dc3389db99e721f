"""Timer core: state machine, tick scheduler, thresholds and session facade."""

from quiztimer.core.config import TimerConfiguration, TimerMode
from quiztimer.core.errors import ConfigurationError, TimerError
from quiztimer.core.machine import TimerPhase, TimerState, TimerStateMachine
from quiztimer.core.session import TimerSession
from quiztimer.core.thresholds import TimerStatus

__all__ = [
    "ConfigurationError",
    "TimerConfiguration",
    "TimerError",
    "TimerMode",
    "TimerPhase",
    "TimerSession",
    "TimerState",
    "TimerStateMachine",
    "TimerStatus",
]
