"""Exception types raised by the timer core."""


class TimerError(Exception):
    """Base class for timer errors."""


class ConfigurationError(TimerError, ValueError):
    """Raised when a timer is built from an invalid configuration."""
