"""quiztimer: countdown and stopwatch engine for timed quizzes and sessions."""

__version__ = "0.1.0"
