"""hangboard-timer: guided hangboard sessions with weight progression."""

__version__ = "0.1.0"
