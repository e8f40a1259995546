"""Interview scheduling with calendar availability and best-effort notifications."""

__version__ = "0.1.0"
