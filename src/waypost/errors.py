"""Waypost exception hierarchy.

Shared across the registry, dispatcher, and CLI so every module raises
and catches the same types. Errors raised by handlers are never wrapped:
they travel through the chain as-is.
"""


class WaypostError(Exception):
    """Base for all waypost-specific errors."""


class ConfigurationError(WaypostError):
    """Raised when a dispatcher is configured or wired incorrectly.

    Always raised synchronously, at construction or registration time,
    never from inside a run.
    """


class ContinuationError(WaypostError):
    """Raised when a handler invokes its ``next`` continuation twice."""
