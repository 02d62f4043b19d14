"""
Base exception shared by every process graph failure.
"""


class ProcessGraphError(RuntimeError):
    """Base class for errors raised while building process graphs."""


__all__ = ["ProcessGraphError"]
