"""Exception classes for the process killer.

All custom exceptions inherit from ``ApplicationError`` which accepts keyword
context that is stored as attributes for debugging:

    err = ProcessKillError("...", report=report); err.report
"""

from typing import Any, List


class ApplicationError(Exception):
    """Base exception for all prockill errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Application error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class ProcessKillError(ApplicationError):
    """One or more targets could not be killed."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "One or more targets could not be killed"
        kwargs.setdefault("failures", [])
        super().__init__(message, **kwargs)

    @property
    def failure_lines(self) -> List[str]:
        return str(self).splitlines()


class PortLookupError(ApplicationError):
    """The socket table could not be read."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "The socket table could not be read"
        super().__init__(message, **kwargs)


class EventLoopRunningError(ApplicationError, RuntimeError):
    """A synchronous helper was called from inside a running event loop."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Synchronous kill helpers cannot run inside an active event loop; await kill() instead"
        super().__init__(message, **kwargs)


__all__ = ["ApplicationError", "EventLoopRunningError", "PortLookupError", "ProcessKillError"]
