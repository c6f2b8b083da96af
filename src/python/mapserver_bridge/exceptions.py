# mapserver_bridge/exceptions.py
"""Custom exception types for the mapserver_bridge library."""

from typing import Optional

from .dataclasses import ErrorInfo


class MapserverError(Exception):
    """Base exception for all errors raised by this library."""
    pass


class MapserverConfigError(MapserverError):
    """Error related to configuration or setup, such as a missing native library."""
    pass


class MapserverOperationError(MapserverError):
    """
    Error raised when a native engine call fails.

    Attributes:
        message (str): The primary error message.
        code (int): The engine error code of the most recent recorded error,
            or 0 if the engine recorded nothing.
        code_message (str): The string representation of the error code.
        routine (str): The native routine that recorded the error.
        error (ErrorInfo | None): The full snapshot of the recorded error.
    """
    def __init__(
        self,
        message: str,
        *,
        code: int = 0,
        code_message: str = "",
        routine: str = "",
        error: Optional[ErrorInfo] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.code_message = code_message
        self.routine = routine
        self.error = error

    def __str__(self) -> str:
        if self.error is None:
            return self.message
        return f"{self.message} ({self.routine}: {self.error.message}, code={self.code}, name='{self.code_message}')"

    @classmethod
    def from_error_info(cls, message: str, error: Optional[ErrorInfo]) -> "MapserverOperationError":
        """Factory method attaching the engine's most recent error record, if any."""
        if error is None:
            return cls(message)
        return cls(
            message,
            code=error.code,
            code_message=error.code_str,
            routine=error.routine,
            error=error,
        )


class MapLoadError(MapserverOperationError):
    """The engine could not parse or load a map definition."""
    pass


class MapRenderError(MapserverOperationError):
    """The engine could not draw or encode a map image."""
    pass


class ClosedHandleError(MapserverError, ValueError):
    """An operation was attempted on a wrapper whose native handle has been freed."""
    pass


class StaleErrorError(MapserverError):
    """An ErrorObj was read after the error list it points into was reset."""
    pass


class HandleOwnershipError(MapserverError):
    """A native handle that is already owned by a live wrapper was wrapped again."""
    pass
