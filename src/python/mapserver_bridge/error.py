# mapserver_bridge/error.py
"""Read-only views over the engine's error list."""

from typing import TYPE_CHECKING, Optional

from ._internal.accessors import NativeProperty, NativeWrapper
from .abc import RenderingEngine
from .dataclasses import ErrorInfo
from .exceptions import StaleErrorError
from .types import NativeHandle

if TYPE_CHECKING:
    from .context import Context


def snapshot_error(engine: RenderingEngine, record: NativeHandle) -> ErrorInfo:
    """Copies one native error record into an ErrorInfo."""
    code = engine.error_code(record)
    return ErrorInfo(
        code=code,
        code_str=engine.error_code_to_string(code),
        message=engine.error_message(record),
        routine=engine.error_routine(record),
    )


def most_recent_error_info(engine: RenderingEngine) -> Optional[ErrorInfo]:
    """Snapshot of the engine's most recent error, without clearing the list."""
    record = engine.get_most_recent_error()
    if not record:
        return None
    return snapshot_error(engine, record)


def _get_code(err: "ErrorObj") -> int:
    """Engine error code."""
    return err._engine.error_code(err._live_record())


def _get_code_str(err: "ErrorObj") -> str:
    """Symbolic name of the error code, as spelled by the engine."""
    engine = err._engine
    return engine.error_code_to_string(engine.error_code(err._live_record()))


def _get_message(err: "ErrorObj") -> str:
    """Human readable error message."""
    return err._engine.error_message(err._live_record())


def _get_routine(err: "ErrorObj") -> str:
    """Name of the native routine that recorded the error."""
    return err._engine.error_routine(err._live_record())


class ErrorObj(NativeWrapper):
    """
    A non-owning view of one record in the engine's error list.

    Every field is read from the native record at access time. The record
    belongs to the engine: once `reset_error_list()` runs, this view is stale
    and reading it raises StaleErrorError. Use `snapshot()` to keep a copy.
    Obtained via `mapserver_bridge.get_error()`.
    """

    code = NativeProperty(_get_code)
    code_str = NativeProperty(_get_code_str)
    codeStr = code_str
    message = NativeProperty(_get_message)
    routine = NativeProperty(_get_routine)

    def __init__(self, context: "Context", record: NativeHandle, generation: int):
        self._context = context
        self._engine = context.engine
        self._record = record
        self._generation = generation

    @property
    def stale(self) -> bool:
        return self._generation != self._context.error_generation

    def _live_record(self) -> NativeHandle:
        if self.stale:
            raise StaleErrorError("Error record was read after the error list was reset.")
        return self._record

    def snapshot(self) -> ErrorInfo:
        return snapshot_error(self._engine, self._live_record())

    def __repr__(self) -> str:
        if self.stale:
            return "<ErrorObj (stale)>"
        return f"<ErrorObj code={self.code} codeStr={self.code_str!r} routine={self.routine!r}>"
