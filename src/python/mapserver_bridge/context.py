# mapserver_bridge/context.py
"""
The explicit channel between Python and one rendering engine.

A Context owns the engine instance. Which native maps are owned by a live Map
wrapper, and how many times the engine's error list has been reset, is native
state: it is kept once per engine (see `RenderingEngine.engine_key`) and shared
by every context over that engine, so error views taken before a reset made
through any of them are detected as stale.
"""

import logging
import weakref
from typing import Optional

from ._internal.validation import optional_str, require_str
from .abc import RenderingEngine
from .dataclasses import ErrorInfo, VersionInfo
from .error import ErrorObj, most_recent_error_info
from .exceptions import HandleOwnershipError, MapLoadError
from .map import Map
from .types import NativeHandle

log = logging.getLogger(__name__)


class _EngineState:
    """Bookkeeping shared by all contexts over the same native engine."""

    def __init__(self):
        self.owned_handles: set[NativeHandle] = set()
        self.error_generation = 0


# Entries live as long as some context still refers to them.
_engine_states: "weakref.WeakValueDictionary[object, _EngineState]" = weakref.WeakValueDictionary()


def _state_for(engine: RenderingEngine) -> _EngineState:
    key = engine.engine_key
    state = _engine_states.get(key)
    if state is None:
        state = _EngineState()
        _engine_states[key] = state
    return state


class Context:
    """
    Entry point for talking to a rendering engine.

    The engine's error list is process-wide state inside the native library.
    Engine calls that fail softly record an error there without raising;
    callers who care must poll `get_error()` after the call. No locking is
    done: if several threads share an engine, serialize each engine call
    together with the error read that follows it.
    """

    def __init__(self, engine: Optional[RenderingEngine] = None):
        """
        Args:
            engine: The engine to use. If None, the MapServer shared library
                is located and loaded on first use.
        """
        self._engine = engine
        self._state: Optional[_EngineState] = None

    @property
    def engine(self) -> RenderingEngine:
        if self._engine is None:
            from ._internal.native import LibMapServer
            self._engine = LibMapServer()
        return self._engine

    @property
    def _shared(self) -> _EngineState:
        if self._state is None:
            self._state = _state_for(self.engine)
        return self._state

    # --- ownership registry ---

    def _claim_handle(self, handle: NativeHandle) -> None:
        if not handle:
            raise ValueError("Cannot wrap a null map handle.")
        owned = self._shared.owned_handles
        if handle in owned:
            raise HandleOwnershipError(f"Map handle 0x{handle:x} is already owned by a live Map.")
        owned.add(handle)

    def _release_handle(self, handle: NativeHandle) -> None:
        self._shared.owned_handles.discard(handle)

    def owns(self, handle: NativeHandle) -> bool:
        """Returns True if a live Map over this context's engine owns `handle`."""
        return handle in self._shared.owned_handles

    # --- maps ---

    def load_map(self, filename: str, path: Optional[str] = None) -> Map:
        """
        Loads a map definition.

        Args:
            filename: Path to the map definition file.
            path: Base path that relative paths inside the definition are
                resolved against. None uses the definition's own directory.

        Returns:
            A Map that exclusively owns the loaded native map.

        Raises:
            TypeError: If an argument is not a string.
            MapLoadError: If the engine could not load the definition. The
                engine's most recent error, if any, is attached.
        """
        filename = require_str(0, filename)
        path = optional_str(1, path)

        engine = self.engine
        handle = engine.load_map_definition(filename, path)
        if not handle:
            raise MapLoadError.from_error_info("could not load map definition", most_recent_error_info(engine))

        log.debug("Loaded map definition %s as 0x%x", filename, handle)
        return Map(self, handle)

    # --- version ---

    def get_version(self) -> str:
        return self.engine.get_version_string()

    def get_version_int(self) -> int:
        return self.engine.get_version_int()

    def version_info(self) -> VersionInfo:
        return VersionInfo(text=self.get_version(), number=self.get_version_int())

    # --- error list ---

    @property
    def error_generation(self) -> int:
        """Number of error-list resets done through any context over this engine."""
        return self._shared.error_generation

    def reset_error_list(self) -> None:
        """Clears the engine's error list. Invalidates every ErrorObj taken before."""
        self.engine.reset_error_list()
        self._shared.error_generation += 1

    def get_error(self) -> Optional[ErrorObj]:
        """
        Returns a view of the most recent engine error, or None if the list is
        empty. Reading does not clear the list; use reset_error_list() for that.
        """
        record = self.engine.get_most_recent_error()
        if not record:
            return None
        return ErrorObj(self, record, self._shared.error_generation)

    def last_error_info(self) -> Optional[ErrorInfo]:
        """Like get_error(), but returns a copy that survives a reset."""
        return most_recent_error_info(self.engine)

    # camelCase names, as exposed by the node-mapserver module
    loadMap = load_map
    getVersion = get_version
    getVersionInt = get_version_int
    resetErrorList = reset_error_list
    getError = get_error


_default_context: Optional[Context] = None


def get_default_context() -> Context:
    """The context used by the module-level functions, created on first use."""
    global _default_context
    if _default_context is None:
        _default_context = Context()
    return _default_context


def set_default_context(context: Optional[Context]) -> Optional[Context]:
    """Replaces the default context and returns the previous one. None resets it."""
    global _default_context
    previous = _default_context
    _default_context = context
    return previous
