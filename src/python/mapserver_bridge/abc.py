# mapserver_bridge/abc.py
"""Abstract Base Classes for the mapserver_bridge library."""

import abc
from typing import Hashable, Optional

from .types import NativeHandle


class OwningWrapperBase(abc.ABC):
    """Abstract base class for wrappers that own and free a native handle."""

    @abc.abstractmethod
    def close(self) -> None:
        """
        Frees the native handle.
        Subsequent operations on the object will raise an error.
        """
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def closed(self) -> bool:
        """Returns True if the native handle has been freed."""
        raise NotImplementedError

    def __enter__(self) -> "OwningWrapperBase":
        if self.closed:
            raise ValueError("Cannot enter context with a closed handle.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class RenderingEngine(abc.ABC):
    """
    The native map-rendering service the bridge is built on.

    Handles are native addresses passed around as integers; a null pointer
    is returned as None. Implementations never raise for an engine-level
    failure: they return None (or a zero address) and record the reason in
    the engine's own error list.
    """

    @property
    def engine_key(self) -> Hashable:
        """
        Identifies the native state behind this engine. Engines with equal keys
        share one set of map handles and one error list.
        """
        return self

    # --- map lifecycle ---

    @abc.abstractmethod
    def load_map_definition(self, filename: str, base_path: Optional[str]) -> Optional[NativeHandle]:
        raise NotImplementedError

    @abc.abstractmethod
    def free_map(self, handle: NativeHandle) -> None:
        raise NotImplementedError

    # --- map fields ---

    @abc.abstractmethod
    def map_width(self, handle: NativeHandle) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def set_map_width(self, handle: NativeHandle, value: int) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def map_height(self, handle: NativeHandle) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def set_map_height(self, handle: NativeHandle, value: int) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def map_layer_count(self, handle: NativeHandle) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def map_layer(self, handle: NativeHandle, index: int) -> NativeHandle:
        """Returns the layer stored in slot `index`. The caller checks the range."""
        raise NotImplementedError

    @abc.abstractmethod
    def map_output_format(self, handle: NativeHandle) -> Optional[NativeHandle]:
        """
        Returns the map's configured output format, or None to let the
        encoder use the format the raster was drawn with.
        """
        raise NotImplementedError

    # --- layer fields ---

    @abc.abstractmethod
    def layer_name(self, layer: NativeHandle) -> Optional[str]:
        raise NotImplementedError

    @abc.abstractmethod
    def set_layer_name(self, layer: NativeHandle, name: str) -> None:
        """Replaces the layer's name, releasing the previous native string."""
        raise NotImplementedError

    # --- rendering ---

    @abc.abstractmethod
    def draw(self, handle: NativeHandle, query_map: bool = False) -> Optional[NativeHandle]:
        raise NotImplementedError

    @abc.abstractmethod
    def encode_raster(
        self,
        raster: NativeHandle,
        output_format: Optional[NativeHandle]
    ) -> tuple[NativeHandle, int]:
        """Returns (address, size) of a newly allocated byte array; address 0 on failure."""
        raise NotImplementedError

    @abc.abstractmethod
    def free_raster(self, raster: NativeHandle) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def free_bytes(self, address: NativeHandle) -> None:
        raise NotImplementedError

    # --- version ---

    @abc.abstractmethod
    def get_version_string(self) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def get_version_int(self) -> int:
        raise NotImplementedError

    # --- error list ---

    @abc.abstractmethod
    def reset_error_list(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_most_recent_error(self) -> Optional[NativeHandle]:
        raise NotImplementedError

    @abc.abstractmethod
    def error_code_to_string(self, code: int) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def error_code(self, record: NativeHandle) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def error_message(self, record: NativeHandle) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def error_routine(self, record: NativeHandle) -> str:
        raise NotImplementedError
