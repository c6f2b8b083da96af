# mapserver_bridge/layer.py
"""Non-owning proxy over a layer stored in a map's layer array."""

from typing import TYPE_CHECKING, Optional

from ._internal.accessors import NativeProperty, NativeWrapper
from ._internal.validation import require_str
from .types import NativeHandle

if TYPE_CHECKING:
    from .map import Map


def _get_name(layer: "Layer") -> Optional[str]:
    """The layer's NAME, or None if it has none."""
    return layer._map._engine.layer_name(layer._live_handle())


def _set_name(layer: "Layer", value: str) -> None:
    value = require_str(0, value)
    layer._map._engine.set_layer_name(layer._live_handle(), value)


class Layer(NativeWrapper):
    """
    A borrowed view of one layer of a Map.

    The layer belongs to its map. A Layer never frees it and has no
    close(); it keeps its Map alive, and every access fails with
    ClosedHandleError once that Map has been closed. Two proxies for the
    same slot read and write the same native layer.
    """

    name = NativeProperty(_get_name, _set_name)

    def __init__(self, parent: "Map", handle: NativeHandle, index: int):
        self._map = parent
        self._handle = handle
        self._index = index

    @property
    def index(self) -> int:
        """The slot of the map's layer array this proxy was obtained from."""
        return self._index

    @property
    def map(self) -> "Map":
        return self._map

    def _live_handle(self) -> NativeHandle:
        self._map._live_handle()
        return self._handle

    def __repr__(self) -> str:
        if self._map.closed:
            return f"<Layer index={self._index} (map closed)>"
        return f"<Layer index={self._index} name={self.name!r}>"
