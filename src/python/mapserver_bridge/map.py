# mapserver_bridge/map.py
"""The owning Map wrapper and the live view over its layers."""

import logging
import weakref
from typing import TYPE_CHECKING, Iterator, Optional

import numpy as np

from ._internal.accessors import NativeProperty, NativeWrapper
from ._internal.validation import require_index, require_int32
from .abc import OwningWrapperBase
from .exceptions import ClosedHandleError
from .layer import Layer
from .render import render
from .types import NativeHandle

if TYPE_CHECKING:
    from .context import Context

log = logging.getLogger(__name__)


class LayerCollection:
    """
    An index-based view of a Map's layer array.

    The view holds nothing but its parent map. The layer count is re-read
    from the map on every call, so layers added or removed through the engine
    show up without fetching a new view.

    - `layers.at(i)` returns None for any `i` outside `[0, length)`.
    - `layers[i]` follows the sequence protocol: negative indices count from
      the end, and out-of-range indices raise IndexError.
    """

    def __init__(self, parent: "Map"):
        self._map = parent

    @property
    def length(self) -> int:
        m = self._map
        return m._engine.map_layer_count(m._live_handle())

    def __len__(self) -> int:
        return self.length

    def at(self, index: int) -> Optional[Layer]:
        """Returns a fresh proxy for slot `index`, or None if there is no such slot."""
        index = require_index(index)
        m = self._map
        handle = m._live_handle()
        if not (0 <= index < m._engine.map_layer_count(handle)):
            return None
        return Layer(m, m._engine.map_layer(handle, index), index)

    def __getitem__(self, key: int) -> Layer:
        if not isinstance(key, int) or isinstance(key, bool):
            raise TypeError(f"Index must be an integer, not {type(key).__name__}")
        resolved = key if key >= 0 else key + self.length
        layer = self.at(resolved)
        if layer is None:
            raise IndexError("Layer index out of range")
        return layer

    def __iter__(self) -> Iterator[Layer]:
        # Re-check the length each step; the map may change while iterating.
        i = 0
        while True:
            layer = self.at(i)
            if layer is None:
                return
            yield layer
            i += 1

    @property
    def map(self) -> "Map":
        return self._map

    def __repr__(self) -> str:
        if self._map.closed:
            return "<LayerCollection (map closed)>"
        return f"<LayerCollection length={self.length}>"


def _get_width(m: "Map") -> int:
    """Output image width in pixels."""
    return m._engine.map_width(m._live_handle())


def _set_width(m: "Map", value: int) -> None:
    value = require_int32("width", value)
    m._engine.set_map_width(m._live_handle(), value)


def _get_height(m: "Map") -> int:
    """Output image height in pixels."""
    return m._engine.map_height(m._live_handle())


def _set_height(m: "Map", value: int) -> None:
    value = require_int32("height", value)
    m._engine.set_map_height(m._live_handle(), value)


def _get_layers(m: "Map") -> LayerCollection:
    """A live view over the map's layers."""
    m._live_handle()
    return LayerCollection(m)


class Map(NativeWrapper, OwningWrapperBase):
    """
    A loaded map definition. Owns its native map exclusively.

    Created via `mapserver_bridge.load_map()` or `Context.load_map()`.
    The native map is freed exactly once: by `close()` (or leaving a
    `with` block), or by the garbage collector if the Map was never closed.
    Layers obtained from the map keep it alive.
    """

    width = NativeProperty(_get_width, _set_width)
    height = NativeProperty(_get_height, _set_height)
    layers = NativeProperty(_get_layers)

    def __init__(self, context: "Context", handle: NativeHandle):
        """Takes ownership of `handle`. Use Context.load_map instead of calling this."""
        context._claim_handle(handle)
        self._context = context
        self._engine = context.engine
        self._handle = handle
        self._finalizer = weakref.finalize(self, _free_map, context, handle, False)

    def _live_handle(self) -> NativeHandle:
        if not self._finalizer.alive:
            raise ClosedHandleError("Operation attempted on a closed Map.")
        return self._handle

    def draw_map(self, *, query_map: bool = False) -> memoryview:
        """
        Renders the map with its configured output format.

        Returns:
            A memoryview over the encoded image bytes. The bytes are not
            copied; they are released when the view is no longer referenced.

        Raises:
            MapRenderError: If the engine fails to draw or encode the map.
        """
        return render(self._engine, self._live_handle(), query_map=query_map)

    drawMap = draw_map
    render = draw_map

    def draw_array(self, *, query_map: bool = False) -> np.ndarray:
        """Renders the map and returns the encoded bytes as a zero-copy uint8 array."""
        return np.frombuffer(self.draw_map(query_map=query_map), dtype=np.uint8)

    @property
    def context(self) -> "Context":
        return self._context

    def close(self) -> None:
        # detach() hands back the pending call at most once
        if self._finalizer.detach() is not None:
            _free_map(self._context, self._handle, True)

    destroy = close

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def __repr__(self) -> str:
        if self.closed:
            return "<Map (closed)>"
        return f"<Map width={self.width} height={self.height} layers={len(self.layers)}>"


def _free_map(context: "Context", handle: NativeHandle, explicit: bool) -> None:
    context._release_handle(handle)
    context.engine.free_map(handle)
    log.debug("Freed map 0x%x (%s)", handle, "closed" if explicit else "collected")
