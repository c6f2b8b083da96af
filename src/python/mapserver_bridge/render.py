# mapserver_bridge/render.py
"""
The render pipeline: draw a map, encode the raster, and hand the encoded
bytes to Python without copying them.
"""

import ctypes
import logging
import weakref

from .abc import RenderingEngine
from .error import most_recent_error_info
from .exceptions import MapRenderError
from .types import NativeHandle

log = logging.getLogger(__name__)


def render(engine: RenderingEngine, handle: NativeHandle, *, query_map: bool = False) -> memoryview:
    """
    Draws and encodes the map behind `handle` using its configured output format.

    The raster only lives inside this call; it is freed right after encoding,
    whether encoding succeeded or not. The encoded bytes stay native and are
    released once the returned view (and every view derived from it) is gone.

    Raises:
        MapRenderError: If the engine produced no raster or no encoded bytes.
    """
    raster = engine.draw(handle, query_map)
    if not raster:
        raise MapRenderError.from_error_info("draw failed", most_recent_error_info(engine))

    try:
        address, size = engine.encode_raster(raster, engine.map_output_format(handle))
    finally:
        engine.free_raster(raster)

    if not address:
        raise MapRenderError.from_error_info("encode failed", most_recent_error_info(engine))
    return adopt_bytes(engine, address, size)


def adopt_bytes(engine: RenderingEngine, address: NativeHandle, size: int) -> memoryview:
    """
    Wraps `size` engine-allocated bytes at `address` in a read-write memoryview.

    Ownership moves to the returned view: the engine's free routine runs
    exactly once, when the last object exporting this memory is collected.
    """
    if size < 0:
        engine.free_bytes(address)
        raise MapRenderError(f"engine reported a negative image size ({size})")

    class NativeBytes(ctypes.c_ubyte * size):
        pass

    array = NativeBytes.from_address(address)
    weakref.finalize(array, _release_bytes, engine, address, size)
    log.debug("Adopted %d encoded bytes at 0x%x", size, address)
    # ctypes exports '<B'; cast to native 'B' so indexing and tolist() work.
    return memoryview(array).cast("B")


def _release_bytes(engine: RenderingEngine, address: NativeHandle, size: int) -> None:
    engine.free_bytes(address)
    log.debug("Released %d encoded bytes at 0x%x", size, address)
