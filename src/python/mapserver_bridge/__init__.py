# mapserver_bridge/__init__.py
"""
Python bindings for the MapServer rendering engine.

Load a map definition, inspect and change it, and render it to an encoded
image buffer:

    import mapserver_bridge as ms

    with ms.load_map("world.map") as m:
        m.width, m.height = 800, 600
        for layer in m.layers:
            print(layer.name)
        png = m.draw_map()

Engine calls that fail softly do not raise: they record an error in the
engine's error list, which must be polled with `get_error()`.
"""
from typing import Optional

from .context import Context, get_default_context, set_default_context
from .map import Map, LayerCollection
from .layer import Layer
from .error import ErrorObj
from .abc import RenderingEngine
from .types import ErrorCode
from .dataclasses import ErrorInfo, VersionInfo
from .exceptions import (
    MapserverError,
    MapserverConfigError,
    MapserverOperationError,
    MapLoadError,
    MapRenderError,
    ClosedHandleError,
    StaleErrorError,
    HandleOwnershipError,
)
from .convenience import render_file, render_array

__version__ = "0.1.0"


def load_map(filename: str, path: Optional[str] = None) -> Map:
    """
    Loads a map definition with the default context.

    Args:
        filename (str): Path to the map definition file.
        path (str, optional): Base path for relative paths inside the file.

    Returns:
        A Map that owns the loaded native map.

    Raises:
        TypeError: If an argument is not a string.
        MapLoadError: If the engine could not load the definition.
        MapserverConfigError: If the MapServer library cannot be loaded.
    """
    return get_default_context().load_map(filename, path)


def get_version() -> str:
    """The engine's version string, including compiled-in features."""
    return get_default_context().get_version()


def get_version_int() -> int:
    """The engine's version as MAJOR*10000 + MINOR*100 + PATCH."""
    return get_default_context().get_version_int()


def version_info() -> VersionInfo:
    return get_default_context().version_info()


def reset_error_list() -> None:
    """Clears the engine's error list."""
    get_default_context().reset_error_list()


def get_error() -> Optional[ErrorObj]:
    """The most recent engine error, or None if none is recorded."""
    return get_default_context().get_error()


loadMap = load_map
getVersion = get_version
getVersionInt = get_version_int
resetErrorList = reset_error_list
getError = get_error


# Define what gets imported with 'from mapserver_bridge import *'
__all__ = [
    'load_map',
    'get_version',
    'get_version_int',
    'version_info',
    'reset_error_list',
    'get_error',
    'loadMap',
    'getVersion',
    'getVersionInt',
    'resetErrorList',
    'getError',
    'render_file',
    'render_array',
    'Context',
    'get_default_context',
    'set_default_context',
    'Map',
    'LayerCollection',
    'Layer',
    'ErrorObj',
    'RenderingEngine',
    'ErrorCode',
    'ErrorInfo',
    'VersionInfo',
    'MapserverError',
    'MapserverConfigError',
    'MapserverOperationError',
    'MapLoadError',
    'MapRenderError',
    'ClosedHandleError',
    'StaleErrorError',
    'HandleOwnershipError',
    '__version__',
]
