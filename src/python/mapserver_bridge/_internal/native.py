# mapserver_bridge/_internal/native.py

"""
The ctypes binding to the MapServer shared library.

This module isolates the C/Python boundary from the rest of the library:
nothing outside it touches ctypes pointers to MapServer structures.
"""

import ctypes
import ctypes.util
import logging
import os
import re
from typing import Optional

from ..abc import RenderingEngine
from ..exceptions import MapserverConfigError
from ..types import NativeHandle
from .structs import MS_FALSE, MS_NOERR, MS_TRUE, ErrorObjStruct, ImageObjPrefix, MapObjPrefix

log = logging.getLogger(__name__)

LIBRARY_PATH_ENV = "MAPSERVER_LIBRARY_PATH"

# MapServer 8 added a config argument to msLoadMap and dropped url_string
# from msUpdateLayerFromString.
_MAPSERVER_8 = 80000

# Layer-level keywords are written one indent level (two spaces) deep.
_LAYER_NAME_RE = re.compile(r"""^ {2}NAME\s+(["'])(.*)\1\s*$""", re.MULTILINE)

_ENCODING = "utf-8"


def _decode(raw: Optional[bytes]) -> str:
    if raw is None:
        return ""
    return raw.decode(_ENCODING, errors="replace")


def _quote_mapfile_string(value: str) -> str:
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _unquote_mapfile_string(quote: str, body: str) -> str:
    if quote != '"' or "\\" not in body:
        return body
    return re.sub(r'\\(["\\])', r"\1", body)


def _find_library(path: Optional[str]) -> str:
    path = path or os.environ.get(LIBRARY_PATH_ENV)
    if path:
        if not os.path.exists(path):
            raise MapserverConfigError(f"MapServer library not found at {path}")
        return path
    found = ctypes.util.find_library("mapserver")
    if found is None:
        raise MapserverConfigError(
            f"Could not find libmapserver. Install MapServer or set {LIBRARY_PATH_ENV}."
        )
    return found


def _configure_library(lib: ctypes.CDLL, version: int) -> None:
    """Configure ctypes function signatures"""
    vp = ctypes.c_void_p

    if version >= _MAPSERVER_8:
        lib.msLoadMap.argtypes = [ctypes.c_char_p, ctypes.c_char_p, vp]
    else:
        lib.msLoadMap.argtypes = [ctypes.c_char_p, ctypes.c_char_p]
    lib.msLoadMap.restype = vp

    lib.msFreeMap.argtypes = [vp]
    lib.msFreeMap.restype = None

    lib.msDrawMap.argtypes = [vp, ctypes.c_int]
    lib.msDrawMap.restype = vp

    lib.msSaveImageBuffer.argtypes = [vp, ctypes.POINTER(ctypes.c_int), vp]
    lib.msSaveImageBuffer.restype = vp

    lib.msFreeImage.argtypes = [vp]
    lib.msFreeImage.restype = None

    lib.msFree.argtypes = [vp]
    lib.msFree.restype = None

    lib.msGetVersion.argtypes = []
    lib.msGetVersion.restype = ctypes.c_char_p

    lib.msResetErrorList.argtypes = []
    lib.msResetErrorList.restype = None

    lib.msGetErrorObj.argtypes = []
    lib.msGetErrorObj.restype = vp

    lib.msGetErrorCodeString.argtypes = [ctypes.c_int]
    lib.msGetErrorCodeString.restype = ctypes.c_char_p

    lib.msWriteLayerToString.argtypes = [vp]
    lib.msWriteLayerToString.restype = vp

    if version >= _MAPSERVER_8:
        lib.msUpdateLayerFromString.argtypes = [vp, ctypes.c_char_p]
    else:
        lib.msUpdateLayerFromString.argtypes = [vp, ctypes.c_char_p, ctypes.c_int]
    lib.msUpdateLayerFromString.restype = ctypes.c_int


class LibMapServer(RenderingEngine):
    """
    RenderingEngine backed by libmapserver.

    Args:
        path: Path to the shared library. Defaults to the
            MAPSERVER_LIBRARY_PATH environment variable, then to the
            system library search path.
    """

    def __init__(self, path: Optional[str] = None):
        lib_path = _find_library(path)
        try:
            lib = ctypes.CDLL(lib_path)
        except OSError as e:
            raise MapserverConfigError(f"Failed to load MapServer library from {lib_path}: {e}") from e

        lib.msGetVersionInt.argtypes = []
        lib.msGetVersionInt.restype = ctypes.c_int
        self._version = lib.msGetVersionInt()
        _configure_library(lib, self._version)
        self._lib = lib
        self._engine_key = ("libmapserver", lib._handle)
        log.debug("Loaded %s (version %d)", lib_path, self._version)

    @property
    def engine_key(self):
        # dlopen returns the same handle for every load of one library, so
        # all engines over it share the process-wide map and error state.
        return self._engine_key

    # --- map lifecycle ---

    def load_map_definition(self, filename: str, base_path: Optional[str]) -> Optional[NativeHandle]:
        args = [filename.encode(_ENCODING), base_path.encode(_ENCODING) if base_path is not None else None]
        if self._version >= _MAPSERVER_8:
            args.append(None)
        return self._lib.msLoadMap(*args)

    def free_map(self, handle: NativeHandle) -> None:
        self._lib.msFreeMap(handle)

    # --- map fields ---

    @staticmethod
    def _map(handle: NativeHandle) -> MapObjPrefix:
        return MapObjPrefix.from_address(handle)

    def map_width(self, handle: NativeHandle) -> int:
        return self._map(handle).width

    def set_map_width(self, handle: NativeHandle, value: int) -> None:
        self._map(handle).width = value

    def map_height(self, handle: NativeHandle) -> int:
        return self._map(handle).height

    def set_map_height(self, handle: NativeHandle, value: int) -> None:
        self._map(handle).height = value

    def map_layer_count(self, handle: NativeHandle) -> int:
        return self._map(handle).numlayers

    def map_layer(self, handle: NativeHandle, index: int) -> NativeHandle:
        return self._map(handle).layers[index]

    def map_output_format(self, handle: NativeHandle) -> Optional[NativeHandle]:
        # msDrawMap draws with the map's current output format, so the
        # raster's own format is the map's.
        return None

    # --- layer fields ---

    def layer_name(self, layer: NativeHandle) -> Optional[str]:
        raw = self._lib.msWriteLayerToString(layer)
        if not raw:
            return None
        try:
            text = _decode(ctypes.string_at(raw))
        finally:
            self._lib.msFree(raw)
        match = _LAYER_NAME_RE.search(text)
        return _unquote_mapfile_string(match.group(1), match.group(2)) if match else None

    def set_layer_name(self, layer: NativeHandle, name: str) -> None:
        # The mapfile parser frees the previous name before storing the new one.
        snippet = f"LAYER NAME {_quote_mapfile_string(name)} END".encode(_ENCODING)
        if self._version >= _MAPSERVER_8:
            status = self._lib.msUpdateLayerFromString(layer, snippet)
        else:
            status = self._lib.msUpdateLayerFromString(layer, snippet, MS_FALSE)
        if status != 0:
            log.warning("msUpdateLayerFromString rejected layer name %r", name)

    # --- rendering ---

    def draw(self, handle: NativeHandle, query_map: bool = False) -> Optional[NativeHandle]:
        return self._lib.msDrawMap(handle, MS_TRUE if query_map else MS_FALSE)

    def encode_raster(
        self,
        raster: NativeHandle,
        output_format: Optional[NativeHandle]
    ) -> tuple[NativeHandle, int]:
        if output_format is None:
            output_format = ImageObjPrefix.from_address(raster).format
        size = ctypes.c_int(0)
        address = self._lib.msSaveImageBuffer(raster, ctypes.byref(size), output_format)
        return (address or 0, size.value)

    def free_raster(self, raster: NativeHandle) -> None:
        self._lib.msFreeImage(raster)

    def free_bytes(self, address: NativeHandle) -> None:
        self._lib.msFree(address)

    # --- version ---

    def get_version_string(self) -> str:
        return _decode(self._lib.msGetVersion())

    def get_version_int(self) -> int:
        return self._version

    # --- error list ---

    def reset_error_list(self) -> None:
        self._lib.msResetErrorList()

    def get_most_recent_error(self) -> Optional[NativeHandle]:
        # msGetErrorObj always returns the list head; an empty list is a
        # head with code MS_NOERR.
        record = self._lib.msGetErrorObj()
        if not record or ErrorObjStruct.from_address(record).code == MS_NOERR:
            return None
        return record

    def error_code_to_string(self, code: int) -> str:
        return _decode(self._lib.msGetErrorCodeString(code))

    def error_code(self, record: NativeHandle) -> int:
        return ErrorObjStruct.from_address(record).code

    def error_message(self, record: NativeHandle) -> str:
        return _decode(ErrorObjStruct.from_address(record).message)

    def error_routine(self, record: NativeHandle) -> str:
        return _decode(ErrorObjStruct.from_address(record).routine)
