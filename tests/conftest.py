# tests/conftest.py
"""
Pytest configuration and shared fixtures for the test suite.

The suite never loads libmapserver. `FakeEngine` stands in for it: it keeps
every native object in Python dictionaries keyed by fake addresses, counts
each allocation and free, and fails loudly on any use-after-free.
"""
import ctypes
import gc
import struct
from collections import Counter
from pathlib import Path
from typing import Optional

import pytest

from mapserver_bridge import Context, ErrorCode, RenderingEngine, set_default_context

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

_CODE_STRINGS = {
    ErrorCode.NOERR: "",
    ErrorCode.IOERR: "Unable to access file.",
    ErrorCode.IMGERR: "Image handling error.",
    ErrorCode.PARSEERR: "Parsing error.",
    ErrorCode.MISCERR: "General error message.",
}


class FakeEngine(RenderingEngine):
    """An instrumented, in-memory RenderingEngine."""

    def __init__(self):
        self._next_address = 0x1000
        self.maps: dict[int, dict] = {}
        self.layers: dict[int, dict] = {}
        self.rasters: set[int] = set()
        self.buffers: dict[int, ctypes.Array] = {}
        self.error_records: dict[int, dict] = {}
        self.error_list: list[int] = []
        self.calls: Counter = Counter()
        self.map_frees: Counter = Counter()
        self.byte_frees: Counter = Counter()
        self.raster_frees: Counter = Counter()
        self.name_frees = 0
        self.draw_calls: list[tuple[int, bool]] = []
        self.fail_draw = False
        self.fail_encode = False
        self.raise_in_encode: Optional[Exception] = None

    # --- helpers for tests ---

    def _alloc(self) -> int:
        self._next_address += 0x10
        return self._next_address

    def record_error(self, code: int, routine: str, message: str) -> int:
        record = self._alloc()
        self.error_records[record] = {"code": int(code), "routine": routine, "message": message}
        self.error_list.append(record)
        return record

    def _live_map(self, handle: int) -> dict:
        if handle not in self.maps:
            raise AssertionError(f"use of freed or unknown map 0x{handle:x}")
        return self.maps[handle]

    def _live_layer(self, layer: int) -> dict:
        if layer not in self.layers:
            raise AssertionError(f"use of freed or unknown layer 0x{layer:x}")
        return self.layers[layer]

    def add_layer(self, handle: int, name: Optional[str]) -> int:
        layer = self._alloc()
        self.layers[layer] = {"name": name}
        self._live_map(handle)["layers"].append(layer)
        return layer

    def remove_layer(self, handle: int, index: int) -> None:
        layer = self._live_map(handle)["layers"].pop(index)
        del self.layers[layer]

    @property
    def outstanding_bytes(self) -> int:
        return len(self.buffers)

    # --- map lifecycle ---

    def load_map_definition(self, filename, base_path):
        self.calls["load_map_definition"] += 1
        try:
            text = Path(filename).read_text(encoding="utf-8")
        except OSError as e:
            self.record_error(ErrorCode.IOERR, "msLoadMap()", f"({filename}): {e.strerror}")
            return None

        parsed = _parse_mapfile(text)
        if parsed is None:
            self.record_error(ErrorCode.PARSEERR, "msLoadMap()", f"Parsing error in {filename}")
            return None

        width, height, layer_names = parsed
        handle = self._alloc()
        self.maps[handle] = {"width": width, "height": height, "layers": [], "base_path": base_path}
        for name in layer_names:
            self.add_layer(handle, name)
        return handle

    def free_map(self, handle):
        self.map_frees[handle] += 1
        m = self._live_map(handle)
        for layer in m["layers"]:
            del self.layers[layer]
        del self.maps[handle]

    # --- map fields ---

    def map_width(self, handle):
        return self._live_map(handle)["width"]

    def set_map_width(self, handle, value):
        self._live_map(handle)["width"] = value

    def map_height(self, handle):
        return self._live_map(handle)["height"]

    def set_map_height(self, handle, value):
        self._live_map(handle)["height"] = value

    def map_layer_count(self, handle):
        return len(self._live_map(handle)["layers"])

    def map_layer(self, handle, index):
        return self._live_map(handle)["layers"][index]

    def map_output_format(self, handle):
        self._live_map(handle)
        return 0x42

    # --- layer fields ---

    def layer_name(self, layer):
        return self._live_layer(layer)["name"]

    def set_layer_name(self, layer, name):
        entry = self._live_layer(layer)
        if entry["name"] is not None:
            self.name_frees += 1
        entry["name"] = name

    # --- rendering ---

    def draw(self, handle, query_map=False):
        m = self._live_map(handle)
        self.draw_calls.append((handle, query_map))
        if self.fail_draw:
            self.record_error(ErrorCode.IMGERR, "msDrawMap()", "Unable to initialize image.")
            return None
        raster = self._alloc()
        self.rasters.add(raster)
        self._raster_content = struct.pack("<iiI", m["width"], m["height"], len(m["layers"]))
        return raster

    def encode_raster(self, raster, output_format):
        assert raster in self.rasters, "encoding a freed raster"
        assert output_format == 0x42
        if self.raise_in_encode is not None:
            raise self.raise_in_encode
        if self.fail_encode:
            self.record_error(ErrorCode.IMGERR, "msSaveImageBuffer()", "Unsupported format.")
            return (0, 0)
        data = PNG_SIGNATURE + self._raster_content
        buf = ctypes.create_string_buffer(data, len(data))
        address = ctypes.addressof(buf)
        self.buffers[address] = buf
        return (address, len(data))

    def free_raster(self, raster):
        self.raster_frees[raster] += 1
        self.rasters.remove(raster)

    def free_bytes(self, address):
        self.byte_frees[address] += 1
        del self.buffers[address]

    # --- version ---

    def get_version_string(self):
        return "MapServer version 7.6.4 OUTPUT=PNG SUPPORTS=PROJ"

    def get_version_int(self):
        return 70604

    # --- error list ---

    def reset_error_list(self):
        for record in self.error_list:
            del self.error_records[record]
        self.error_list.clear()

    def get_most_recent_error(self):
        return self.error_list[-1] if self.error_list else None

    def error_code_to_string(self, code):
        return _CODE_STRINGS.get(code, "Unknown error.")

    def error_code(self, record):
        return self.error_records[record]["code"]

    def error_message(self, record):
        return self.error_records[record]["message"]

    def error_routine(self, record):
        return self.error_records[record]["routine"]


def _parse_mapfile(text: str):
    """A tiny subset of the mapfile syntax: MAP, SIZE, LAYER/NAME/END blocks."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if len(lines) < 2 or lines[0] != "MAP" or lines[-1] != "END":
        return None
    width = height = -1
    layer_names = []
    in_layer = False
    for line in lines[1:-1]:
        keyword, _, rest = line.partition(" ")
        if keyword == "LAYER":
            in_layer = True
            layer_names.append(None)
        elif keyword == "END":
            if not in_layer:
                return None
            in_layer = False
        elif keyword == "NAME":
            if in_layer:
                layer_names[-1] = rest.strip().strip('"')
        elif keyword == "SIZE":
            parts = rest.split()
            if len(parts) != 2 or not all(p.lstrip("-").isdigit() for p in parts):
                return None
            width, height = int(parts[0]), int(parts[1])
        else:
            return None
    if in_layer:
        return None
    return width, height, layer_names


def write_mapfile(path: Path, width: int, height: int, layers=()) -> Path:
    body = ["MAP", '  NAME "test"', f"  SIZE {width} {height}"]
    for name in layers:
        body += ["  LAYER", f'    NAME "{name}"', "  END"]
    body.append("END")
    path.write_text("\n".join(body) + "\n", encoding="utf-8")
    return path


def collect():
    """Runs the collector twice so weakref finalizers have fired."""
    gc.collect()
    gc.collect()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def context(engine) -> Context:
    return Context(engine)


@pytest.fixture
def default_context(context):
    """Installs `context` as the default for the module-level functions."""
    previous = set_default_context(context)
    yield context
    set_default_context(previous)


@pytest.fixture
def minimal_mapfile(tmp_path) -> Path:
    """A map definition with a fixed size and no layers."""
    return write_mapfile(tmp_path / "minimal.map", 400, 300)


@pytest.fixture
def layered_mapfile(tmp_path) -> Path:
    return write_mapfile(tmp_path / "layered.map", 640, 480, layers=["roads", "rivers", "towns"])


@pytest.fixture
def malformed_mapfile(tmp_path) -> Path:
    path = tmp_path / "broken.map"
    path.write_text("MAP\n  SIZE wide tall\n", encoding="utf-8")
    return path


@pytest.fixture
def layered_map(context, layered_mapfile):
    m = context.load_map(str(layered_mapfile))
    yield m
    m.close()
