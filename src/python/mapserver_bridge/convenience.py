# mapserver_bridge/convenience.py
"""
High-level convenience functions for one-shot rendering.
"""
from pathlib import Path
from typing import Optional, Union

import numpy as np

from .context import Context, get_default_context
from .map import Map


def _load_sized(
    context: Optional[Context],
    mapfile: str,
    base_path: Optional[str],
    width: Optional[int],
    height: Optional[int],
) -> Map:
    ctx = context or get_default_context()
    m = ctx.load_map(mapfile, base_path)
    try:
        if width is not None:
            m.width = width
        if height is not None:
            m.height = height
    except BaseException:
        m.close()
        raise
    return m


def render_file(
    mapfile: str,
    output_path: Union[str, Path],
    *,
    base_path: Optional[str] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    context: Optional[Context] = None
) -> int:
    """
    Renders a map definition straight to an image file.

    Args:
        mapfile: Path to the map definition.
        output_path: Where to write the encoded image.
        base_path: (Optional) Base path for relative paths in the definition.
        width, height: (Optional) Override the image size from the definition.
        context: (Optional) The context to load with; the default one if None.

    Returns:
        The number of bytes written.
    """
    with _load_sized(context, mapfile, base_path, width, height) as m:
        image = m.draw_map()
        with open(output_path, "wb") as f:
            return f.write(image)


def render_array(
    mapfile: str,
    *,
    base_path: Optional[str] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    context: Optional[Context] = None
) -> np.ndarray:
    """
    Renders a map definition and returns the encoded image as a uint8 array.

    Unlike `Map.draw_array()`, the returned array owns a copy of the bytes,
    so no native memory is held once this function returns.
    """
    with _load_sized(context, mapfile, base_path, width, height) as m:
        return m.draw_array().copy()
