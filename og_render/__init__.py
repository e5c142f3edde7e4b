"""Layout, SVG serialization and rasterization for meeting preview images."""

from __future__ import annotations

from .document import RenderMode, render_vector
from .layout import HEIGHT, WIDTH, compose, escape_markup
from .qr_matrix import PayloadTooLarge, QrMatrix, encode
from .raster import RasterizationFailed, rasterize

__all__ = [
    "HEIGHT",
    "WIDTH",
    "PayloadTooLarge",
    "QrMatrix",
    "RasterizationFailed",
    "RenderMode",
    "compose",
    "encode",
    "escape_markup",
    "rasterize",
    "render_vector",
]
