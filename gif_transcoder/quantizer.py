"""Halve a rendered canvas and map it back onto a palette."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .canvas import Canvas
from .color import MAX_COLOR_DISTANCE, RGB, ColorARGB, alpha, average, distance, from_rgb
from .errors import GifFormatError


def downsample(canvas: Canvas) -> List[ColorARGB]:
    """Box-filter ``canvas`` down to half its size.

    The result is ``(canvas.width // 2) * (canvas.height // 2)`` colors in
    row-major order. With an odd width or height the last column or row is
    dropped.
    """
    pixels = canvas.pixels
    stride = canvas.width
    out: List[ColorARGB] = []
    for oy in range(canvas.height // 2):
        top = 2 * oy * stride
        bottom = top + stride
        for ox in range(canvas.width // 2):
            x = 2 * ox
            out.append(
                average(pixels[top + x], pixels[top + x + 1], pixels[bottom + x], pixels[bottom + x + 1])
            )
    return out


def find_best_color(
    colors: Sequence[ColorARGB], transparent_index: Optional[int], color: ColorARGB
) -> int:
    """Index of the palette color closest to ``color``.

    A fully transparent ``color`` maps straight to ``transparent_index`` when
    there is one. Otherwise the transparent slot is skipped and ties go to the
    lowest index.
    """
    if not colors:
        raise GifFormatError("palette must not be empty")
    if transparent_index is not None and alpha(color) == 0:
        return transparent_index

    best_index = None
    best_distance = MAX_COLOR_DISTANCE
    for i, candidate in enumerate(colors):
        if i == transparent_index:
            continue
        d = distance(color, candidate)
        if best_index is None or d < best_distance:
            best_index = i
            best_distance = d
            if d == 0:
                break

    if best_index is None:
        # The transparent color is the only entry.
        return transparent_index
    return best_index


def quantize(canvas: Canvas, palette: Sequence[RGB], transparent_index: Optional[int]) -> bytes:
    """Downsample ``canvas`` and return the half-size raster of palette indexes."""
    if not palette:
        raise GifFormatError("palette must not be empty")
    colors = [from_rgb(entry) for entry in palette]
    if transparent_index is not None and transparent_index >= len(colors):
        transparent_index = None

    cache: Dict[ColorARGB, int] = {}
    raster = bytearray()
    for color in downsample(canvas):
        index = cache.get(color)
        if index is None:
            index = find_best_color(colors, transparent_index, color)
            cache[color] = index
        raster.append(index)
    return bytes(raster)
