"""True-color drawing surface the size of the GIF logical screen."""

from __future__ import annotations

from typing import List

from .color import TRANSPARENT, ColorARGB


class Canvas:
    """Row-major grid of ARGB colors; pixel ``(x, y)`` lives at ``y * width + x``.

    Coordinates are a caller precondition. They are checked with ``assert``
    only, so the checks vanish under ``python -O``.
    """

    def __init__(self, width: int, height: int, color: ColorARGB = TRANSPARENT):
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        self.width = width
        self.height = height
        self.pixels: List[ColorARGB] = [color] * (width * height)

    def get_pixel(self, x: int, y: int) -> ColorARGB:
        assert 0 <= x < self.width and 0 <= y < self.height, (x, y)
        return self.pixels[y * self.width + x]

    def set_pixel(self, x: int, y: int, color: ColorARGB) -> None:
        assert 0 <= x < self.width and 0 <= y < self.height, (x, y)
        self.pixels[y * self.width + x] = color

    def fill(self, color: ColorARGB) -> None:
        self.pixels[:] = [color] * (self.width * self.height)

    def fill_rect(self, left: int, top: int, width: int, height: int, color: ColorARGB) -> None:
        assert left >= 0 and top >= 0 and width >= 0 and height >= 0
        assert left + width <= self.width and top + height <= self.height
        row = [color] * width
        for y in range(top, top + height):
            start = y * self.width + left
            self.pixels[start : start + width] = row
