"""Packed ARGB8888 colors.

A color is a plain ``int`` laid out as ``0xAARRGGBB``. GIF only knows binary
transparency, so anything painted has alpha 0 or 255; averages may fall
in between.
"""

from __future__ import annotations

from typing import Sequence, Tuple

ColorARGB = int
RGB = Tuple[int, int, int]

TRANSPARENT: ColorARGB = 0x00000000

MAX_COLOR_DISTANCE = 255 * 255 * 3


def alpha(color: ColorARGB) -> int:
    return (color >> 24) & 0xFF


def red(color: ColorARGB) -> int:
    return (color >> 16) & 0xFF


def green(color: ColorARGB) -> int:
    return (color >> 8) & 0xFF


def blue(color: ColorARGB) -> int:
    return color & 0xFF


def make_argb(a: int, r: int, g: int, b: int) -> ColorARGB:
    return (a & 0xFF) << 24 | (r & 0xFF) << 16 | (g & 0xFF) << 8 | (b & 0xFF)


def unpack(color: ColorARGB) -> tuple[int, int, int, int]:
    """Split a color into its ``(a, r, g, b)`` channels."""
    return alpha(color), red(color), green(color), blue(color)


def from_rgb(rgb: Sequence[int]) -> ColorARGB:
    """Convert a palette entry to an opaque color.

    Palette entries carry no alpha of their own.
    """
    if len(rgb) != 3:
        raise ValueError("palette color must be RGB tuple")
    r, g, b = rgb
    if min(r, g, b) < 0 or max(r, g, b) > 255:
        raise ValueError("palette values must be in range 0..255")
    return make_argb(0xFF, r, g, b)


def average(c1: ColorARGB, c2: ColorARGB, c3: ColorARGB, c4: ColorARGB) -> ColorARGB:
    """Per-channel mean of four colors, alpha included.

    Uses truncating division, never rounding, so a uniform block averages
    back to exactly the same color.
    """
    return make_argb(
        (alpha(c1) + alpha(c2) + alpha(c3) + alpha(c4)) // 4,
        (red(c1) + red(c2) + red(c3) + red(c4)) // 4,
        (green(c1) + green(c2) + green(c3) + green(c4)) // 4,
        (blue(c1) + blue(c2) + blue(c3) + blue(c4)) // 4,
    )


def distance(c1: ColorARGB, c2: ColorARGB) -> int:
    """Squared euclidean distance over red, green and blue (alpha ignored)."""
    dr = red(c1) - red(c2)
    dg = green(c1) - green(c2)
    db = blue(c1) - blue(c2)
    return dr * dr + dg * dg + db * db
