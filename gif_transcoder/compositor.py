"""Render animation frames onto the logical screen.

The appearance of a frame depends on what earlier frames left behind, so the
compositor keeps the canvas between calls and receives the previous frame's
descriptor as explicit carried state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .canvas import Canvas
from .color import RGB, TRANSPARENT, ColorARGB, from_rgb
from .errors import CorruptFrameError
from .frame import DisposalMode, FrameDescriptor


@dataclass(frozen=True)
class PreviousFrame:
    """Disposal state carried from one frame to the next."""

    descriptor: Optional[FrameDescriptor]
    disposal: DisposalMode

    @classmethod
    def initial(cls) -> "PreviousFrame":
        return cls(None, DisposalMode.UNSPECIFIED)


def render_frame(
    canvas: Canvas,
    frame_index: int,
    descriptor: FrameDescriptor,
    raster: Sequence[int],
    palette: Sequence[RGB],
    background: ColorARGB,
    previous: PreviousFrame,
) -> PreviousFrame:
    """Dispose of the previous frame, then paint this one onto ``canvas``.

    Returns the state to pass as ``previous`` when rendering the next frame.
    Raises CorruptFrameError if the frame does not fit on the canvas or uses a
    color index outside ``palette``; pixels painted before the bad index stay
    painted, nothing after it is written.
    """
    _check_bounds(canvas, frame_index, descriptor, raster)
    _dispose_previous(canvas, frame_index, background, previous)

    transparent_index = descriptor.transparent_index
    skip_transparent = frame_index > 0 and previous.disposal is DisposalMode.DO_NOT_DISPOSE
    colors = [from_rgb(entry) for entry in palette]
    if transparent_index is not None and transparent_index < len(colors):
        colors[transparent_index] = TRANSPARENT
    color_count = len(colors)

    pixels = canvas.pixels
    stride = canvas.width
    width = descriptor.width
    for y in range(descriptor.height):
        row = y * width
        offset = (y + descriptor.top) * stride + descriptor.left
        for x in range(width):
            color_index = raster[row + x]
            if color_index >= color_count:
                raise CorruptFrameError(
                    f"color index {color_index} is out of bounds (count={color_count})",
                    frame_index,
                )
            # Transparent pixels must not erase what the previous frame left.
            if skip_transparent and color_index == transparent_index:
                continue
            pixels[offset + x] = colors[color_index]

    return PreviousFrame(descriptor, descriptor.disposal)


def _dispose_previous(
    canvas: Canvas, frame_index: int, background: ColorARGB, previous: PreviousFrame
) -> None:
    if frame_index == 0:
        canvas.fill(background)
        return

    disposal = previous.disposal
    if disposal is DisposalMode.RESTORE_BACKGROUND:
        # Cleared to transparent: once frames have been painted the canvas has
        # no separate background layer to restore.
        prev = previous.descriptor
        if prev is not None:
            canvas.fill_rect(prev.left, prev.top, prev.width, prev.height, TRANSPARENT)
    elif disposal is DisposalMode.RESTORE_PREVIOUS:
        # No snapshot is kept; rendered like DO_NOT_DISPOSE.
        pass
    elif disposal in (DisposalMode.DO_NOT_DISPOSE, DisposalMode.UNSPECIFIED):
        pass
    else:
        raise ValueError(f"unknown disposal mode: {disposal!r}")


def _check_bounds(
    canvas: Canvas, frame_index: int, descriptor: FrameDescriptor, raster: Sequence[int]
) -> None:
    if (
        descriptor.left + descriptor.width > canvas.width
        or descriptor.top + descriptor.height > canvas.height
    ):
        raise CorruptFrameError(
            f"frame {descriptor.width}x{descriptor.height}+{descriptor.left}+{descriptor.top} "
            f"extends beyond the {canvas.width}x{canvas.height} logical screen",
            frame_index,
        )
    if len(raster) != descriptor.pixel_count:
        raise CorruptFrameError(
            f"raster holds {len(raster)} pixels, expected {descriptor.pixel_count}",
            frame_index,
        )
