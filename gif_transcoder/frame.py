"""Per-frame metadata shared by the decoder, compositor and encoder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence

from .color import RGB


class DisposalMode(IntEnum):
    """What happens to a frame's area before the next frame is drawn.

    Values are the 3-bit codes stored in the Graphic Control Extension.
    """

    UNSPECIFIED = 0
    DO_NOT_DISPOSE = 1
    RESTORE_BACKGROUND = 2
    RESTORE_PREVIOUS = 3

    @classmethod
    def from_code(cls, code: int) -> "DisposalMode":
        """Map a raw field value; reserved codes 4-7 read as UNSPECIFIED."""
        try:
            return cls(code)
        except ValueError:
            return cls.UNSPECIFIED


@dataclass(frozen=True)
class FrameDescriptor:
    """Position, size and rendering hints of one frame.

    Attributes:
        left: Column of the frame's top-left corner on the logical screen.
        top: Row of the frame's top-left corner on the logical screen.
        width: Frame width in pixels.
        height: Frame height in pixels.
        disposal: How to dispose of the frame before the next one.
        transparent_index: Palette index rendered as "nothing", or None.
        delay_cs: Delay in centiseconds (1/100 sec).
    """

    left: int
    top: int
    width: int
    height: int
    disposal: DisposalMode = DisposalMode.UNSPECIFIED
    transparent_index: Optional[int] = None
    delay_cs: int = 0

    def __post_init__(self) -> None:
        if self.left < 0 or self.top < 0:
            raise ValueError("left and top must be >= 0")
        if self.width < 0 or self.height < 0:
            raise ValueError("width and height must be >= 0")
        if self.transparent_index is not None and not 0 <= self.transparent_index <= 255:
            raise ValueError("transparent_index must be in range 0..255")
        if self.delay_cs < 0:
            raise ValueError("delay_cs must be >= 0")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class DecodedFrame:
    """One frame as produced by the reader.

    ``raster`` holds ``descriptor.width * descriptor.height`` palette indexes in
    row-major order. ``palette`` is the local color table when the frame has
    one, otherwise the global one.
    """

    descriptor: FrameDescriptor
    raster: bytes
    palette: Sequence[RGB]
    has_local_palette: bool = False
