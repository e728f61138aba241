"""GIF reader producing raw per-frame index rasters.

Frames are handed out exactly as stored (position, palette indexes, disposal
and transparency), without any compositing.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import BinaryIO, Iterator, List, NamedTuple, Optional, Tuple

from .color import RGB
from .errors import CorruptFrameError, GifError, GifFormatError, GifOpenError
from .frame import DecodedFrame, DisposalMode, FrameDescriptor
from .lzw import lzw_decode

logger = logging.getLogger(__name__)

EXTENSION_INTRODUCER = 0x21
IMAGE_SEPARATOR = 0x2C
TRAILER = 0x3B

GRAPHIC_CONTROL_LABEL = 0xF9
APPLICATION_LABEL = 0xFF

LOOP_APPLICATIONS = (b"NETSCAPE2.0", b"ANIMEXTS1.0")


class _GraphicControl(NamedTuple):
    disposal: DisposalMode
    transparent_index: Optional[int]
    delay_cs: int


def deinterlace(raster: bytes, width: int, height: int) -> bytes:
    """Reorder rows stored in GIF's four-pass interlaced order."""
    rows: List[Optional[bytes]] = [None] * height
    src = 0
    for start, step in ((0, 8), (4, 8), (2, 4), (1, 2)):
        for y in range(start, height, step):
            rows[y] = raster[src * width : (src + 1) * width]
            src += 1
    return b"".join(rows)


class GifReader:
    """Read session over one GIF file.

    The logical screen and global color table are parsed on open; frames are
    decoded lazily by ``frames()``, which can be iterated only once. Use as a
    context manager or call ``close()``, which may be called any number of
    times.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.version = ""
        self.width = 0
        self.height = 0
        self.background_index: Optional[int] = None
        self.global_palette: Optional[Tuple[RGB, ...]] = None
        self.loop_count: Optional[int] = None
        self._started = False

        try:
            self._handle: Optional[BinaryIO] = self.path.open("rb")
        except OSError as exc:
            raise GifOpenError(f"could not open input GIF: {self.path} ({exc})") from exc

        try:
            self._read_screen()
        except GifError as exc:
            self.close()
            raise GifOpenError(f"could not decode input GIF: {self.path} ({exc})") from exc

        logger.debug(
            f"Opened {self.path}: {self.version}, {self.width}x{self.height}, "
            f"global palette={len(self.global_palette) if self.global_palette else None}"
        )

    def __enter__(self) -> "GifReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def frames(self) -> Iterator[DecodedFrame]:
        """Yield every frame in file order."""
        if self._started:
            raise ValueError("frames can only be read once per session")
        self._started = True
        return self._iter_frames()

    def _iter_frames(self) -> Iterator[DecodedFrame]:
        control: Optional[_GraphicControl] = None
        index = 0
        while True:
            block = self._read(1)[0]
            if block == EXTENSION_INTRODUCER:
                label = self._read(1)[0]
                if label == GRAPHIC_CONTROL_LABEL:
                    control = self._read_graphic_control()
                elif label == APPLICATION_LABEL:
                    self._read_application()
                else:
                    self._skip_sub_blocks()
            elif block == IMAGE_SEPARATOR:
                frame = self._read_image(index, control)
                control = None
                index += 1
                yield frame
            elif block == TRAILER:
                logger.debug(f"Reached trailer of {self.path} after {index} frames")
                return
            else:
                raise GifFormatError(f"invalid block type 0x{block:02x}")

    def _read(self, length: int) -> bytes:
        if self._handle is None:
            raise GifFormatError("reader is closed")
        try:
            data = self._handle.read(length)
        except OSError as exc:
            raise GifFormatError(f"error reading {self.path}: {exc}") from exc
        if len(data) < length:
            raise GifFormatError("unexpected end of file")
        return data

    def _read_sub_blocks(self) -> Iterator[bytes]:
        size = self._read(1)[0]
        while size:
            chunk = self._read(size + 1)
            yield chunk[:-1]
            size = chunk[-1]

    def _skip_sub_blocks(self) -> None:
        for _ in self._read_sub_blocks():
            pass

    def _read_color_table(self, size_field: int) -> Tuple[RGB, ...]:
        count = 2 << size_field
        data = self._read(count * 3)
        return tuple((data[i], data[i + 1], data[i + 2]) for i in range(0, len(data), 3))

    def _read_screen(self) -> None:
        signature = self._read(6)
        if signature[:3] != b"GIF":
            raise GifFormatError("not a GIF file")
        if signature[3:] not in (b"87a", b"89a"):
            logger.warning(f"Unknown GIF version {signature[3:]!r} in {self.path}")
        self.version = signature.decode("ascii", "replace")

        width, height, packed, background, _aspect = struct.unpack("<HHBBB", self._read(7))
        self.width = width
        self.height = height
        if packed & 0x80:
            self.global_palette = self._read_color_table(packed & 0x07)
            self.background_index = background

    def _read_graphic_control(self) -> _GraphicControl:
        size = self._read(1)[0]
        data = self._read(size)
        self._skip_sub_blocks()
        if size < 4:
            raise GifFormatError(f"graphic control extension too short ({size} bytes)")

        packed, delay, transparent = struct.unpack("<BHB", data[:4])
        return _GraphicControl(
            disposal=DisposalMode.from_code((packed >> 2) & 0x07),
            transparent_index=transparent if packed & 0x01 else None,
            delay_cs=delay,
        )

    def _read_application(self) -> None:
        size = self._read(1)[0]
        identifier = self._read(size)
        blocks = list(self._read_sub_blocks())
        if identifier in LOOP_APPLICATIONS and blocks and len(blocks[0]) >= 3 and blocks[0][0] == 1:
            self.loop_count = blocks[0][1] | blocks[0][2] << 8

    def _read_image(self, index: int, control: Optional[_GraphicControl]) -> DecodedFrame:
        left, top, width, height, packed = struct.unpack("<HHHHB", self._read(9))

        has_local_palette = bool(packed & 0x80)
        if has_local_palette:
            palette = self._read_color_table(packed & 0x07)
        elif self.global_palette is not None:
            palette = self.global_palette
        else:
            raise CorruptFrameError("no color table for frame", index)

        if left + width > self.width or top + height > self.height:
            raise CorruptFrameError(
                f"frame {width}x{height}+{left}+{top} extends beyond the "
                f"{self.width}x{self.height} logical screen",
                index,
            )

        min_code_size = self._read(1)[0]
        data = b"".join(self._read_sub_blocks())
        raster = lzw_decode(data, min_code_size, width * height)
        if packed & 0x40:
            raster = deinterlace(raster, width, height)

        if control is None:
            control = _GraphicControl(DisposalMode.UNSPECIFIED, None, 0)
        transparent_index = control.transparent_index
        if transparent_index is not None and transparent_index >= len(palette):
            logger.debug(f"Frame {index}: ignoring transparent index {transparent_index} outside palette")
            transparent_index = None

        descriptor = FrameDescriptor(
            left=left,
            top=top,
            width=width,
            height=height,
            disposal=control.disposal,
            transparent_index=transparent_index,
            delay_cs=control.delay_cs,
        )
        logger.debug(
            f"Decoded frame {index}: {width}x{height}+{left}+{top}, disposal={descriptor.disposal.name}, "
            f"transparent={transparent_index}, local palette={has_local_palette}"
        )
        return DecodedFrame(descriptor, raster, palette, has_local_palette)
