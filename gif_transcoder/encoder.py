"""Streaming animated GIF writer."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Tuple

from .color import RGB
from .errors import GifError, GifOpenError
from .frame import FrameDescriptor
from .lzw import lzw_encode, min_code_size_for, split_sub_blocks

logger = logging.getLogger(__name__)


def _u16(value: int) -> bytes:
    return bytes((value & 0xFF, (value >> 8) & 0xFF))


def _validate_palette(palette: Sequence[RGB]) -> Tuple[RGB, ...]:
    if not palette:
        raise ValueError("palette must not be empty")
    if len(palette) > 256:
        raise ValueError("palette cannot exceed 256 colors")
    for color in palette:
        if len(color) != 3:
            raise ValueError("palette color must be RGB tuple")
        if min(color) < 0 or max(color) > 255:
            raise ValueError("palette values must be in range 0..255")
    return tuple(tuple(color) for color in palette)


def _color_table(palette: Sequence[RGB]) -> Tuple[int, bytes]:
    """Return the 3-bit size field and the padded table bytes."""
    size_pow = 1
    while (1 << size_pow) < len(palette):
        size_pow += 1

    table = bytearray()
    for r, g, b in palette:
        table.extend((r, g, b))
    table.extend(b"\x00" * (((1 << size_pow) - len(palette)) * 3))
    return size_pow - 1, bytes(table)


class GifWriter:
    """Write session for one GIF89a file.

    The header, logical screen descriptor and optional global color table are
    written on open. Each ``add_frame`` call appends one image in display
    order. Everything goes to a temporary file next to ``path``; ``close()``
    writes the trailer and moves it into place. Leaving the ``with`` block
    because of an exception calls ``discard()`` instead, which removes the
    temporary file and leaves any existing file at ``path`` untouched.

    Notes:
        - Frames whose palette equals the global one reference it; any other
          palette is written as a local color table.
        - ``loop`` is written as a NETSCAPE2.0 extension just before the first
          frame, so it can still be changed until then. None writes no loop
          extension.
    """

    def __init__(
        self,
        path: str | Path,
        width: int,
        height: int,
        palette: Optional[Sequence[RGB]] = None,
        background_index: int = 0,
        loop: Optional[int] = None,
    ):
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        if width > 0xFFFF or height > 0xFFFF:
            raise ValueError("width and height must be <= 65535")
        self.width = width
        self.height = height
        self.palette = _validate_palette(palette) if palette is not None else None
        if not 0 <= background_index <= 255:
            raise ValueError("background_index must be in range 0..255")
        self.background_index = background_index
        self.loop = loop
        self.frame_count = 0
        self.path = Path(path)
        self._tmp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")

        try:
            self._handle: Optional[BinaryIO] = self._tmp_path.open("xb")
        except OSError as exc:
            raise GifOpenError(f"could not create output GIF: {self.path} ({exc})") from exc

        try:
            self._write(self._header())
        except GifError:
            self.discard()
            raise

    def __enter__(self) -> "GifWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.discard()

    def add_frame(self, descriptor: FrameDescriptor, raster: Sequence[int], palette: Sequence[RGB]) -> None:
        """Append one frame.

        Args:
            descriptor: Placement, disposal, transparency and delay.
            raster: ``descriptor.width * descriptor.height`` palette indexes.
            palette: Colors the raster indexes refer to.
        """
        if self._handle is None:
            raise ValueError("writer is closed")
        if descriptor.left + descriptor.width > self.width or descriptor.top + descriptor.height > self.height:
            raise ValueError("frame must lie within the logical screen")
        if len(raster) != descriptor.pixel_count:
            raise ValueError("raster length must be width * height")
        palette = _validate_palette(palette)
        for index in raster:
            if index < 0 or index >= len(palette):
                raise ValueError(f"palette index out of range: {index}")
        if descriptor.transparent_index is not None and descriptor.transparent_index >= len(palette):
            raise ValueError(f"transparent index out of range: {descriptor.transparent_index}")

        data = bytearray()
        if self.frame_count == 0 and self.loop is not None:
            data.extend(self._loop_extension(self.loop))
        data.extend(self._graphics_control_extension(descriptor))
        data.extend(self._image_descriptor(descriptor, None if palette == self.palette else palette))
        data.extend(self._image_data(raster, len(palette)))
        self._write(bytes(data))

        self.frame_count += 1
        logger.debug(f"Wrote frame {self.frame_count - 1} to {self.path} ({len(data)} bytes)")

    def close(self) -> None:
        """Write the trailer and move the file into place; later calls do nothing."""
        if self._handle is None:
            return
        try:
            self._write(b"\x3B")  # GIF trailer
            self._handle.close()
            self._handle = None
            os.replace(self._tmp_path, self.path)
        except OSError as exc:
            self.discard()
            raise GifOpenError(f"could not finalize {self.path}: {exc}") from exc
        except GifError:
            self.discard()
            raise
        logger.debug(f"Closed {self.path} with {self.frame_count} frames")

    def discard(self) -> None:
        """Drop the unfinished file; an existing file at ``path`` is left alone."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        try:
            self._tmp_path.unlink()
        except FileNotFoundError:
            pass
        logger.debug(f"Discarded unfinished {self.path}")

    def _write(self, data: bytes) -> None:
        try:
            self._handle.write(data)
        except OSError as exc:
            raise GifOpenError(f"error writing {self.path}: {exc}") from exc

    def _header(self) -> bytes:
        data = bytearray()
        data.extend(b"GIF89a")
        data.extend(_u16(self.width))
        data.extend(_u16(self.height))

        if self.palette is not None:
            size_field, table = _color_table(self.palette)
            packed = 0b10000000 | 0b01110000 | size_field  # GCT present, 8-bit color resolution
            data.append(packed)
            data.append(self.background_index)
            data.append(0)  # pixel aspect ratio
            data.extend(table)
        else:
            data.append(0b01110000)
            data.append(0)
            data.append(0)
        return bytes(data)

    @staticmethod
    def _loop_extension(loop: int) -> bytes:
        return b"!\xFF\x0BNETSCAPE2.0\x03\x01" + _u16(max(loop, 0)) + b"\x00"

    @staticmethod
    def _graphics_control_extension(descriptor: FrameDescriptor) -> bytes:
        packed = (int(descriptor.disposal) & 0x07) << 2
        transparent = 0
        if descriptor.transparent_index is not None:
            packed |= 0x01
            transparent = descriptor.transparent_index
        return b"!\xF9\x04" + bytes((packed,)) + _u16(descriptor.delay_cs) + bytes((transparent, 0))

    @staticmethod
    def _image_descriptor(descriptor: FrameDescriptor, local_palette: Optional[Sequence[RGB]]) -> bytes:
        data = bytearray(b",")
        data.extend(_u16(descriptor.left))
        data.extend(_u16(descriptor.top))
        data.extend(_u16(descriptor.width))
        data.extend(_u16(descriptor.height))
        if local_palette is None:
            data.append(0)
        else:
            size_field, table = _color_table(local_palette)
            data.append(0b10000000 | size_field)
            data.extend(table)
        return bytes(data)

    @staticmethod
    def _image_data(raster: Sequence[int], color_count: int) -> bytes:
        min_code_size = min_code_size_for(color_count)
        compressed = lzw_encode(raster, min_code_size)

        chunks = bytearray()
        chunks.append(min_code_size)
        for chunk in split_sub_blocks(compressed):
            chunks.append(len(chunk))
            chunks.extend(chunk)
        chunks.append(0)  # block terminator
        return bytes(chunks)
