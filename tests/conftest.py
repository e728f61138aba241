import struct

import pytest

from gif_transcoder.frame import DecodedFrame, DisposalMode, FrameDescriptor
from gif_transcoder.lzw import lzw_encode, min_code_size_for

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
BLACK = (0, 0, 0)


def _color_table(palette):
    size_pow = max(1, (len(palette) - 1).bit_length())
    table = bytearray()
    for color in palette:
        table.extend(color)
    table.extend(b"\x00" * (((1 << size_pow) - len(palette)) * 3))
    return size_pow - 1, bytes(table)


def build_gif(width, height, frames, palette=None, background_index=0, loop=None):
    """Assemble raw GIF bytes without any validation.

    ``frames`` is a list of DecodedFrame; a frame's palette is written as a
    local color table when ``has_local_palette`` is set. Used to produce
    deliberately broken files the writer would refuse.
    """
    data = bytearray(b"GIF89a")
    data.extend(struct.pack("<HH", width, height))
    if palette is not None:
        size_field, table = _color_table(palette)
        data.extend((0xF0 | size_field, background_index, 0))
        data.extend(table)
    else:
        data.extend((0x70, 0, 0))

    if loop is not None:
        data.extend(b"!\xFF\x0BNETSCAPE2.0\x03\x01" + struct.pack("<H", loop) + b"\x00")

    for frame in frames:
        d = frame.descriptor
        packed = int(d.disposal) << 2
        transparent = 0
        if d.transparent_index is not None:
            packed |= 1
            transparent = d.transparent_index
        data.extend(b"!\xF9\x04" + struct.pack("<BHB", packed, d.delay_cs, transparent) + b"\x00")

        flags = 0
        table = b""
        if frame.has_local_palette:
            size_field, table = _color_table(frame.palette)
            flags = 0x80 | size_field
        data.extend(b"," + struct.pack("<HHHHB", d.left, d.top, d.width, d.height, flags) + table)

        min_code_size = min_code_size_for(len(frame.palette))
        compressed = lzw_encode(frame.raster, min_code_size)
        data.append(min_code_size)
        for i in range(0, len(compressed), 255):
            chunk = compressed[i : i + 255]
            data.append(len(chunk))
            data.extend(chunk)
        data.append(0)

    data.append(0x3B)
    return bytes(data)


def make_frame(left, top, width, height, raster, palette, disposal=DisposalMode.UNSPECIFIED,
               transparent_index=None, delay_cs=0, local=False):
    descriptor = FrameDescriptor(
        left=left,
        top=top,
        width=width,
        height=height,
        disposal=disposal,
        transparent_index=transparent_index,
        delay_cs=delay_cs,
    )
    return DecodedFrame(descriptor, bytes(raster), tuple(palette), local)


@pytest.fixture
def write_gif(tmp_path):
    """Write raw GIF bytes built by ``build_gif`` and return the path."""

    def _write(name, *args, **kwargs):
        path = tmp_path / name
        path.write_bytes(build_gif(*args, **kwargs))
        return path

    return _write
