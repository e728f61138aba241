"""Variable-width LZW as used by GIF image data."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import GifFormatError

MAX_CODES = 4096
MAX_CODE_SIZE = 12


def min_code_size_for(color_count: int) -> int:
    """Smallest valid LZW minimum code size for a palette of ``color_count``."""
    return max(2, (color_count - 1).bit_length())


def lzw_encode(indices: Iterable[int], min_code_size: int) -> bytes:
    """Compress palette indexes into packed GIF LZW codes.

    Every index must be below ``1 << min_code_size``.
    """
    clear_code = 1 << min_code_size
    end_code = clear_code + 1

    dictionary: Dict[Tuple[int, int], int] = {}
    next_code = end_code + 1

    codes: List[int] = [clear_code]
    w = -1

    for k in indices:
        if w < 0:
            w = k
            continue
        code = dictionary.get((w, k))
        if code is not None:
            w = code
            continue

        codes.append(w)
        if next_code < MAX_CODES:
            dictionary[(w, k)] = next_code
            next_code += 1
        else:
            codes.append(clear_code)
            dictionary = {}
            next_code = end_code + 1
        w = k

    if w >= 0:
        codes.append(w)
    codes.append(end_code)

    return _pack_codes(codes, min_code_size)


def _pack_codes(codes: Iterable[int], min_code_size: int) -> bytes:
    # Code widths follow the decoder's table, which lags the encoder's by one entry.
    clear_code = 1 << min_code_size
    end_code = clear_code + 1

    code_size = min_code_size + 1
    table_size = end_code + 1
    first = True

    out = bytearray()
    bit_buffer = 0
    bit_count = 0

    for code in codes:
        bit_buffer |= code << bit_count
        bit_count += code_size

        while bit_count >= 8:
            out.append(bit_buffer & 0xFF)
            bit_buffer >>= 8
            bit_count -= 8

        if code == clear_code:
            code_size = min_code_size + 1
            table_size = end_code + 1
            first = True
            continue
        if code == end_code:
            continue
        if first:
            first = False
        elif table_size < MAX_CODES:
            table_size += 1
        if table_size == (1 << code_size) and code_size < MAX_CODE_SIZE:
            code_size += 1

    if bit_count:
        out.append(bit_buffer & 0xFF)
    return bytes(out)


def lzw_decode(data: bytes, min_code_size: int, pixel_count: int) -> bytes:
    """Decompress GIF LZW ``data`` into exactly ``pixel_count`` indexes.

    Decoding stops at the end code, at ``pixel_count`` indexes, or when the
    data runs out. Raises GifFormatError on an invalid code or when fewer than
    ``pixel_count`` indexes could be produced.
    """
    if not 2 <= min_code_size <= 8:
        raise GifFormatError(f"invalid LZW minimum code size: {min_code_size}")

    clear_code = 1 << min_code_size
    end_code = clear_code + 1
    code_size = min_code_size + 1
    table = _initial_table(clear_code)
    prev = b""

    out = bytearray()
    bit_buffer = 0
    bit_count = 0
    pos = 0
    size = len(data)

    while len(out) < pixel_count:
        while bit_count < code_size and pos < size:
            bit_buffer |= data[pos] << bit_count
            pos += 1
            bit_count += 8
        if bit_count < code_size:
            break
        code = bit_buffer & ((1 << code_size) - 1)
        bit_buffer >>= code_size
        bit_count -= code_size

        if code == clear_code:
            table = _initial_table(clear_code)
            code_size = min_code_size + 1
            prev = b""
            continue
        if code == end_code:
            break

        if code < len(table):
            entry = table[code]
            if prev and len(table) < MAX_CODES:
                table.append(prev + entry[:1])
        elif code == len(table) and prev:
            entry = prev + prev[:1]
            table.append(entry)
        else:
            raise GifFormatError(f"invalid LZW code {code} (table size {len(table)})")

        out.extend(entry)
        prev = entry
        if len(table) == (1 << code_size) and code_size < MAX_CODE_SIZE:
            code_size += 1

    if len(out) < pixel_count:
        raise GifFormatError(f"image data truncated: {len(out)} of {pixel_count} pixels")
    return bytes(out[:pixel_count])


def _initial_table(clear_code: int) -> List[bytes]:
    # Slots for the clear and end codes are never looked up as entries.
    return [bytes((i,)) for i in range(clear_code)] + [b"", b""]


def split_sub_blocks(data: bytes) -> Sequence[bytes]:
    """Cut ``data`` into GIF data sub-blocks of at most 255 bytes."""
    return [data[i : i + 255] for i in range(0, len(data), 255)]
