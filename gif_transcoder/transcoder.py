"""Transcode an animated GIF to half its width and height."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .canvas import Canvas
from .color import TRANSPARENT, ColorARGB, from_rgb
from .compositor import PreviousFrame, render_frame
from .decoder import GifReader
from .encoder import GifWriter
from .errors import GifError, GifFormatError, GifResourceError
from .frame import DecodedFrame, DisposalMode, FrameDescriptor
from .quantizer import quantize

logger = logging.getLogger(__name__)

DEFAULT_MAX_CANVAS_PIXELS = 4096 * 4096


@dataclass(frozen=True)
class TranscodeOptions:
    """Limits applied while transcoding.

    Attributes:
        max_canvas_pixels: Largest logical screen (width * height) accepted
            before any buffer is allocated.
    """

    max_canvas_pixels: int = DEFAULT_MAX_CANVAS_PIXELS

    def __post_init__(self) -> None:
        if self.max_canvas_pixels < 4:
            raise ValueError("max_canvas_pixels must be >= 4")


class GifTranscoder:
    """Render every frame of a GIF and write it out at half size.

    Each output frame is a full composite covering the whole half-size screen,
    so it is written with RESTORE_BACKGROUND disposal.
    """

    def __init__(self, options: Optional[TranscodeOptions] = None):
        self.options = options or TranscodeOptions()

    def transcode(self, path_in: str | Path, path_out: str | Path) -> int:
        """Transcode ``path_in`` into ``path_out``; return the number of frames.

        Raises a GifError subclass on any failure, after both files have been
        closed; a file already at ``path_out`` is left untouched.
        """
        with ExitStack() as stack:
            reader = stack.enter_context(GifReader(path_in))
            self._check_screen(reader.width, reader.height)

            out_width = reader.width // 2
            out_height = reader.height // 2
            writer = stack.enter_context(
                GifWriter(
                    path_out,
                    out_width,
                    out_height,
                    palette=reader.global_palette,
                    background_index=reader.background_index or 0,
                )
            )
            canvas = Canvas(reader.width, reader.height)

            previous = PreviousFrame.initial()
            background: ColorARGB = TRANSPARENT
            index = -1
            for index, frame in enumerate(reader.frames()):
                if index == 0:
                    background = self._background_color(reader, frame)
                    writer.loop = reader.loop_count

                previous = render_frame(
                    canvas,
                    index,
                    frame.descriptor,
                    frame.raster,
                    frame.palette,
                    background,
                    previous,
                )
                raster = quantize(canvas, frame.palette, frame.descriptor.transparent_index)
                writer.add_frame(
                    FrameDescriptor(
                        left=0,
                        top=0,
                        width=out_width,
                        height=out_height,
                        disposal=DisposalMode.RESTORE_BACKGROUND,
                        transparent_index=frame.descriptor.transparent_index,
                        delay_cs=frame.descriptor.delay_cs,
                    ),
                    raster,
                    frame.palette,
                )
                logger.debug(f"Transcoded frame {index}")

            if index < 0:
                raise GifFormatError(f"no frames in {reader.path}")

        frame_count = index + 1
        logger.info(
            f"Transcoded {path_in} -> {path_out}: {frame_count} frames, "
            f"{reader.width}x{reader.height} -> {out_width}x{out_height}"
        )
        return frame_count

    def _check_screen(self, width: int, height: int) -> None:
        # Dimensions come straight from the file.
        if width == 0 or height == 0:
            raise GifResourceError(f"logical screen has zero size ({width}x{height})")
        if width < 2 or height < 2:
            raise GifResourceError(f"logical screen {width}x{height} is too small to halve")
        if width * height > self.options.max_canvas_pixels:
            raise GifResourceError(
                f"logical screen {width}x{height} exceeds the limit of "
                f"{self.options.max_canvas_pixels} pixels"
            )

    @staticmethod
    def _background_color(reader: GifReader, first: DecodedFrame) -> ColorARGB:
        palette = reader.global_palette
        index = reader.background_index
        if palette is None or index is None or index >= len(palette):
            return TRANSPARENT
        if first.descriptor.transparent_index is not None:
            return TRANSPARENT
        return from_rgb(palette[index])


def transcode(path_in: str | Path, path_out: str | Path, options: Optional[TranscodeOptions] = None) -> bool:
    """Transcode ``path_in`` to a half-size copy at ``path_out``.

    Returns True when every frame was rendered and written, False otherwise.
    On failure no partial output is left behind and an existing file at
    ``path_out`` keeps its contents.
    """
    try:
        GifTranscoder(options).transcode(path_in, path_out)
    except GifError as exc:
        logger.error(f"Failed to transcode {path_in}: {exc}")
        return False
    return True
