"""gif-transcoder - render animated GIFs and rewrite them at half size."""

__version__ = "0.1.0"

from .canvas import Canvas
from .compositor import PreviousFrame, render_frame
from .decoder import GifReader
from .encoder import GifWriter
from .errors import CorruptFrameError, GifError, GifFormatError, GifOpenError, GifResourceError
from .frame import DecodedFrame, DisposalMode, FrameDescriptor
from .quantizer import downsample, find_best_color, quantize
from .transcoder import GifTranscoder, TranscodeOptions, transcode

__all__ = [
    "Canvas",
    "CorruptFrameError",
    "DecodedFrame",
    "DisposalMode",
    "FrameDescriptor",
    "GifError",
    "GifFormatError",
    "GifOpenError",
    "GifReader",
    "GifResourceError",
    "GifTranscoder",
    "GifWriter",
    "PreviousFrame",
    "TranscodeOptions",
    "downsample",
    "find_best_color",
    "quantize",
    "render_frame",
    "transcode",
]
