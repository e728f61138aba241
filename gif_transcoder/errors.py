"""Exceptions raised while reading, rendering or writing GIF files."""

from __future__ import annotations

from typing import Optional


class GifError(Exception):
    """Base class for every transcoding failure."""


class GifOpenError(GifError):
    """Input could not be opened as a GIF, or output could not be created."""


class GifFormatError(GifError):
    """The GIF stream is corrupt or uses something that cannot be decoded."""


class CorruptFrameError(GifFormatError):
    """A single frame is inconsistent with its palette or the logical screen."""

    def __init__(self, message: str, frame_index: Optional[int] = None):
        if frame_index is not None:
            message = f"frame {frame_index}: {message}"
        super().__init__(message)
        self.frame_index = frame_index


class GifResourceError(GifError):
    """Buffer dimensions taken from the file are zero or too large."""
