"""Error kinds raised by the extraction pipeline."""
from __future__ import annotations

from typing import Optional


class PaletteError(RuntimeError):
    """Base class; ``stage`` names the pipeline step that failed."""

    stage = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        if stage:
            self.stage = stage


class EmptyVideo(PaletteError):
    """Raised when a video has no decodable frames."""

    stage = "sample"


class DecodeFailure(PaletteError):
    """Raised when a frame (or the container itself) cannot be decoded."""

    stage = "decode"

    def __init__(self, message: str, frame_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.frame_index = frame_index


class EmptyPalette(PaletteError):
    """Raised when aggregation yields zero colors."""

    stage = "aggregate"


class IoFailure(PaletteError):
    """Raised when the palette document cannot be written."""

    stage = "export"


__all__ = ["PaletteError", "EmptyVideo", "DecodeFailure", "EmptyPalette", "IoFailure"]
