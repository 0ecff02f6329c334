"""Typed primitives for the video color extraction pipeline."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np


@dataclass
class Frame:
    """A decoded frame; owned by a single worker until its colors are extracted."""

    index: int
    timestamp_seconds: float
    data: Optional[np.ndarray] = None


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    weight: float = 1.0

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def distance(self, other: "Color") -> float:
        return math.sqrt((self.r - other.r) ** 2 + (self.g - other.g) ** 2 + (self.b - other.b) ** 2)


@dataclass(frozen=True)
class FramePalette:
    """Colors of one sampled frame, most dominant first."""

    frame_index: int
    colors: Tuple[Color, ...]

    def top(self, count: int) -> Tuple[Color, ...]:
        return self.colors[: max(0, count)]


@dataclass(frozen=True)
class PaletteEntry:
    frame_index: int
    color: Color


@dataclass
class GlobalPalette:
    """Temporally ordered palette spanning the whole video."""

    entries: List[PaletteEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def colors(self) -> List[List[int]]:
        return [list(entry.color.rgb) for entry in self.entries]

    def frame_indices(self) -> List[int]:
        return [entry.frame_index for entry in self.entries]


@dataclass
class VideoInfo:
    frame_count: int
    fps: float
    width: int = 0
    height: int = 0

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.fps if self.fps > 0 else 0.0


@dataclass
class ExtractionResult:
    """Result bundle produced by the extractor."""

    palette: GlobalPalette
    frame_palettes: Sequence[FramePalette]
    summary: Dict[str, object]
