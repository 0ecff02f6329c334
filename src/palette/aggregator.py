"""Merges per-frame palettes into the temporally ordered global palette."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .errors import EmptyPalette
from .types import FramePalette, GlobalPalette, PaletteEntry


@dataclass
class AggregatorConfig:
    colors_per_frame: int = 1
    dedup_threshold: float = 12.0


class PaletteAggregator:
    """Concatenates frame palettes in index order and collapses near-duplicate runs."""

    def __init__(self, config: AggregatorConfig | None = None, logger: Optional[logging.Logger] = None) -> None:
        self._config = config or AggregatorConfig()
        self._logger = logger or logging.getLogger(__name__)

    def aggregate(self, frame_palettes: Iterable[FramePalette]) -> GlobalPalette:
        per_frame = max(1, int(self._config.colors_per_frame))
        entries: List[PaletteEntry] = []
        last_index: Optional[int] = None
        for frame_palette in frame_palettes:
            if last_index is not None and frame_palette.frame_index <= last_index:
                raise ValueError(
                    f"Frame palettes out of order: {frame_palette.frame_index} after {last_index}"
                )
            last_index = frame_palette.frame_index
            for color in frame_palette.top(per_frame):
                if color.weight > 0:
                    entries.append(PaletteEntry(frame_index=frame_palette.frame_index, color=color))

        collapsed = self._deduplicate(entries)
        if not collapsed:
            raise EmptyPalette("No colors left after aggregation")
        self._logger.debug("Aggregated %d colors into %d after dedup", len(entries), len(collapsed))
        return GlobalPalette(entries=collapsed)

    def _deduplicate(self, entries: List[PaletteEntry]) -> List[PaletteEntry]:
        threshold = float(self._config.dedup_threshold)
        if threshold <= 0:
            return list(entries)
        kept: List[PaletteEntry] = []
        for entry in entries:
            # a run is anchored on its first (kept) color
            if kept and kept[-1].color.distance(entry.color) < threshold:
                continue
            kept.append(entry)
        return kept
