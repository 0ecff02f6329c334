"""Frame sampling for the color extraction pipeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import EmptyVideo
from .types import VideoInfo

STRATEGIES = ("count", "per_second")


@dataclass
class SamplerConfig:
    sample_count: int = 120
    strategy: str = "count"  # count | per_second


class Sampler:
    """Abstract sampler interface."""

    def select(self, info: VideoInfo) -> List[int]:
        raise NotImplementedError


class FrameSampler(Sampler):
    """Deterministic sampler: identical inputs always yield identical indices."""

    def __init__(self, config: SamplerConfig | None = None, logger: Optional[logging.Logger] = None) -> None:
        self._config = config or SamplerConfig()
        self._logger = logger or logging.getLogger(__name__)
        if self._config.strategy.lower() not in STRATEGIES:
            raise ValueError(f"Unsupported sampling strategy '{self._config.strategy}'")

    def select(self, info: VideoInfo) -> List[int]:  # noqa: D401
        total = int(info.frame_count)
        if total <= 0:
            raise EmptyVideo("Video contains no frames")

        strategy = self._config.strategy.lower()
        target = max(1, int(self._config.sample_count))
        if strategy == "per_second":
            step = max(1, int(round(info.fps))) if info.fps > 0 else 1
            candidates = list(range(0, total, step))
            if len(candidates) > target:
                candidates = [candidates[i] for i in evenly_spaced(len(candidates), target)]
            indices = candidates
        else:
            indices = evenly_spaced(total, target)

        self._logger.debug(
            "Sampled %d of %d frames (strategy=%s, first=%d, last=%d)",
            len(indices),
            total,
            strategy,
            indices[0],
            indices[-1],
        )
        return indices


def evenly_spaced(total: int, count: int) -> List[int]:
    """Pick ``min(count, total)`` strictly increasing indices spanning ``[0, total - 1]``."""
    if total <= 0:
        raise EmptyVideo("Video contains no frames")
    picks = min(max(1, count), total)
    if picks == 1:
        return [0]
    span = total - 1
    intervals = picks - 1
    # integer round-half-up; picks <= total keeps the stride >= 1 so indices strictly increase
    return [(2 * span * i + intervals) // (2 * intervals) for i in range(picks)]
