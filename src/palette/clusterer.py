"""Per-frame color clustering: KMeans with deterministic scan-order seeding."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

import cv2
import numpy as np
from sklearn.metrics import pairwise_distances_argmin

from .sampler import evenly_spaced
from .types import Color, Frame, FramePalette

MODES = ("dominant", "mean")


@dataclass
class ClustererConfig:
    max_colors: int = 6
    max_iterations: int = 20
    mode: str = "dominant"  # dominant | mean
    max_side: int = 256


class Clusterer:
    """Abstract clusterer."""

    def cluster(self, frame: Frame) -> FramePalette:
        raise NotImplementedError


class KMeansClusterer(Clusterer):
    """Reduces a frame to at most ``max_colors`` weighted colors, most dominant first."""

    def __init__(self, config: ClustererConfig | None = None) -> None:
        self._config = config or ClustererConfig()
        if self._config.mode not in MODES:
            raise ValueError(f"Unsupported color mode '{self._config.mode}'")

    def cluster(self, frame: Frame) -> FramePalette:  # noqa: D401
        image = self._prepare(frame.data)
        if self._config.mode == "mean":
            colors = self._mean_color(image)
        else:
            colors = self._dominant_colors(image.reshape(-1, 3).astype(np.float64))
        return FramePalette(frame_index=frame.index, colors=tuple(colors))

    # ------------------------------------------------------------------
    def _prepare(self, data) -> np.ndarray:
        if data is None:
            raise ValueError("Frame has no pixel data")
        image = np.asarray(data)
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError("Expected RGB frame with 3 channels")
        if image.shape[0] == 0 or image.shape[1] == 0:
            raise ValueError("Frame has no pixels")
        image = np.ascontiguousarray(image, dtype=np.uint8)

        height, width = image.shape[:2]
        longest = max(height, width)
        max_side = self._config.max_side
        if max_side > 0 and longest > max_side:
            scale = max_side / float(longest)
            size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
            image = cv2.resize(image, size, interpolation=cv2.INTER_AREA)
        return image

    def _mean_color(self, image: np.ndarray) -> List[Color]:
        mean = cv2.mean(image)
        r, g, b = (_to_channel(value) for value in mean[:3])
        return [Color(r, g, b, 1.0)]

    def _dominant_colors(self, pixels: np.ndarray) -> List[Color]:
        centroids = self._seed(pixels)
        labels = None
        for _ in range(max(1, self._config.max_iterations)):
            assignments = pairwise_distances_argmin(pixels, centroids)
            if labels is not None and np.array_equal(assignments, labels):
                break
            labels = assignments
            centroids = self._recompute(pixels, labels, centroids)

        counts = np.bincount(labels, minlength=centroids.shape[0])
        total = float(pixels.shape[0])
        merged: Dict[Tuple[int, int, int], int] = {}
        for index, count in enumerate(counts):
            if count == 0:
                continue
            rgb = tuple(_to_channel(value) for value in centroids[index])
            merged[rgb] = merged.get(rgb, 0) + int(count)

        colors = [Color(r, g, b, count / total) for (r, g, b), count in merged.items()]
        colors.sort(key=lambda color: (-color.weight, color.rgb))
        return colors

    def _seed(self, pixels: np.ndarray) -> np.ndarray:
        positions = evenly_spaced(pixels.shape[0], max(1, self._config.max_colors))
        seeds = pixels[positions]
        _, first = np.unique(seeds, axis=0, return_index=True)
        return seeds[np.sort(first)]

    @staticmethod
    def _recompute(pixels: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        k = centroids.shape[0]
        counts = np.bincount(labels, minlength=k).astype(np.float64)
        sums = np.stack([np.bincount(labels, weights=pixels[:, c], minlength=k) for c in range(3)], axis=1)
        updated = centroids.copy()
        filled = counts > 0
        updated[filled] = sums[filled] / counts[filled, None]
        return updated


def _to_channel(value: float) -> int:
    return int(min(255, max(0, np.floor(float(value) + 0.5))))
