"""High-level extraction orchestrator."""
from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .aggregator import AggregatorConfig, PaletteAggregator
from .cache import FramePaletteCache
from .clusterer import ClustererConfig, KMeansClusterer
from .errors import DecodeFailure, EmptyPalette
from .exporter import write_palette
from .log import TRACE
from .sampler import FrameSampler, SamplerConfig
from .types import ExtractionResult, FramePalette
from .video import VideoSource


@dataclass
class ExtractorConfig:
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    cluster: ClustererConfig = field(default_factory=ClustererConfig)
    aggregate: AggregatorConfig = field(default_factory=AggregatorConfig)
    workers: Optional[int] = None
    cache_dir: Optional[Path] = None
    ignore_cache: bool = False


class PaletteExtractor:
    """Coordinates sampling, per-frame clustering and aggregation."""

    def __init__(self, config: ExtractorConfig | None = None, logger: logging.Logger | None = None) -> None:
        self._config = config or ExtractorConfig()
        self._logger = logger or logging.getLogger(__name__)
        self._sampler = FrameSampler(self._config.sampler, self._logger)
        self._clusterer = KMeansClusterer(self._config.cluster)
        self._aggregator = PaletteAggregator(self._config.aggregate, self._logger)
        self._cache: FramePaletteCache | None = None
        if self._config.cache_dir:
            self._cache = FramePaletteCache(Path(self._config.cache_dir))

    @property
    def workers(self) -> int:
        configured = self._config.workers
        if configured is None:
            configured = os.cpu_count() or 1
        return max(1, int(configured))

    def extract(self, source: VideoSource) -> ExtractionResult:
        started = time.perf_counter()
        info = source.info()
        self._logger.debug("fps=%.3f frame_count=%d", info.fps, info.frame_count)
        indices = self._sampler.select(info)

        cache_hits = 0
        frame_palettes: Optional[List[FramePalette]] = None
        use_cache = self._cache is not None and not self._config.ignore_cache
        if use_cache:
            frame_palettes = self._cache.load(source.path, self._config.sampler, self._config.cluster)
            if frame_palettes is not None:
                cache_hits = 1
                self._logger.debug("Cache hit for %s (%d frames)", source.path, len(frame_palettes))

        if frame_palettes is None:
            frame_palettes = self._process(source, indices)
            if not frame_palettes:
                raise EmptyPalette(f"All {len(indices)} sampled frames failed to decode")
            if use_cache:
                try:
                    self._cache.store(source.path, self._config.sampler, self._config.cluster, frame_palettes)
                except Exception as error:  # pragma: no cover - cache failure is non-fatal
                    self._logger.debug("Cache store failed for %s: %s", source.path, error)

        palette = self._aggregator.aggregate(frame_palettes)

        summary: Dict[str, object] = {
            "frame_count": info.frame_count,
            "fps": info.fps,
            "sampled": len(indices),
            "processed": len(frame_palettes),
            "skipped": len(indices) - len(frame_palettes),
            "colors": len(palette),
            "workers": self.workers,
            "elapsed_seconds": round(time.perf_counter() - started, 3),
        }
        if cache_hits:
            summary["cache_hits"] = cache_hits
        self._logger.info(
            "Extracted %d colors from %d/%d sampled frames (%d skipped)",
            summary["colors"],
            summary["processed"],
            summary["sampled"],
            summary["skipped"],
        )
        return ExtractionResult(palette=palette, frame_palettes=frame_palettes, summary=summary)

    def extract_to_file(self, source: VideoSource, output_path: str | Path) -> ExtractionResult:
        result = self.extract(source)
        written = write_palette(result.palette, output_path)
        result.summary["output_path"] = str(written)
        return result

    # ------------------------------------------------------------------
    def _process(self, source: VideoSource, indices: Sequence[int]) -> List[FramePalette]:
        chunks = _split_chunks(indices, self.workers)
        self._logger.debug(
            "Processing %d frames in %d chunk(s): %s",
            len(indices),
            len(chunks),
            [(chunk[0], chunk[-1]) for chunk in chunks],
        )

        results: Dict[int, FramePalette] = {}
        if len(chunks) == 1:
            results.update(self._process_chunk(source, chunks[0]))
        else:
            with ThreadPoolExecutor(max_workers=len(chunks), thread_name_prefix="frames") as pool:
                for chunk_results in pool.map(lambda chunk: self._process_chunk(source, chunk), chunks):
                    results.update(chunk_results)

        # drained by frame index, never by completion order
        return [results[index] for index in sorted(results)]

    def _process_chunk(self, source: VideoSource, chunk: Sequence[int]) -> Dict[int, FramePalette]:
        palettes: Dict[int, FramePalette] = {}
        try:
            reader = source.open_reader()
        except DecodeFailure as error:
            self._logger.warning("Skipping frames %d..%d: %s", chunk[0], chunk[-1], error)
            return palettes

        with reader:
            for index in chunk:
                try:
                    frame = reader.read(index)
                    palette = self._clusterer.cluster(frame)
                except (DecodeFailure, ValueError) as error:
                    self._logger.warning("Skipping frame %d: %s", index, error)
                    continue
                # release the pixel buffer as soon as its colors are known
                frame.data = None
                palettes[index] = palette
                self._logger.log(TRACE, "frame=%d colors=%s", index, [c.rgb for c in palette.colors])
        return palettes


def _split_chunks(indices: Sequence[int], workers: int) -> List[Tuple[int, ...]]:
    count = min(max(1, workers), len(indices))
    if count == 0:
        return []
    size, remainder = divmod(len(indices), count)
    chunks: List[Tuple[int, ...]] = []
    start = 0
    for position in range(count):
        end = start + size + (1 if position < remainder else 0)
        chunks.append(tuple(indices[start:end]))
        start = end
    return chunks
