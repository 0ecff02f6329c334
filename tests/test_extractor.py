from __future__ import annotations

import numpy as np
import pytest

from src.palette.aggregator import AggregatorConfig
from src.palette.errors import DecodeFailure, EmptyPalette, EmptyVideo
from src.palette.exporter import to_json
from src.palette.extractor import ExtractorConfig, PaletteExtractor, _split_chunks
from src.palette.sampler import SamplerConfig
from src.palette.video import ArrayVideoSource


def _uniform(rgb, count: int, shape=(12, 16)) -> list[np.ndarray]:
    return [np.full((*shape, 3), rgb, dtype=np.uint8) for _ in range(count)]


def _gradient_video(count: int) -> list[np.ndarray]:
    frames = []
    for index in range(count):
        frame = np.zeros((10, 10, 3), dtype=np.uint8)
        frame[:7] = (index * 10, 0, 255 - index * 10)
        frame[7:] = (0, 255, 0)
        frames.append(frame)
    return frames


def test_uniform_video_collapses_to_single_color() -> None:
    extractor = PaletteExtractor(ExtractorConfig(workers=3))
    result = extractor.extract(ArrayVideoSource(_uniform((10, 20, 30), 40)))

    assert result.palette.colors() == [[10, 20, 30]]
    assert result.summary["processed"] == result.summary["sampled"] == 40


def test_output_is_identical_across_runs_and_worker_counts() -> None:
    frames = _gradient_video(20)
    payloads = set()
    for workers in (1, 1, 4, 7):
        extractor = PaletteExtractor(ExtractorConfig(workers=workers))
        payloads.add(to_json(extractor.extract(ArrayVideoSource(frames)).palette))
    assert len(payloads) == 1


def test_palette_follows_frame_order() -> None:
    config = ExtractorConfig(aggregate=AggregatorConfig(dedup_threshold=0), workers=4)
    result = PaletteExtractor(config).extract(ArrayVideoSource(_gradient_video(20)))

    indices = result.palette.frame_indices()
    assert indices == sorted(indices)
    assert result.palette.colors() == [[i * 10, 0, 255 - i * 10] for i in range(20)]


def test_sample_count_bounds_work() -> None:
    config = ExtractorConfig(sampler=SamplerConfig(sample_count=5), workers=2)
    result = PaletteExtractor(config).extract(ArrayVideoSource(_gradient_video(20)))

    assert [p.frame_index for p in result.frame_palettes] == [0, 5, 10, 14, 19]
    assert result.summary["sampled"] == 5


def test_undecodable_frames_are_skipped() -> None:
    frames: list = _gradient_video(10)
    frames[2] = None
    frames[7] = None
    config = ExtractorConfig(aggregate=AggregatorConfig(dedup_threshold=0), workers=2)
    result = PaletteExtractor(config).extract(ArrayVideoSource(frames))

    assert result.summary["skipped"] == 2
    assert result.palette.frame_indices() == [0, 1, 3, 4, 5, 6, 8, 9]


def test_all_frames_failing_raises_empty_palette() -> None:
    with pytest.raises(EmptyPalette):
        PaletteExtractor(ExtractorConfig(workers=2)).extract(ArrayVideoSource([None, None, None]))


def test_empty_video_fails_without_writing(tmp_path) -> None:
    target = tmp_path / "empty.json"
    with pytest.raises(EmptyVideo):
        PaletteExtractor().extract_to_file(ArrayVideoSource([]), target)
    assert not target.exists()


def test_extract_to_file_writes_document(tmp_path) -> None:
    target = tmp_path / "out.json"
    result = PaletteExtractor(ExtractorConfig(workers=2)).extract_to_file(
        ArrayVideoSource(_uniform((10, 20, 30), 5)), target
    )
    assert target.read_text() == '{"colors":[[10,20,30]]}'
    assert result.summary["output_path"] == str(target)


def test_frame_buffers_are_released_after_clustering() -> None:
    extractor = PaletteExtractor(ExtractorConfig(workers=1))
    seen = []
    original = extractor._clusterer.cluster

    def spy(frame):
        seen.append(frame)
        return original(frame)

    extractor._clusterer.cluster = spy  # type: ignore[method-assign]
    extractor.extract(ArrayVideoSource(_uniform((1, 2, 3), 4)))
    assert len(seen) == 4
    assert all(frame.data is None for frame in seen)


def test_split_chunks_are_contiguous_and_cover_all_indices() -> None:
    indices = list(range(0, 100, 7))
    chunks = _split_chunks(indices, 4)

    assert len(chunks) == 4
    assert [i for chunk in chunks for i in chunk] == indices
    assert _split_chunks([3, 9], 8) == [(3,), (9,)]


class _FirstReaderFails(ArrayVideoSource):
    def __init__(self, frames) -> None:
        super().__init__(frames)
        self._opened = 0

    def open_reader(self):
        self._opened += 1
        if self._opened == 1:
            raise DecodeFailure("Unable to open video")
        return super().open_reader()


def test_unopenable_chunk_is_skipped_and_others_aggregated() -> None:
    config = ExtractorConfig(aggregate=AggregatorConfig(dedup_threshold=0), workers=2)
    source = _FirstReaderFails(_gradient_video(8))
    result = PaletteExtractor(config).extract(source)

    assert result.summary["skipped"] == 4
    assert result.summary["processed"] == 4
    indices = result.palette.frame_indices()
    assert len(indices) == 4 and indices == sorted(indices)
    assert indices in ([0, 1, 2, 3], [4, 5, 6, 7])
