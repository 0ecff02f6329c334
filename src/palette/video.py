"""Video decoding adapters feeding frames into the pipeline."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import cv2
import numpy as np

from .errors import DecodeFailure
from .types import Frame, VideoInfo

DEFAULT_FPS = 25.0
# Gaps up to this many frames are skipped with grab() instead of a container seek.
MAX_GRAB_GAP = 48


class FrameReader:
    """Per-worker decoding handle. Not thread-safe; each worker opens its own."""

    def read(self, index: int) -> Frame:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "FrameReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class VideoSource:
    """Abstract source of decoded RGB frames."""

    path: Optional[Path] = None

    def info(self) -> VideoInfo:
        raise NotImplementedError

    def open_reader(self) -> FrameReader:
        raise NotImplementedError


class OpenCVVideoSource(VideoSource):
    """Decodes a video file with ``cv2.VideoCapture``."""

    def __init__(self, path: str | Path, logger: Optional[logging.Logger] = None) -> None:
        self.path = Path(path)
        self._logger = logger or logging.getLogger(__name__)
        self._info: Optional[VideoInfo] = None

    def info(self) -> VideoInfo:
        if self._info is not None:
            return self._info
        capture = self._open_capture()
        try:
            frame_count = int(capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
            fps = float(capture.get(cv2.CAP_PROP_FPS) or 0.0)
            width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
            height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        finally:
            capture.release()
        if fps <= 0:
            self._logger.warning("Reported fps for %s is %s; assuming %.1f", self.path, fps, DEFAULT_FPS)
            fps = DEFAULT_FPS
        self._info = VideoInfo(frame_count=max(0, frame_count), fps=fps, width=width, height=height)
        self._logger.debug(
            "Video %s: frames=%d fps=%.3f size=%dx%d",
            self.path,
            self._info.frame_count,
            fps,
            width,
            height,
        )
        return self._info

    def open_reader(self) -> FrameReader:
        return _CaptureReader(self._open_capture(), self.info().fps)

    def _open_capture(self) -> "cv2.VideoCapture":
        if not self.path.exists():
            raise DecodeFailure(f"Media path does not exist: {self.path}")
        capture = cv2.VideoCapture(str(self.path))
        if not capture.isOpened():
            capture.release()
            raise DecodeFailure(f"Unable to open video: {self.path}")
        return capture


class _CaptureReader(FrameReader):
    def __init__(self, capture: "cv2.VideoCapture", fps: float) -> None:
        self._capture = capture
        self._fps = fps
        self._position: Optional[int] = 0

    def read(self, index: int) -> Frame:
        # unknown position after a failed seek forces the next read to seek again
        gap = index - self._position if self._position is not None else -1
        if gap < 0 or gap > MAX_GRAB_GAP:
            if not self._capture.set(cv2.CAP_PROP_POS_FRAMES, float(index)):
                self._position = None
                raise DecodeFailure(f"Unable to seek to frame {index}", frame_index=index)
        else:
            for _ in range(gap):
                if not self._capture.grab():
                    self._position = index
                    raise DecodeFailure(f"Unable to skip to frame {index}", frame_index=index)
        self._position = index + 1
        ok, frame_bgr = self._capture.read()
        if not ok or frame_bgr is None:
            raise DecodeFailure(f"Unable to decode frame {index}", frame_index=index)
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        return Frame(index=index, timestamp_seconds=index / self._fps, data=frame_rgb)

    def close(self) -> None:
        self._capture.release()


class ArrayVideoSource(VideoSource):
    """In-memory video; a ``None`` entry stands for a frame that fails to decode."""

    def __init__(self, frames: Sequence[Optional[np.ndarray]], fps: float = DEFAULT_FPS) -> None:
        self._frames = list(frames)
        self._fps = fps

    def info(self) -> VideoInfo:
        height, width = 0, 0
        for frame in self._frames:
            if frame is not None:
                height, width = int(frame.shape[0]), int(frame.shape[1])
                break
        return VideoInfo(frame_count=len(self._frames), fps=self._fps, width=width, height=height)

    def open_reader(self) -> FrameReader:
        return _ArrayReader(self._frames, self._fps)


class _ArrayReader(FrameReader):
    def __init__(self, frames: Sequence[Optional[np.ndarray]], fps: float) -> None:
        self._frames = frames
        self._fps = fps

    def read(self, index: int) -> Frame:
        if index < 0 or index >= len(self._frames) or self._frames[index] is None:
            raise DecodeFailure(f"Unable to decode frame {index}", frame_index=index)
        return Frame(index=index, timestamp_seconds=index / self._fps, data=self._frames[index])
