"""Dominant color extraction from video for Video Colors."""

__version__ = "0.1.0"

from .aggregator import AggregatorConfig, PaletteAggregator
from .clusterer import Clusterer, ClustererConfig, KMeansClusterer
from .errors import DecodeFailure, EmptyPalette, EmptyVideo, IoFailure, PaletteError
from .exporter import PaletteDocument, default_output_path, parse_json, to_json, write_palette
from .extractor import ExtractorConfig, PaletteExtractor
from .sampler import FrameSampler, Sampler, SamplerConfig
from .types import (
    Color,
    ExtractionResult,
    Frame,
    FramePalette,
    GlobalPalette,
    PaletteEntry,
    VideoInfo,
)
from .video import ArrayVideoSource, OpenCVVideoSource, VideoSource

__all__ = [
    "AggregatorConfig",
    "PaletteAggregator",
    "Clusterer",
    "ClustererConfig",
    "KMeansClusterer",
    "DecodeFailure",
    "EmptyPalette",
    "EmptyVideo",
    "IoFailure",
    "PaletteError",
    "PaletteDocument",
    "default_output_path",
    "parse_json",
    "to_json",
    "write_palette",
    "ExtractorConfig",
    "PaletteExtractor",
    "FrameSampler",
    "Sampler",
    "SamplerConfig",
    "Color",
    "ExtractionResult",
    "Frame",
    "FramePalette",
    "GlobalPalette",
    "PaletteEntry",
    "VideoInfo",
    "ArrayVideoSource",
    "OpenCVVideoSource",
    "VideoSource",
]
