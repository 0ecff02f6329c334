#!/usr/bin/env python3
"""Command line entry point: extract a video's color palette to JSON."""
from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from .aggregator import AggregatorConfig
from .clusterer import MODES, ClustererConfig
from .errors import PaletteError
from .exporter import default_output_path
from .extractor import ExtractorConfig, PaletteExtractor
from .log import setup_logging
from .sampler import STRATEGIES, SamplerConfig
from .video import OpenCVVideoSource

SAMPLES_DEFAULT = int(os.getenv("VIDEO_COLORS_SAMPLES", str(SamplerConfig.sample_count)))
MAX_COLORS_DEFAULT = int(os.getenv("VIDEO_COLORS_MAX_COLORS", str(ClustererConfig.max_colors)))
WORKERS_DEFAULT = int(os.getenv("VIDEO_COLORS_WORKERS", "0")) or None
CACHE_DIR_DEFAULT = os.getenv("VIDEO_COLORS_CACHE_DIR") or None

logger = logging.getLogger("video_colors")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract a temporally ordered color palette from a video")
    parser.add_argument("input", type=Path, help="Input video file to operate on")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        metavar="FILE",
        help="Output file (default: input file name with a .json extension)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="count",
        default=0,
        help="Turn debugging information on (repeat for per-frame tracing)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=SAMPLES_DEFAULT,
        help=f"Number of frames to sample (default: {SAMPLES_DEFAULT})",
    )
    parser.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default="count",
        help="Sample evenly by count, or one frame per second thinned to --samples (default: count)",
    )
    parser.add_argument(
        "--max-colors",
        type=int,
        default=MAX_COLORS_DEFAULT,
        help=f"Maximum clusters per frame (default: {MAX_COLORS_DEFAULT})",
    )
    parser.add_argument(
        "--colors-per-frame",
        type=int,
        default=AggregatorConfig.colors_per_frame,
        help="Dominant colors kept per sampled frame (default: 1)",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        default=ClustererConfig.mode,
        help="Per-frame color: KMeans dominant color or plain mean (default: dominant)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=AggregatorConfig.dedup_threshold,
        help=f"RGB distance below which consecutive colors collapse; 0 disables (default: {AggregatorConfig.dedup_threshold})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=WORKERS_DEFAULT,
        help="Worker threads for decoding and clustering (default: CPU count)",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=CACHE_DIR_DEFAULT,
        help="Directory for cached frame palettes (default: disabled)",
    )
    parser.add_argument(
        "--ignore-cache",
        action="store_true",
        help="Recompute frame palettes even when a cache entry exists",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ExtractorConfig:
    return ExtractorConfig(
        sampler=SamplerConfig(sample_count=max(1, args.samples), strategy=args.strategy),
        cluster=ClustererConfig(max_colors=max(1, args.max_colors), mode=args.mode),
        aggregate=AggregatorConfig(
            colors_per_frame=max(1, args.colors_per_frame),
            dedup_threshold=max(0.0, args.threshold),
        ),
        workers=args.workers if args.workers and args.workers > 0 else None,
        cache_dir=args.cache_dir,
        ignore_cache=args.ignore_cache,
    )


def main(argv: Optional[List[str]] = None) -> int:
    timer = time.perf_counter()
    args = parse_args(argv)
    setup_logging(args.debug)

    output = args.output or default_output_path(args.input)
    logger.info("Extracting colors from %s", args.input)
    logger.debug("input=%s output=%s debug=%d", args.input, output, args.debug)

    extractor = PaletteExtractor(build_config(args), logger)
    try:
        extractor.extract_to_file(OpenCVVideoSource(args.input, logger), output)
    except PaletteError as error:
        print(f"[ERROR] {error.stage}: {error}", file=sys.stderr)
        return 1

    logger.info("Done in %.2fs", time.perf_counter() - timer)
    return 0


if __name__ == "__main__":
    sys.exit(main())
