"""FastAPI service exposing palette extraction over HTTP."""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException

from src.palette import (
    AggregatorConfig,
    ClustererConfig,
    EmptyPalette,
    EmptyVideo,
    ExtractorConfig,
    IoFailure,
    OpenCVVideoSource,
    PaletteError,
    PaletteExtractor,
    SamplerConfig,
    __version__,
)

from .config import CACHE_DIR, OUTPUT_DIR, WORKERS, ensure_dirs
from .schemas import ExtractRequest, ExtractResponse, PipelineConfig

ensure_dirs()

logger = logging.getLogger("video_colors.service")

app = FastAPI(title="Video Colors Service", version=__version__)


def _create_extractor(config: PipelineConfig | None) -> PaletteExtractor:
    sampler_cfg = SamplerConfig()
    cluster_cfg = ClustererConfig()
    aggregate_cfg = AggregatorConfig()
    ignore_cache = False

    if config:
        if config.sample_count is not None:
            sampler_cfg.sample_count = max(1, config.sample_count)
        if config.strategy:
            sampler_cfg.strategy = config.strategy
        if config.max_colors is not None:
            cluster_cfg.max_colors = max(1, config.max_colors)
        if config.mode:
            cluster_cfg.mode = config.mode
        if config.colors_per_frame is not None:
            aggregate_cfg.colors_per_frame = max(1, config.colors_per_frame)
        if config.dedup_threshold is not None:
            aggregate_cfg.dedup_threshold = max(0.0, float(config.dedup_threshold))
        if config.ignore_cache is not None:
            ignore_cache = bool(config.ignore_cache)

    extractor_config = ExtractorConfig(
        sampler=sampler_cfg,
        cluster=cluster_cfg,
        aggregate=aggregate_cfg,
        workers=WORKERS,
        cache_dir=CACHE_DIR,
        ignore_cache=ignore_cache,
    )
    return PaletteExtractor(extractor_config, logger)


@app.get("/health")
def health():
    return {"status": "ok", "service": "video-colors", "version": __version__}


@app.post("/extract", response_model=ExtractResponse)
def extract(request: ExtractRequest) -> ExtractResponse:
    source_path = Path(request.input_path)
    if not source_path.is_file():
        raise HTTPException(status_code=404, detail=f"Input video not found: {source_path}")
    output_path = Path(request.output_path) if request.output_path else OUTPUT_DIR / f"{source_path.stem}.json"

    try:
        extractor = _create_extractor(request.config)
    except ValueError as error:
        raise HTTPException(status_code=422, detail=str(error)) from error

    logger.info("Extracting colors from %s", source_path)
    try:
        result = extractor.extract_to_file(OpenCVVideoSource(source_path, logger), output_path)
    except (EmptyVideo, EmptyPalette) as error:
        raise HTTPException(status_code=422, detail=f"{error.stage}: {error}") from error
    except IoFailure as error:
        logger.error("Export failed for %s: %s", source_path, error)
        raise HTTPException(status_code=500, detail=f"{error.stage}: {error}") from error
    except PaletteError as error:
        raise HTTPException(status_code=422, detail=f"{error.stage}: {error}") from error

    return ExtractResponse(
        colors=[tuple(rgb) for rgb in result.palette.colors()],
        output_path=str(output_path),
        summary=result.summary,
    )
