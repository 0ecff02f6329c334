"""Pydantic models for the extraction service."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class PipelineConfig(BaseModel):
    sample_count: Optional[int] = Field(None, ge=1, description="Number of frames to sample")
    strategy: Optional[str] = Field(None, description="Sampling strategy: count|per_second")
    max_colors: Optional[int] = Field(None, ge=1, description="Maximum clusters per frame")
    mode: Optional[str] = Field(None, description="Per-frame color: dominant|mean")
    colors_per_frame: Optional[int] = Field(None, ge=1, description="Dominant colors kept per sampled frame")
    dedup_threshold: Optional[float] = Field(
        None,
        ge=0.0,
        description="RGB distance below which consecutive colors collapse",
    )
    ignore_cache: Optional[bool] = Field(None)


class ExtractRequest(BaseModel):
    """Payload for a synchronous extraction."""

    input_path: str = Field(..., description="Path to the video file on the service host")
    output_path: Optional[str] = Field(None, description="Where to write the palette JSON")
    config: Optional[PipelineConfig] = None


class ExtractResponse(BaseModel):
    colors: List[Tuple[int, int, int]]
    output_path: str
    summary: Dict[str, object] = Field(default_factory=dict)
