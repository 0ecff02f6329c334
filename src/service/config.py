"""Runtime configuration for the Video Colors service."""
from __future__ import annotations

import os
from pathlib import Path

_BASE_DIR = Path(os.environ.get("VIDEO_COLORS_BASE_DIR", ".")).resolve()

OUTPUT_DIR = Path(os.environ.get("VIDEO_COLORS_OUTPUT_DIR", _BASE_DIR / "palettes")).resolve()
CACHE_DIR = Path(os.environ.get("VIDEO_COLORS_CACHE_DIR", _BASE_DIR / ".cache" / "palettes")).resolve()
WORKERS = int(os.environ.get("VIDEO_COLORS_WORKERS", "0")) or None


def ensure_dirs() -> Path:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    CACHE_DIR.mkdir(parents=True, exist_ok=True)
    return OUTPUT_DIR


__all__ = [
    "OUTPUT_DIR",
    "CACHE_DIR",
    "WORKERS",
    "ensure_dirs",
]
