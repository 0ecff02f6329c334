"""Disk-backed cache of per-frame palettes."""
from __future__ import annotations

import hashlib
import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .clusterer import ClustererConfig
from .sampler import SamplerConfig
from .types import Color, FramePalette

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheDescriptor:
    """Lightweight descriptor used to build a stable cache key."""

    media_path: Path
    size: int
    mtime_ns: int
    sampler: SamplerConfig
    cluster: ClustererConfig

    def digest(self) -> str:
        payload = {
            "path": str(self.media_path.resolve()),
            "size": self.size,
            "mtime_ns": self.mtime_ns,
            "sampler": asdict(self.sampler),
            "cluster": asdict(self.cluster),
        }
        blob = json.dumps(payload, sort_keys=True).encode("utf-8")
        return hashlib.sha256(blob).hexdigest()


class FramePaletteCache:
    """Persists frame palettes on disk so re-runs skip decoding and clustering."""

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    def _descriptor(
        self,
        media_path: Optional[Path],
        sampler_cfg: SamplerConfig,
        cluster_cfg: ClustererConfig,
    ) -> Optional[CacheDescriptor]:
        if media_path is None:
            return None
        try:
            stats = media_path.stat()
        except OSError:
            return None
        return CacheDescriptor(
            media_path=media_path,
            size=int(stats.st_size),
            mtime_ns=int(stats.st_mtime_ns),
            sampler=sampler_cfg,
            cluster=cluster_cfg,
        )

    def _entry_path(self, digest: str) -> Path:
        return self._base_dir / f"{digest}.json"

    # ------------------------------------------------------------------
    def load(
        self,
        media_path: Optional[Path],
        sampler_cfg: SamplerConfig,
        cluster_cfg: ClustererConfig,
    ) -> Optional[List[FramePalette]]:
        descriptor = self._descriptor(media_path, sampler_cfg, cluster_cfg)
        if not descriptor:
            return None
        entry_path = self._entry_path(descriptor.digest())
        if not entry_path.exists():
            return None
        try:
            raw = json.loads(entry_path.read_text(encoding="utf-8"))
            return [
                FramePalette(
                    frame_index=int(item["frame_index"]),
                    colors=tuple(
                        Color(int(r), int(g), int(b), float(weight)) for r, g, b, weight in item["colors"]
                    ),
                )
                for item in raw["frames"]
            ]
        except (OSError, ValueError, KeyError, TypeError) as error:
            # Corrupted entry – remove and treat as miss
            logger.debug("Discarding unreadable cache entry %s: %s", entry_path, error)
            try:
                entry_path.unlink(missing_ok=True)
            except OSError:
                pass
            return None

    # ------------------------------------------------------------------
    def store(
        self,
        media_path: Optional[Path],
        sampler_cfg: SamplerConfig,
        cluster_cfg: ClustererConfig,
        frame_palettes: List[FramePalette],
    ) -> None:
        descriptor = self._descriptor(media_path, sampler_cfg, cluster_cfg)
        if not descriptor:
            return
        entry_path = self._entry_path(descriptor.digest())
        payload: Dict[str, object] = {
            "frames": [
                {
                    "frame_index": palette.frame_index,
                    "colors": [[c.r, c.g, c.b, c.weight] for c in palette.colors],
                }
                for palette in frame_palettes
            ]
        }
        tmp_path = entry_path.with_suffix(".tmp")
        try:
            tmp_path.write_text(json.dumps(payload), encoding="utf-8")
            os.replace(tmp_path, entry_path)
        except OSError:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                pass
            raise
