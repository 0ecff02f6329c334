"""Serialization of the global palette to the ``{"colors": [...]}`` document."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Annotated, List, Tuple

from pydantic import BaseModel, Field

from .errors import IoFailure
from .types import GlobalPalette

logger = logging.getLogger(__name__)

Channel = Annotated[int, Field(ge=0, le=255)]


class PaletteDocument(BaseModel):
    """External JSON contract consumed by the mosaic renderer."""

    colors: List[Tuple[Channel, Channel, Channel]] = Field(default_factory=list)


def to_document(palette: GlobalPalette) -> PaletteDocument:
    return PaletteDocument(colors=[tuple(rgb) for rgb in palette.colors()])


def to_json(palette: GlobalPalette) -> str:
    return to_document(palette).model_dump_json()


def parse_json(text: str) -> List[List[int]]:
    document = PaletteDocument.model_validate_json(text)
    return [list(rgb) for rgb in document.colors]


def default_output_path(input_path: str | Path) -> Path:
    return Path(input_path).with_suffix(".json")


def write_palette(palette: GlobalPalette, path: str | Path) -> Path:
    target = Path(path)
    payload = to_json(palette)
    colors = palette.colors()
    logger.debug(
        "Writing colors [%s, ... %s] to %s",
        ", ".join(str(rgb) for rgb in colors[:3]),
        ", ".join(str(rgb) for rgb in colors[-2:]),
        target,
    )
    tmp_path = target.with_name(target.name + ".tmp")
    try:
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, target)
    except OSError as error:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            pass
        reason = error.strerror or type(error).__name__
        raise IoFailure(f"Unable to write palette to {target}: {reason}") from error
    return target


__all__ = [
    "PaletteDocument",
    "default_output_path",
    "parse_json",
    "to_document",
    "to_json",
    "write_palette",
]
