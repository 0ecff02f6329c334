from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.palette.errors import IoFailure
from src.palette.exporter import default_output_path, parse_json, to_json, write_palette
from src.palette.types import Color, GlobalPalette, PaletteEntry


def _global(*rgbs) -> GlobalPalette:
    return GlobalPalette(entries=[PaletteEntry(frame_index=i, color=Color(*rgb)) for i, rgb in enumerate(rgbs)])


def test_json_contract_round_trip() -> None:
    palette = _global((255, 0, 0), (0, 255, 0), (0, 0, 255))
    payload = to_json(palette)

    assert json.loads(payload) == {"colors": [[255, 0, 0], [0, 255, 0], [0, 0, 255]]}
    assert parse_json(payload) == [[255, 0, 0], [0, 255, 0], [0, 0, 255]]


def test_serialization_is_byte_stable() -> None:
    palette = _global((1, 2, 3), (4, 5, 6))
    assert to_json(palette) == to_json(palette) == '{"colors":[[1,2,3],[4,5,6]]}'


def test_parse_rejects_out_of_range_channels() -> None:
    with pytest.raises(ValidationError):
        parse_json('{"colors": [[256, 0, 0]]}')


def test_default_output_path_replaces_extension() -> None:
    assert default_output_path("videos/clip.mp4") == Path("videos/clip.json")
    assert default_output_path(Path("/tmp/movie.final.mkv")) == Path("/tmp/movie.final.json")


def test_write_palette_creates_document(tmp_path) -> None:
    target = tmp_path / "palette.json"
    written = write_palette(_global((9, 8, 7)), target)

    assert written == target
    assert json.loads(target.read_text()) == {"colors": [[9, 8, 7]]}
    assert list(tmp_path.iterdir()) == [target]


def test_write_palette_failure_surfaces_io_failure(tmp_path) -> None:
    target = tmp_path / "missing-dir" / "palette.json"
    with pytest.raises(IoFailure) as info:
        write_palette(_global((9, 8, 7)), target)

    assert info.value.stage == "export"
    assert isinstance(info.value.__cause__, OSError)
    assert str(target) in str(info.value)
    assert "palette.json.tmp" not in str(info.value)
    assert not target.exists()
