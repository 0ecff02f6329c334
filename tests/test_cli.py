from __future__ import annotations

import json

import numpy as np
import pytest

from src.palette import cli
from src.palette.video import ArrayVideoSource


@pytest.fixture()
def fake_video(monkeypatch):
    frames: dict = {"frames": []}

    def fake_source(path, logger=None):
        return ArrayVideoSource(frames["frames"])

    monkeypatch.setattr(cli, "OpenCVVideoSource", fake_source)
    monkeypatch.setattr(cli, "setup_logging", lambda verbosity: None)
    return frames


def test_cli_writes_default_output_path(tmp_path, fake_video) -> None:
    fake_video["frames"] = [np.full((8, 8, 3), (10, 20, 30), dtype=np.uint8) for _ in range(12)]
    video = tmp_path / "clip.mp4"

    assert cli.main([str(video), "--workers", "2"]) == 0
    assert json.loads((tmp_path / "clip.json").read_text()) == {"colors": [[10, 20, 30]]}


def test_cli_honours_explicit_output(tmp_path, fake_video) -> None:
    fake_video["frames"] = [np.full((8, 8, 3), (1, 2, 3), dtype=np.uint8)]
    target = tmp_path / "custom.json"

    assert cli.main([str(tmp_path / "clip.mp4"), "-o", str(target), "-dd", "--mode", "mean"]) == 0
    assert json.loads(target.read_text()) == {"colors": [[1, 2, 3]]}


def test_cli_empty_video_reports_stage_and_writes_nothing(tmp_path, fake_video, capsys) -> None:
    video = tmp_path / "empty.mp4"

    assert cli.main([str(video)]) == 1
    assert "[ERROR] sample:" in capsys.readouterr().err
    assert not (tmp_path / "empty.json").exists()


def test_build_config_maps_arguments() -> None:
    args = cli.parse_args(
        [
            "in.mp4",
            "--samples",
            "30",
            "--strategy",
            "per_second",
            "--max-colors",
            "4",
            "--colors-per-frame",
            "2",
            "--threshold",
            "0",
            "--workers",
            "3",
            "--ignore-cache",
        ]
    )
    config = cli.build_config(args)

    assert config.sampler.sample_count == 30
    assert config.sampler.strategy == "per_second"
    assert config.cluster.max_colors == 4
    assert config.aggregate.colors_per_frame == 2
    assert config.aggregate.dedup_threshold == 0
    assert config.workers == 3
    assert config.ignore_cache is True


def test_cli_rejects_unknown_mode(capsys) -> None:
    with pytest.raises(SystemExit) as info:
        cli.parse_args(["in.mp4", "--mode", "median"])
    assert info.value.code == 2


def test_cli_export_failure_reports_stage(tmp_path, fake_video, capsys) -> None:
    fake_video["frames"] = [np.full((8, 8, 3), (10, 20, 30), dtype=np.uint8) for _ in range(3)]
    target = tmp_path / "missing-dir" / "x.json"

    assert cli.main([str(tmp_path / "clip.mp4"), "-o", str(target)]) == 1
    err = capsys.readouterr().err
    assert "[ERROR] export:" in err
    assert "x.json.tmp" not in err
    assert not target.exists()


def test_cli_unopenable_video_reports_decode_stage(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda verbosity: None)

    assert cli.main([str(tmp_path / "absent.mp4")]) == 1
    assert "[ERROR] decode:" in capsys.readouterr().err
    assert not (tmp_path / "absent.json").exists()


def test_non_positive_workers_fall_back_to_cpu_count() -> None:
    assert cli.build_config(cli.parse_args(["in.mp4", "--workers", "0"])).workers is None
    assert cli.build_config(cli.parse_args(["in.mp4", "--workers", "-2"])).workers is None
