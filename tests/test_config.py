from __future__ import annotations

from pathlib import Path

import pytest

from tonelab.config import default_config, load_adjustments, load_config


def test_default_config_values() -> None:
    cfg = default_config()
    assert cfg.preview.max_dimension == 1024
    assert cfg.export.format == "jpeg"
    assert cfg.export.jpeg_quality == 95
    assert cfg.export.png_compression == 6
    assert cfg.worker.discard_stale
    assert cfg.presets == {}


def test_load_config_parses_sections(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(
        """
log_level: DEBUG
log_file: ./logs/tonelab.log
preview:
  max_dimension: 512
export:
  format: png
  png_compression: 9
  write_edit_record: true
worker:
  queue_maxsize: 4
  discard_stale: false
presets:
  punchy:
    contrast: 30
    vibrance: 500
    tone_curve:
      curve_type: smooth
      points: [[0, 0], [0.5, 0.6], [1, 1]]
""",
        encoding="utf-8",
    )

    cfg = load_config(cfg_file)
    assert cfg.log_level == "DEBUG"
    assert cfg.log_file == (tmp_path / "logs" / "tonelab.log").resolve()
    assert cfg.log_file.parent.exists()
    assert cfg.preview.max_dimension == 512
    assert cfg.export.format == "png"
    assert cfg.export.png_compression == 9
    assert cfg.export.write_edit_record
    assert cfg.worker.queue_maxsize == 4
    assert not cfg.worker.discard_stale

    punchy = cfg.presets["punchy"]
    assert punchy.contrast == 30.0
    assert punchy.vibrance == 100.0
    assert len(punchy.tone_curve.points) == 3


def test_load_config_empty_file_uses_defaults(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("", encoding="utf-8")
    assert load_config(cfg_file) == default_config()


def test_load_config_rejects_bad_values(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("export:\n  format: gif\n", encoding="utf-8")
    with pytest.raises(ValueError, match="unsupported export format"):
        load_config(cfg_file)

    cfg_file.write_text("export:\n  jpeg_quality: 101\n", encoding="utf-8")
    with pytest.raises(ValueError, match="jpeg_quality"):
        load_config(cfg_file)


def test_load_adjustments(tmp_path: Path) -> None:
    adj_file = tmp_path / "look.yaml"
    adj_file.write_text("exposure: 0.5\nsharpening: -10\n", encoding="utf-8")
    adj = load_adjustments(adj_file)
    assert adj.exposure == 0.5
    assert adj.sharpening == 0.0

    adj_file.write_text("sparkle: 3\n", encoding="utf-8")
    with pytest.raises(ValueError, match="unknown adjustment"):
        load_adjustments(adj_file)
