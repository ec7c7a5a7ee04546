from __future__ import annotations

import json
from pathlib import Path

import numpy as np
from PIL import Image
import pytest

from tonelab.cli import main
from tonelab.decode import RawSensorImage, raw_decoder


def _write_png(path: Path) -> None:
    data = np.full((6, 8, 3), 90, dtype=np.uint8)
    Image.fromarray(data).save(path)


def test_process_writes_jpeg_and_edit_record(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "in.png"
    _write_png(source)
    output = tmp_path / "out" / "frame.jpg"

    rc = main(["process", str(source), str(output), "--set", "exposure=0.5", "--set", "contrast=20", "--edit-record"])
    assert rc == 0
    assert output.read_bytes().startswith(b"\xff\xd8")
    assert str(output.resolve()) in capsys.readouterr().out

    record = json.loads((output.parent / "frame.jpg.json").read_text(encoding="utf-8"))
    assert record["adjustments"]["exposure"] == 0.5
    assert record["adjustments"]["contrast"] == 20.0
    assert record["output_format"] == "jpeg"


def test_process_format_flag_overrides_extension(tmp_path: Path) -> None:
    source = tmp_path / "in.png"
    _write_png(source)
    output = tmp_path / "out.img"

    assert main(["process", str(source), str(output), "--format", "png", "--compression", "1"]) == 0
    assert output.read_bytes().startswith(b"\x89PNG")


def test_process_uses_config_preset_and_preview(tmp_path: Path) -> None:
    source = tmp_path / "in.png"
    Image.fromarray(np.full((40, 100, 3), 60, dtype=np.uint8)).save(source)
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "preview:\n  max_dimension: 50\npresets:\n  bright:\n    exposure: 1.0\n",
        encoding="utf-8",
    )
    output = tmp_path / "preview.png"

    rc = main(["process", str(source), str(output), "--config", str(cfg), "--preset", "bright", "--preview"])
    assert rc == 0
    with Image.open(output) as img:
        assert img.size == (50, 20)
        assert img.getpixel((10, 10))[0] == 120


def test_process_unknown_adjustment_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "in.png"
    _write_png(source)
    rc = main(["process", str(source), str(tmp_path / "out.png"), "--set", "glow=3"])
    assert rc == 1
    assert "error: unknown adjustment: glow" in capsys.readouterr().err


def test_process_unsupported_input_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "in.xyz"
    source.write_bytes(b"\x00")
    rc = main(["process", str(source), str(tmp_path / "out.png")])
    assert rc == 1
    assert "Unsupported format: xyz" in capsys.readouterr().err


def test_info_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "in.png"
    _write_png(source)
    assert main(["info", str(source), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["width"] == 8
    assert payload["height"] == 6
    assert payload["is_raw"] is False
    assert payload["exposure_time"] is None


def test_histogram_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "in.png"
    _write_png(source)
    assert main(["histogram", str(source), "--json", "--set", "contrast=-100"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["total_pixels"] == 48
    assert payload["red"][128] == 48
    assert payload["peak"] == 48


def test_formats_lists_extensions(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["formats"]) == 0
    out = capsys.readouterr().out
    assert "nef" in out
    assert "png" in out


def test_info_prints_raw_camera(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    sensor = RawSensorImage(width=6, height=4, data=np.zeros((4, 6), dtype=np.uint16), make="FUJIFILM", model="X-T5")
    monkeypatch.setattr(raw_decoder, "read_sensor_image", lambda path: sensor)
    source = tmp_path / "frame.raf"
    source.write_bytes(b"\x00")

    assert main(["info", str(source)]) == 0
    out = capsys.readouterr().out
    assert "Size: 6x4" in out
    assert "RAW: yes" in out
    assert "Color space: Unknown" in out
    assert "Camera: FUJIFILM X-T5" in out
