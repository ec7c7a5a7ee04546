from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tonelab.adjust import AdjustmentVector


EXPORT_FORMATS = ("jpeg", "png", "tiff")


@dataclass
class PreviewConfig:
    max_dimension: int = 1024


@dataclass
class ExportConfig:
    format: str = "jpeg"
    jpeg_quality: int = 95
    png_compression: int = 6
    write_edit_record: bool = False


@dataclass
class WorkerConfig:
    queue_maxsize: int = 0
    discard_stale: bool = True


@dataclass
class AppConfig:
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    worker: WorkerConfig = field(default_factory=WorkerConfig)
    presets: dict[str, AdjustmentVector] = field(default_factory=dict)
    log_level: str = "INFO"
    log_file: Path | None = None


def default_config() -> AppConfig:
    return AppConfig()


def _expand_path(value: str | None, base: Path) -> Path | None:
    if value in (None, ""):
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _ranged_int(data: dict[str, Any], key: str, default: int, lo: int, hi: int | None = None) -> int:
    value = int(data.get(key, default))
    if value < lo or (hi is not None and value > hi):
        upper = "" if hi is None else f"..{hi}"
        raise ValueError(f"{key} must be in range {lo}{upper}, got {value}")
    return value


def _load_yaml(path: Path) -> Any:
    try:
        import yaml  # type: ignore
    except Exception as exc:
        raise RuntimeError("PyYAML is required for config loading. Install with: pip install PyYAML") from exc

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _adjustments_from(raw: Any, origin: str) -> AdjustmentVector:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"{origin}: adjustments must be a mapping")
    vector = AdjustmentVector.from_dict(raw)
    vector.validate()
    return vector


def load_adjustments(path: str | Path) -> AdjustmentVector:
    adj_path = Path(path).expanduser().resolve()
    return _adjustments_from(_load_yaml(adj_path), str(adj_path))


def load_config(path: str | Path) -> AppConfig:
    cfg_path = Path(path).expanduser().resolve()
    raw = _load_yaml(cfg_path) or {}
    base = cfg_path.parent

    preview_raw = raw.get("preview", {}) or {}
    export_raw = raw.get("export", {}) or {}
    worker_raw = raw.get("worker", {}) or {}
    presets_raw = raw.get("presets", {}) or {}

    preview = PreviewConfig(max_dimension=_ranged_int(preview_raw, "max_dimension", 1024, 1))

    export_format = str(export_raw.get("format", "jpeg")).lower()
    if export_format == "jpg":
        export_format = "jpeg"
    elif export_format == "tif":
        export_format = "tiff"
    if export_format not in EXPORT_FORMATS:
        raise ValueError(f"unsupported export format: {export_format}")

    export = ExportConfig(
        format=export_format,
        jpeg_quality=_ranged_int(export_raw, "jpeg_quality", 95, 0, 100),
        png_compression=_ranged_int(export_raw, "png_compression", 6, 0, 9),
        write_edit_record=bool(export_raw.get("write_edit_record", False)),
    )

    worker = WorkerConfig(
        queue_maxsize=_ranged_int(worker_raw, "queue_maxsize", 0, 0),
        discard_stale=bool(worker_raw.get("discard_stale", True)),
    )

    if not isinstance(presets_raw, dict):
        raise ValueError("presets must be a mapping of name -> adjustments")
    presets = {str(name): _adjustments_from(values, f"preset {name}") for name, values in presets_raw.items()}

    app = AppConfig(
        preview=preview,
        export=export,
        worker=worker,
        presets=presets,
        log_level=str(raw.get("log_level", "INFO")),
        log_file=_expand_path(raw.get("log_file"), base),
    )

    ensure_dirs(app)
    return app


def ensure_dirs(config: AppConfig) -> None:
    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
