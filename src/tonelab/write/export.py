from __future__ import annotations

from dataclasses import dataclass
import io
from pathlib import Path

import numpy as np
from PIL import Image


class ExportError(RuntimeError):
    pass


_FORMAT_ALIASES = {
    "jpeg": "jpeg",
    "jpg": "jpeg",
    "png": "png",
    "tiff": "tiff",
    "tif": "tiff",
}


@dataclass(frozen=True)
class ExportFormat:
    """Target container. ``quality`` applies to JPEG, ``compression`` to PNG."""

    kind: str = "jpeg"
    quality: int = 95
    compression: int = 6

    def __post_init__(self) -> None:
        kind = _FORMAT_ALIASES.get(str(self.kind).lower())
        if kind is None:
            raise ValueError(f"unsupported export format: {self.kind}")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "quality", min(max(int(self.quality), 0), 100))
        object.__setattr__(self, "compression", min(max(int(self.compression), 0), 9))

    @property
    def extension(self) -> str:
        return {"jpeg": ".jpg", "png": ".png", "tiff": ".tiff"}[self.kind]


def export_format_for_path(path: Path, quality: int = 95, compression: int = 6) -> ExportFormat:
    return ExportFormat(kind=path.suffix.lower().lstrip("."), quality=quality, compression=compression)


def _encode_tiff(rgba: np.ndarray) -> bytes:
    try:
        import tifffile  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dependency
        raise ExportError("tifffile is required for TIFF export. Install with: pip install tifffile") from exc

    buf = io.BytesIO()
    tifffile.imwrite(buf, rgba, photometric="rgb", extrasamples=("unassalpha",))
    return buf.getvalue()


def encode_image(image: np.ndarray, fmt: ExportFormat) -> bytes:
    rgba = np.ascontiguousarray(image, dtype=np.uint8)
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise ExportError(f"expected an (height, width, 4) raster, got {rgba.shape}")

    try:
        if fmt.kind == "tiff":
            return _encode_tiff(rgba)

        buf = io.BytesIO()
        if fmt.kind == "jpeg":
            Image.fromarray(np.ascontiguousarray(rgba[..., :3])).save(buf, format="JPEG", quality=fmt.quality)
        else:
            Image.fromarray(rgba).save(buf, format="PNG", compress_level=fmt.compression)
        return buf.getvalue()
    except ExportError:
        raise
    except Exception as exc:
        raise ExportError(f"{fmt.kind.upper()} export error: {exc}") from exc


def write_export(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
