from __future__ import annotations

from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any

from tonelab import __version__
from tonelab.adjust import AdjustmentVector
from tonelab.process.steps import PROCESSING_ORDER, ProcessStep


@dataclass
class EditRecord:
    """Sidecar describing how an exported file was produced."""

    source_filename: str
    output_filename: str
    output_format: str
    adjustments: dict[str, Any]
    summary: list[str]
    processing_order: list[str] = field(default_factory=lambda: [step.label for step in PROCESSING_ORDER])
    tool_version: str = __version__
    created_at_utc: str = ""


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_edit_record(
    source: Path,
    output: Path,
    output_format: str,
    adjustments: AdjustmentVector,
    order: tuple[ProcessStep, ...] = PROCESSING_ORDER,
) -> EditRecord:
    return EditRecord(
        source_filename=source.name,
        output_filename=output.name,
        output_format=output_format,
        adjustments=adjustments.to_dict(),
        summary=adjustments.summary(),
        processing_order=[step.label for step in order],
        created_at_utc=utc_now_iso(),
    )


def edit_record_path(output: Path) -> Path:
    return output.with_name(output.name + ".json")


def write_edit_record(path: Path, record: EditRecord) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(record), f, indent=2, sort_keys=True)
        f.write("\n")
