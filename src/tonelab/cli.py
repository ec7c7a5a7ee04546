from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import logging
from pathlib import Path
import sys

from tonelab.adjust import Adjustment, AdjustmentVector
from tonelab.config import AppConfig, default_config, load_adjustments, load_config
from tonelab.decode import RAW_EXTENSIONS, STANDARD_EXTENSIONS, ImageLoader
from tonelab.process import ProcessingJob, ProcessingPipeline, calculate_histogram
from tonelab.utils.formatting import shutter_seconds_to_fraction
from tonelab.utils.logging_utils import configure_logging
from tonelab.write import (
    ExportError,
    ExportFormat,
    build_edit_record,
    edit_record_path,
    encode_image,
    write_edit_record,
    write_export,
)


logger = logging.getLogger(__name__)


def _add_adjustment_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--adjustments", default=None, help="YAML file with adjustment values")
    source.add_argument("--preset", default=None, help="Named preset from the config file")
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Override one scalar adjustment (repeatable), e.g. --set exposure=0.5",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tonelab")
    sub = parser.add_subparsers(dest="command", required=True)

    process = sub.add_parser("process", help="Apply adjustments to one image and export it")
    process.add_argument("input", help="Input image (RAW or standard format)")
    process.add_argument("output", help="Output path; the extension picks the format unless --format is given")
    process.add_argument("--config", default=None, help="Path to YAML config")
    _add_adjustment_args(process)
    process.add_argument("--format", choices=["jpeg", "png", "tiff"], default=None, help="Output format")
    process.add_argument("--quality", type=int, default=None, help="JPEG quality 0-100")
    process.add_argument("--compression", type=int, default=None, help="PNG compression level 0-9")
    process.add_argument("--preview", action="store_true", help="Downscale to the preview size before processing")
    process.add_argument("--edit-record", action="store_true", help="Write a JSON sidecar next to the output")

    info = sub.add_parser("info", help="Show image metadata")
    info.add_argument("input", help="Input image path")
    info.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

    histogram = sub.add_parser("histogram", help="Show the RGB/luminance histogram of an image")
    histogram.add_argument("input", help="Input image path")
    histogram.add_argument("--config", default=None, help="Path to YAML config")
    histogram.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    _add_adjustment_args(histogram)

    sub.add_parser("formats", help="List supported input extensions")

    return parser


def _config_from_args(args: argparse.Namespace) -> AppConfig:
    config = load_config(args.config) if getattr(args, "config", None) else default_config()
    configure_logging(config.log_level, config.log_file)
    return config


def _parse_override(text: str) -> tuple[Adjustment, float]:
    name, sep, value = text.partition("=")
    if not sep:
        raise ValueError(f"expected NAME=VALUE, got {text!r}")
    try:
        adjustment = Adjustment(name.strip().lower())
    except ValueError as exc:
        raise ValueError(f"unknown adjustment: {name.strip()}") from exc
    return adjustment, float(value)


def _adjustments_from_args(args: argparse.Namespace, config: AppConfig) -> AdjustmentVector:
    if args.adjustments:
        adjustments = load_adjustments(args.adjustments)
    elif args.preset:
        if args.preset not in config.presets:
            raise ValueError(f"unknown preset: {args.preset}")
        adjustments = AdjustmentVector.from_dict(config.presets[args.preset].to_dict())
    else:
        adjustments = AdjustmentVector()

    for text in args.overrides:
        adjustment, value = _parse_override(text)
        adjustments.set(adjustment, value)
    adjustments.validate()
    return adjustments


def _export_format(args: argparse.Namespace, config: AppConfig, output: Path) -> ExportFormat:
    kind = args.format
    if kind is None and output.suffix.lower().lstrip(".") in ("jpg", "jpeg", "png", "tif", "tiff"):
        kind = output.suffix.lower().lstrip(".")
    quality = args.quality if args.quality is not None else config.export.jpeg_quality
    compression = args.compression if args.compression is not None else config.export.png_compression
    return ExportFormat(kind=kind or config.export.format, quality=quality, compression=compression)


def _cmd_process(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    adjustments = _adjustments_from_args(args, config)

    input_path = Path(args.input).expanduser().resolve()
    output_path = Path(args.output).expanduser().resolve()
    fmt = _export_format(args, config, output_path)

    image = ImageLoader().load_image(input_path)
    pipeline = ProcessingPipeline()
    job = ProcessingJob(image=image, adjustments=adjustments)

    if args.preview:
        result = pipeline.process_preview(job, config.preview.max_dimension)
        if not result.ok or result.image is None:
            raise ExportError(result.error or "processing produced no image")
        data = encode_image(result.image, fmt)
    else:
        data = pipeline.export_image(job, fmt)

    write_export(output_path, data)
    logger.info("wrote %s (%s, %d bytes)", output_path, fmt.kind, len(data))

    if args.edit_record or config.export.write_edit_record:
        record = build_edit_record(input_path, output_path, fmt.kind, adjustments, pipeline.get_processing_order())
        write_edit_record(edit_record_path(output_path), record)

    print(str(output_path))
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    input_path = Path(args.input).expanduser().resolve()
    meta = ImageLoader().get_image_metadata(input_path)

    payload = asdict(meta)
    payload["path"] = str(input_path)
    payload["exposure_time"] = shutter_seconds_to_fraction(meta.exposure_time)
    if meta.white_balance is not None:
        payload["white_balance"] = list(meta.white_balance)

    if args.json:
        print(json.dumps(payload, indent=2))
        return 0

    print(f"File: {payload['path']}")
    print(f"Size: {meta.width}x{meta.height}")
    print(f"RAW: {'yes' if meta.is_raw else 'no'}")
    print(f"Color space: {meta.color_space}")
    camera = " ".join(part for part in (meta.make, meta.model) if part)
    if camera:
        print(f"Camera: {camera}")
    if meta.white_balance is not None:
        print("White balance: " + ", ".join(f"{v:.4f}" for v in meta.white_balance))
    if meta.iso is not None:
        print(f"ISO: {meta.iso:g}")
    if payload["exposure_time"] is not None:
        print(f"Shutter: {payload['exposure_time']} s")
    if meta.aperture is not None:
        print(f"Aperture: f/{meta.aperture:g}")
    return 0


def _cmd_histogram(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    adjustments = _adjustments_from_args(args, config)

    image = ImageLoader().load_image(Path(args.input).expanduser().resolve())
    if adjustments.has_changes():
        result = ProcessingPipeline().process(ProcessingJob(image=image, adjustments=adjustments))
        if not result.ok or result.image is None:
            raise RuntimeError(result.error or "processing produced no image")
        image = result.image

    hist = calculate_histogram(image)
    if args.json:
        payload = {
            "total_pixels": hist.total_pixels,
            "peak": hist.get_peak_value(),
            "red": hist.red.tolist(),
            "green": hist.green.tolist(),
            "blue": hist.blue.tolist(),
            "luminance": hist.luminance.tolist(),
        }
        print(json.dumps(payload))
        return 0

    print(f"Pixels: {hist.total_pixels}")
    print(f"Peak bucket count: {hist.get_peak_value()}")
    for name, counts in (("red", hist.red), ("green", hist.green), ("blue", hist.blue), ("luminance", hist.luminance)):
        nonzero = counts.nonzero()[0]
        if nonzero.size == 0:
            print(f"  {name:>9}: empty")
            continue
        print(f"  {name:>9}: min={int(nonzero[0])} max={int(nonzero[-1])} mode={int(counts.argmax())}")
    return 0


def _cmd_formats(args: argparse.Namespace) -> int:
    print("RAW: " + " ".join(RAW_EXTENSIONS))
    print("Standard: " + " ".join(STANDARD_EXTENSIONS))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "process":
            return _cmd_process(args)
        if args.command == "info":
            return _cmd_info(args)
        if args.command == "histogram":
            return _cmd_histogram(args)
        if args.command == "formats":
            return _cmd_formats(args)

        parser.error(f"unknown command: {args.command}")
        return 2
    except Exception as exc:
        logger.exception("fatal error")
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
