from .export import ExportError, ExportFormat, encode_image, export_format_for_path, write_export
from .manifests import EditRecord, build_edit_record, edit_record_path, write_edit_record

__all__ = [
    "ExportError",
    "ExportFormat",
    "encode_image",
    "export_format_for_path",
    "write_export",
    "EditRecord",
    "build_edit_record",
    "edit_record_path",
    "write_edit_record",
]
