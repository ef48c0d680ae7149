"""Record exporters (spreadsheet and Word)."""

from docsift.export.exporter import EXPORT_COLUMNS, export_records

__all__ = ["EXPORT_COLUMNS", "export_records"]
