"""Export-Modul: Excel (openpyxl) und Terminal-Ausgabe (rich)."""

from export.excel_export import ExcelExporter

__all__ = ["ExcelExporter"]
