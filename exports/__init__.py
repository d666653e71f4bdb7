"""
Exports: spreadsheet rendering of projection results.
"""

from .workbook import build_workbook, export_projection_to_excel, export_projection_to_base64

__all__ = [
    "build_workbook",
    "export_projection_to_excel",
    "export_projection_to_base64",
]
