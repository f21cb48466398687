"""Spreadsheet reading helpers shared by the extractor and the rewriter."""

from docfill.strategies.spreadsheet.cells import (
    CellContent,
    cell_display_text,
    read_cell_content,
)
from docfill.strategies.spreadsheet.workbook import LoadedWorkbook, load, to_bytes

__all__ = [
    "CellContent",
    "LoadedWorkbook",
    "cell_display_text",
    "load",
    "read_cell_content",
    "to_bytes",
]
