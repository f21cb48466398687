"""Workbook loading helpers shared by the spreadsheet extractor and rewriter."""

import io
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)


@dataclass
class LoadedWorkbook:
    """A workbook plus, when readable, its cached formula results.

    Attributes:
        workbook: Loaded with formulas and rich text intact; this is the
            copy that gets rewritten and saved.
        cached: Loaded with ``data_only=True`` so formula cells carry the
            value Excel last computed. None if that load failed.
    """

    workbook: Workbook
    cached: Workbook | None = None

    def cached_value(self, sheet: Worksheet, coordinate: str) -> Any:
        """Cached result for a cell, or None."""
        if self.cached is None or sheet.title not in self.cached.sheetnames:
            return None
        return self.cached[sheet.title][coordinate].value

    def iter_rows(self) -> Iterator[tuple[Worksheet, int, tuple[Any, ...]]]:
        """Yield ``(sheet, row_number, cells)`` for every row, empty rows included."""
        for sheet in self.workbook.worksheets:
            for row_number, row in enumerate(
                sheet.iter_rows(min_row=1, max_row=sheet.max_row), start=1
            ):
                yield sheet, row_number, row


def load(data: bytes, log: logging.Logger | None = None) -> LoadedWorkbook:
    """Load workbook bytes.

    Args:
        data: The .xlsx content.
        log: Logger for the non-fatal cached-value load failure.

    Returns:
        The loaded workbook.

    Raises:
        Exception: Whatever openpyxl raises for unreadable input.
    """
    log = log or logger
    workbook = load_workbook(io.BytesIO(data), rich_text=True)
    try:
        cached = load_workbook(io.BytesIO(data), data_only=True)
    except Exception as e:
        log.warning(f"Cached formula values unavailable: {e}")
        cached = None
    return LoadedWorkbook(workbook=workbook, cached=cached)


def to_bytes(workbook: Workbook) -> bytes:
    """Serialize a workbook to .xlsx bytes."""
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
