"""Spreadsheet rewriter.

Substitutes placeholder values into a copy of an .xlsx template, cell by
cell, keeping each rewritten cell's styling.
"""

import asyncio
import copy
import logging
from collections.abc import Mapping
from typing import Any

from docfill.interfaces.rewriter import BaseDocumentRewriter, DocumentProcessingError
from docfill.interfaces.template import XLSX_MEDIA_TYPE
from docfill.interfaces.values import ImageValue, PlaceholderValue
from docfill.strategies.placeholders.scanner import substitute
from docfill.strategies.spreadsheet import workbook as workbooks
from docfill.strategies.spreadsheet.cells import cell_display_text

logger = logging.getLogger(__name__)

STYLE_ATTRIBUTES = ("font", "alignment", "border", "fill", "number_format", "protection")


def image_marker(value: ImageValue) -> str:
    """Text standing in for an image, which cells cannot embed."""
    return f"[{value.format.label} Image]"


def replacement_text(value: PlaceholderValue) -> str:
    if isinstance(value, ImageValue):
        return image_marker(value)
    return value.value


def snapshot_style(cell: Any) -> dict[str, Any]:
    """Copy the style attributes that must survive a value change."""
    return {name: copy.copy(getattr(cell, name)) for name in STYLE_ATTRIBUTES}


def restore_style(cell: Any, snapshot: dict[str, Any]) -> None:
    for name, value in snapshot.items():
        setattr(cell, name, value)


class SpreadsheetRewriter(BaseDocumentRewriter):
    """Rewrites .xlsx templates.

    Every cell whose display text holds a known placeholder under any
    delimiter grammar gets the substituted text as a plain string value.
    Image values become a ``[PNG Image]`` style marker. Cells without a
    known placeholder keep their original typed value.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    async def rewrite(
        self,
        template: bytes,
        values: Mapping[str, PlaceholderValue],
    ) -> bytes:
        """Substitute values into a copy of the workbook.

        Args:
            template: The original .xlsx bytes.
            values: Placeholder name to normalized value.

        Returns:
            The rewritten .xlsx bytes.

        Raises:
            DocumentProcessingError: If the workbook cannot be read or written.
        """
        return await asyncio.to_thread(self.rewrite_sync, template, values)

    def rewrite_sync(
        self,
        template: bytes,
        values: Mapping[str, PlaceholderValue],
    ) -> bytes:
        try:
            loaded = workbooks.load(template, self._log)
        except Exception as e:
            self._log.error(f"Error loading Excel template: {e}", exc_info=True)
            raise DocumentProcessingError(f"Excel processing failed: {e}") from e

        replacements = {key: replacement_text(value) for key, value in values.items()}
        rewritten_cells = 0

        for sheet, _, row in loaded.iter_rows():
            for cell in row:
                text = cell_display_text(cell, loaded.cached_value(sheet, cell.coordinate))
                if not text:
                    continue

                new_text, changed = substitute(text, replacements.get)
                if not changed:
                    continue

                style = snapshot_style(cell)
                cell.value = new_text
                # A leading "=" would otherwise turn the text into a formula.
                cell.data_type = "s"
                restore_style(cell, style)
                rewritten_cells += 1
                self._log.debug(f"Rewrote {sheet.title}!{cell.coordinate}")

        self._log.info(f"Spreadsheet rewrite complete: {rewritten_cells} cells updated")

        try:
            return workbooks.to_bytes(loaded.workbook)
        except Exception as e:
            self._log.error(f"Error saving Excel workbook: {e}", exc_info=True)
            raise DocumentProcessingError(f"Excel processing failed: {e}") from e

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".xlsx"}

    @property
    def media_type(self) -> str:
        return XLSX_MEDIA_TYPE
