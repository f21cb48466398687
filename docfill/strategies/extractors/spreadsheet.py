"""Spreadsheet placeholder extractor.

Walks every cell of every worksheet and runs the delimiter scanner over the
cell's display text.
"""

import asyncio
import logging

from docfill.interfaces.extractor import BasePlaceholderExtractor, ExtractionDegraded
from docfill.strategies.placeholders.scanner import scan
from docfill.strategies.spreadsheet import workbook as workbooks
from docfill.strategies.spreadsheet.cells import cell_display_text

logger = logging.getLogger(__name__)


class SpreadsheetPlaceholderExtractor(BasePlaceholderExtractor):
    """Extracts placeholders from .xlsx workbooks.

    Never raises: a cell or row that cannot be processed is skipped, and a
    workbook that cannot be loaded yields whatever was collected (nothing).
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        """Initialize the extractor.

        Args:
            log: Logger for diagnostics. Defaults to the module logger.
        """
        self._log = log or logger

    async def extract(self, data: bytes) -> set[str]:
        """Extract placeholder names from workbook bytes.

        Args:
            data: The .xlsx content.

        Returns:
            The (possibly empty) set of placeholder names.
        """
        return await asyncio.to_thread(self.extract_sync, data)

    def extract_sync(self, data: bytes) -> set[str]:
        """Synchronous body of :meth:`extract`."""
        placeholders: set[str] = set()

        try:
            loaded = workbooks.load(data, self._log)
            self._log.info(f"Workbook loaded: {len(loaded.workbook.worksheets)} worksheets")

            for sheet, row_number, row in loaded.iter_rows():
                try:
                    for cell in row:
                        try:
                            text = cell_display_text(
                                cell, loaded.cached_value(sheet, cell.coordinate)
                            )
                            if not text:
                                continue
                            found = scan(text)
                            if found:
                                self._log.debug(
                                    f"Found placeholders {sorted(found)} at "
                                    f"{sheet.title}!{cell.coordinate}"
                                )
                                placeholders.update(found)
                        except Exception as e:
                            self._log.warning(
                                f"Error processing cell {sheet.title}!"
                                f"{getattr(cell, 'coordinate', '?')}: {e}"
                            )
                except Exception as e:
                    self._log.warning(f"Error processing row {row_number} of {sheet.title}: {e}")

        except Exception as e:
            degraded = ExtractionDegraded(f"Workbook could not be processed: {e}")
            self._log.warning(
                f"{degraded}; continuing with {len(placeholders)} placeholders",
                exc_info=True,
            )

        self._log.info(
            f"Spreadsheet extraction complete: {len(placeholders)} unique placeholders"
        )
        return placeholders

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".xlsx"}
