"""Unit tests for the spreadsheet cell model and placeholder extractor."""

import asyncio
import datetime
import logging

import pytest
from openpyxl import Workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont

from docfill.strategies.extractors import SpreadsheetPlaceholderExtractor
from docfill.strategies.spreadsheet.cells import (
    BooleanContent,
    FormulaContent,
    HyperlinkContent,
    NumberContent,
    OtherContent,
    RichTextContent,
    TextContent,
    cell_display_text,
    read_cell_content,
)
from tests.conftest import build_xlsx


# =============================================================================
# Cell Content Tests
# =============================================================================


class TestReadCellContent:
    """Test suite for read_cell_content."""

    @pytest.fixture
    def sheet(self):
        return Workbook().active

    def test_empty_cell(self, sheet):
        assert read_cell_content(sheet["A1"]) is None
        assert cell_display_text(sheet["A1"]) is None

    def test_text(self, sheet):
        sheet["A1"] = "Hello {{name}}"
        assert read_cell_content(sheet["A1"]) == TextContent(text="Hello {{name}}")

    def test_number(self, sheet):
        sheet["A1"] = 42
        sheet["A2"] = 1.5
        assert read_cell_content(sheet["A1"]) == NumberContent(number=42)
        assert cell_display_text(sheet["A2"]) == "1.5"

    def test_boolean(self, sheet):
        sheet["A1"] = True
        sheet["A2"] = False
        assert read_cell_content(sheet["A1"]) == BooleanContent(flag=True)
        assert cell_display_text(sheet["A1"]) == "true"
        assert cell_display_text(sheet["A2"]) == "false"

    def test_rich_text_runs_concatenated(self, sheet):
        sheet["A1"] = CellRichText(
            "Dear ",
            TextBlock(InlineFont(b=True), "{{client"),
            TextBlock(InlineFont(i=True), "_name}}"),
        )
        content = read_cell_content(sheet["A1"])
        assert isinstance(content, RichTextContent)
        assert content.to_display_text() == "Dear {{client_name}}"

    def test_formula_prefers_cached_result(self, sheet):
        sheet["A1"] = "=CONCAT(\"{{\", \"total\", \"}}\")"
        content = read_cell_content(sheet["A1"], cached_value="{{total}}")
        assert isinstance(content, FormulaContent)
        assert content.to_display_text() == "{{total}}"

    def test_formula_without_cached_result(self, sheet):
        sheet["A1"] = "=SUM(B1:B2)"
        assert cell_display_text(sheet["A1"]) == "=SUM(B1:B2)"

    def test_hyperlink(self, sheet):
        sheet["A1"] = "Visit <<site>>"
        sheet["A1"].hyperlink = "https://example.com"
        assert read_cell_content(sheet["A1"]) == HyperlinkContent(
            text="Visit <<site>>", target="https://example.com"
        )

    def test_hyperlink_without_text(self, sheet):
        sheet["A1"].hyperlink = "https://example.com/{{slug}}"
        assert cell_display_text(sheet["A1"]) == "https://example.com/{{slug}}"

    def test_other_values(self, sheet):
        sheet["A1"] = datetime.date(2024, 1, 31)
        assert isinstance(read_cell_content(sheet["A1"]), OtherContent)
        assert cell_display_text(sheet["A1"]) == "2024-01-31"

    def test_formula_content_fallbacks(self):
        assert FormulaContent(formula="", hyperlink="https://x").to_display_text() == "https://x"
        assert FormulaContent(formula="", result=True).to_display_text() == "true"
        assert FormulaContent(formula="").to_display_text() == ""


# =============================================================================
# Spreadsheet Extractor Tests
# =============================================================================


class TestSpreadsheetPlaceholderExtractor:
    """Test suite for SpreadsheetPlaceholderExtractor."""

    @pytest.fixture
    def extractor(self):
        return SpreadsheetPlaceholderExtractor()

    def test_supported_extensions(self, extractor):
        assert extractor.supported_extensions == {".xlsx"}

    def test_extracts_all_grammars_across_sheets(self, extractor):
        """Test that every cell of every sheet is scanned."""

        def populate(sheet):
            sheet["A1"] = "Invoice for {{client_name}}"
            sheet["B3"] = "Ship to <<city>>"
            sheet["C10"] = 99
            totals = sheet.parent.create_sheet("Totals")
            totals["A1"] = "Total: $amount$ due {due_date}"
            totals["A2"] = "{x=1} f{g(y)}"

        data = build_xlsx(populate)

        async def run_test():
            return await extractor.extract(data)

        assert asyncio.run(run_test()) == {"client_name", "city", "amount", "due_date"}

    def test_empty_rows_do_not_stop_the_walk(self, extractor):
        def populate(sheet):
            sheet["A1"] = "{{top}}"
            sheet["A50"] = "{{bottom}}"

        data = build_xlsx(populate)

        assert asyncio.run(extractor.extract(data)) == {"top", "bottom"}

    def test_rich_text_placeholder_split_across_runs(self, extractor):
        def populate(sheet):
            sheet["A1"] = CellRichText(
                TextBlock(InlineFont(b=True), "{{first"),
                "_name}}",
            )

        assert asyncio.run(extractor.extract(build_xlsx(populate))) == {"first_name"}

    def test_workbook_without_placeholders(self, extractor):
        def populate(sheet):
            sheet["A1"] = "Plain text"
            sheet["A2"] = 12

        assert asyncio.run(extractor.extract(build_xlsx(populate))) == set()

    def test_corrupted_workbook_degrades_to_empty_set(self, caplog):
        """Test that unreadable bytes are logged and yield no placeholders."""
        extractor = SpreadsheetPlaceholderExtractor(log=logging.getLogger("test.extractor"))

        with caplog.at_level(logging.WARNING, logger="test.extractor"):
            result = asyncio.run(extractor.extract(b"definitely not a workbook"))

        assert result == set()
        assert any("Workbook could not be processed" in r.message for r in caplog.records)

    def test_failing_cell_is_skipped(self, extractor, monkeypatch):
        """Test that an error in one cell does not abort extraction."""
        from docfill.strategies.extractors import spreadsheet as module

        original = module.cell_display_text

        def flaky(cell, cached_value=None):
            if cell.coordinate == "A1":
                raise RuntimeError("boom")
            return original(cell, cached_value)

        monkeypatch.setattr(module, "cell_display_text", flaky)

        def populate(sheet):
            sheet["A1"] = "{{broken}}"
            sheet["A2"] = "{{kept}}"

        assert asyncio.run(extractor.extract(build_xlsx(populate))) == {"kept"}
