"""Cell content model for spreadsheet templates.

openpyxl hands back cell values in many shapes (plain values, rich text,
formula strings, array formulas, hyperlinked cells). ``read_cell_content``
classifies a cell once into an explicit variant and every variant knows how
to render itself as display text, so the extractor and the rewriter share a
single text policy.
"""

import datetime
from dataclasses import dataclass
from typing import Any

from openpyxl.cell.rich_text import CellRichText
from openpyxl.worksheet.formula import ArrayFormula, DataTableFormula


@dataclass(frozen=True)
class TextContent:
    text: str

    def to_display_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class NumberContent:
    number: int | float

    def to_display_text(self) -> str:
        return str(self.number)


@dataclass(frozen=True)
class BooleanContent:
    flag: bool

    def to_display_text(self) -> str:
        return "true" if self.flag else "false"


@dataclass(frozen=True)
class RichTextContent:
    runs: tuple[str, ...]

    def to_display_text(self) -> str:
        return "".join(self.runs)


@dataclass(frozen=True)
class FormulaContent:
    """A formula cell.

    The cached result comes from a separate ``data_only`` load of the
    workbook and is preferred over the formula source.
    """

    formula: str
    result: Any = None
    hyperlink: str | None = None

    def to_display_text(self) -> str:
        if self.result is not None:
            return _stringify(self.result)
        if self.formula:
            return self.formula
        return self.hyperlink or ""


@dataclass(frozen=True)
class HyperlinkContent:
    text: str | None
    target: str

    def to_display_text(self) -> str:
        return self.text or self.target


@dataclass(frozen=True)
class OtherContent:
    value: Any

    def to_display_text(self) -> str:
        return _stringify(self.value)


CellContent = (
    TextContent
    | NumberContent
    | BooleanContent
    | RichTextContent
    | FormulaContent
    | HyperlinkContent
    | OtherContent
)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _hyperlink_target(cell: Any) -> str | None:
    link = getattr(cell, "hyperlink", None)
    if link is None:
        return None
    return link.target or link.location or None


def read_cell_content(cell: Any, cached_value: Any = None) -> CellContent | None:
    """Classify an openpyxl cell.

    Args:
        cell: The cell from a workbook loaded with formulas and rich text.
        cached_value: The same cell's value from a ``data_only`` load, if
            available.

    Returns:
        The cell content, or None for an empty cell.
    """
    value = cell.value
    hyperlink = _hyperlink_target(cell)

    if value is None or value == "":
        if hyperlink:
            return HyperlinkContent(text=None, target=hyperlink)
        return None

    if isinstance(value, CellRichText):
        runs = tuple(run if isinstance(run, str) else run.text for run in value)
        return RichTextContent(runs=runs)

    if isinstance(value, ArrayFormula):
        return FormulaContent(formula=value.text or "", result=cached_value, hyperlink=hyperlink)

    if isinstance(value, DataTableFormula):
        return FormulaContent(formula="", result=cached_value, hyperlink=hyperlink)

    if getattr(cell, "data_type", None) == "f":
        return FormulaContent(formula=str(value), result=cached_value, hyperlink=hyperlink)

    if isinstance(value, bool):
        return BooleanContent(flag=value)

    if isinstance(value, (int, float)):
        return NumberContent(number=value)

    if isinstance(value, str):
        if hyperlink:
            return HyperlinkContent(text=value, target=hyperlink)
        return TextContent(text=value)

    return OtherContent(value=value)


def cell_display_text(cell: Any, cached_value: Any = None) -> str | None:
    """Display text of a cell, or None when the cell is empty."""
    content = read_cell_content(cell, cached_value)
    if content is None:
        return None
    return content.to_display_text()
