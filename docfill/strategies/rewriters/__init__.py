"""Concrete document rewriter implementations."""

from docfill.strategies.rewriters.document import DocxTagRewriter
from docfill.strategies.rewriters.spreadsheet import SpreadsheetRewriter

__all__ = [
    "DocxTagRewriter",
    "SpreadsheetRewriter",
]
