"""Concrete placeholder extractor implementations."""

from docfill.strategies.extractors.document import (
    ByteHeuristicExtractor,
    ChainedExtractor,
    DocxTagExtractor,
    try_in_order,
)
from docfill.strategies.extractors.spreadsheet import SpreadsheetPlaceholderExtractor

__all__ = [
    "ByteHeuristicExtractor",
    "ChainedExtractor",
    "DocxTagExtractor",
    "SpreadsheetPlaceholderExtractor",
    "try_in_order",
]
